"""Correlation analysis between two metric series."""

import logging
from typing import Any, Optional, Tuple
import numpy as np
from scipy import stats

from .base_models import CorrelationAnalysis, CorrelationMethod, CorrelationStrength, Direction
from .config import AnalyticsConfig
from .exceptions import ValidationError
from .validation import SampleValidator, clamp_probability

logger = logging.getLogger(__name__)


class CorrelationAnalyzer:
    """
    Pearson, Spearman and Kendall correlation with significance testing.

    Confidence intervals use the Fisher z-transformation for every method.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize analyzer.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()

    def correlation_analysis(
        self,
        x: Any,
        y: Any,
        method: str = "pearson"
    ) -> CorrelationAnalysis:
        """
        Measure the association between two equally long series.

        Args:
            x: First series
            y: Second series
            method: 'pearson', 'spearman' or 'kendall'

        Returns:
            CorrelationAnalysis with coefficient, p-value, strength and interval

        Raises:
            ValidationError: For unknown methods, mismatched lengths or fewer
                than three observations
        """
        try:
            corr_method = CorrelationMethod(method)
        except ValueError:
            valid = ", ".join(m.value for m in CorrelationMethod)
            raise ValidationError(f"Unknown correlation method '{method}' (expected one of: {valid})")

        x_arr, y_arr = self.validator.validate_paired(x, y, min_size=3)
        n = x_arr.size

        if corr_method is CorrelationMethod.PEARSON:
            coefficient = self._pearson(x_arr, y_arr)
            p_value = self._t_test_p_value(coefficient, n)
        elif corr_method is CorrelationMethod.SPEARMAN:
            coefficient = self._pearson(stats.rankdata(x_arr), stats.rankdata(y_arr))
            p_value = self._t_test_p_value(coefficient, n)
        else:
            coefficient, p_value = self._kendall(x_arr, y_arr)

        is_significant = p_value < self.config.significance_level

        logger.debug(
            "%s correlation: r=%.4f p=%.4g n=%d", corr_method.value, coefficient, p_value, n
        )

        return CorrelationAnalysis(
            method=corr_method,
            coefficient=coefficient,
            p_value=p_value,
            is_significant=is_significant,
            direction=self._direction(coefficient),
            strength=self.classify_strength(coefficient),
            confidence_interval=self._confidence_interval(coefficient, n),
            sample_size=n
        )

    @staticmethod
    def classify_strength(coefficient: float) -> CorrelationStrength:
        """Bucket |coefficient| into a strength label."""
        magnitude = abs(coefficient)
        if magnitude < 0.1:
            return CorrelationStrength.NONE
        elif magnitude < 0.3:
            return CorrelationStrength.WEAK
        elif magnitude < 0.5:
            return CorrelationStrength.MODERATE
        elif magnitude < 0.7:
            return CorrelationStrength.STRONG
        else:
            return CorrelationStrength.VERY_STRONG

    def _pearson(self, x: np.ndarray, y: np.ndarray) -> float:
        """Product-moment correlation; zero when either series is constant."""
        dx = x - x.mean()
        dy = y - y.mean()
        denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
        if denominator == 0:
            return 0.0
        return float(np.clip(np.sum(dx * dy) / denominator, -1.0, 1.0))

    def _t_test_p_value(self, coefficient: float, n: int) -> float:
        """Two-tailed p-value of t = r*sqrt(n-2)/sqrt(1-r^2) with n-2 df."""
        df = n - 2
        if abs(coefficient) >= 1.0:
            return 0.0
        t_statistic = coefficient * np.sqrt(df / (1.0 - coefficient ** 2))
        return clamp_probability(2 * stats.t.sf(abs(t_statistic), df))

    def _kendall(self, x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
        """
        Kendall's tau-a, (C - D) / (n(n-1)/2), with its two-tailed p-value.

        scipy computes tau-b and a tie-corrected p-value in O(n log n); tau-a
        follows from tau-b by rescaling with the tied pair counts. Small untied
        samples use the exact permutation distribution.
        """
        n = x.size
        pairs = n * (n - 1) // 2
        untied_x = pairs - _tied_pairs(x)
        untied_y = pairs - _tied_pairs(y)
        if untied_x == 0 or untied_y == 0:
            return 0.0, 1.0

        has_ties = untied_x < pairs or untied_y < pairs
        method = "exact" if n <= self.config.kendall_exact_max_n and not has_ties else "asymptotic"
        result = stats.kendalltau(x, y, method=method)

        tau = float(result.statistic) * np.sqrt(float(untied_x) * float(untied_y)) / pairs
        return float(np.clip(tau, -1.0, 1.0)), clamp_probability(result.pvalue)

    def _confidence_interval(self, coefficient: float, n: int) -> Tuple[float, float]:
        """Fisher z interval at the configured confidence level."""
        if n <= 3:
            return (-1.0, 1.0)
        if abs(coefficient) >= 1.0:
            return (coefficient, coefficient)

        z = np.arctanh(coefficient)
        standard_error = 1.0 / np.sqrt(n - 3)
        z_critical = stats.norm.ppf((1 + self.config.confidence_level) / 2)

        return (
            float(np.tanh(z - z_critical * standard_error)),
            float(np.tanh(z + z_critical * standard_error))
        )

    def _direction(self, coefficient: float) -> Direction:
        if coefficient > 0:
            return Direction.POSITIVE
        elif coefficient < 0:
            return Direction.NEGATIVE
        return Direction.NONE


def _tied_pairs(values: np.ndarray) -> int:
    """Number of pairs sharing the same value."""
    _, counts = np.unique(values, return_counts=True)
    return int(np.sum(counts * (counts - 1) // 2))
