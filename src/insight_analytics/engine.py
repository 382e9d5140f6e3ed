"""Analytics engine: configuration holder and entry point for every analysis."""

import logging
import threading
from typing import Any, List, Mapping, Optional, Tuple, Union
import pandas as pd

from .base_models import (
    AutomatedInsight,
    CorrelationAnalysis,
    PowerAnalysis,
    RegressionResult,
    StatisticalTest,
    TrendAnalysis
)
from .config import AnalyticsConfig, get_settings
from .correlation import CorrelationAnalyzer
from .experiments import ExperimentAnalyzer
from .hypothesis_testing import HypothesisTester
from .regression import RegressionAnalyzer
from .synthesizer import InsightSynthesizer
from .trend_analysis import TrendAnalyzer

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """
    Statistical analytics engine.

    The configuration is an immutable value swapped atomically by
    ``configure``. Each call reads it once and hands that snapshot to the
    analyzer it builds, so a concurrent reconfiguration never changes a
    computation already in progress.

    Example:
        engine = AnalyticsEngine()
        engine.configure(significance_level=0.01)
        result = engine.t_test([12, 14, 16], [10, 12, 14])
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize engine.

        Args:
            config: Starting configuration (library defaults when omitted)
        """
        self._config = config or AnalyticsConfig()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "AnalyticsEngine":
        """Build an engine configured from ANALYTICS_* environment variables."""
        return cls(get_settings().to_config())

    def configure(self, **options: Any) -> AnalyticsConfig:
        """
        Merge ``options`` into the current configuration.

        Keys may be snake_case or camelCase (``significance_level`` or
        ``significanceLevel``).

        Returns:
            The new effective configuration

        Raises:
            ValidationError: For unknown keys or out-of-range values; the
                previous configuration stays in effect
        """
        with self._lock:
            self._config = self._config.merge(**options)
            config = self._config
        logger.info("Analytics configuration updated: %s", sorted(options))
        return config

    def get_config(self) -> AnalyticsConfig:
        """Current configuration snapshot."""
        with self._lock:
            return self._config

    def t_test(
        self,
        sample1: Any,
        sample2: Optional[Any] = None,
        mode: str = "two-sample",
        hypothesized_mean: float = 0.0
    ) -> StatisticalTest:
        """
        One-sample, Welch two-sample or paired t-test.

        See ``HypothesisTester.t_test``.
        """
        return HypothesisTester(self.get_config()).t_test(
            sample1, sample2, mode=mode, hypothesized_mean=hypothesized_mean
        )

    def chi_square_test(self, observed: Any, expected: Optional[Any] = None) -> StatisticalTest:
        """Chi-square goodness of fit; uniform expected counts when omitted."""
        return HypothesisTester(self.get_config()).chi_square_test(observed, expected)

    def correlation_analysis(self, x: Any, y: Any, method: str = "pearson") -> CorrelationAnalysis:
        """Pearson, Spearman or Kendall correlation of two equally long series."""
        return CorrelationAnalyzer(self.get_config()).correlation_analysis(x, y, method=method)

    def multiple_regression(self, y: Any, X: Any) -> RegressionResult:
        """Ordinary least squares of ``y`` on the predictor rows ``X`` plus an intercept."""
        return RegressionAnalyzer(self.get_config()).multiple_regression(y, X)

    def trend_analysis(
        self,
        series: Any,
        timestamps: Optional[Any] = None,
        periods: Optional[int] = None
    ) -> TrendAnalysis:
        """
        Trend, seasonality, change points, anomalies and forecast of one series.

        Args:
            series: Values in time order
            timestamps: Strictly increasing x positions (index 0..n-1 when omitted)
            periods: Forecast horizon (derived from the length when omitted)
        """
        return TrendAnalyzer(self.get_config()).trend_analysis(
            series, timestamps=timestamps, periods=periods
        )

    def generate_insights(
        self,
        data: Union[Mapping[str, Any], pd.DataFrame]
    ) -> List[AutomatedInsight]:
        """Ranked insights across named series (mapping or DataFrame columns)."""
        return InsightSynthesizer(self.get_config()).generate_insights(data)

    def insight_from_test(self, test: StatisticalTest, subject: str) -> AutomatedInsight:
        """Turn a hypothesis test result about ``subject`` into an insight."""
        return InsightSynthesizer(self.get_config()).insight_from_test(test, subject)

    def two_proportion_test(
        self,
        control_conversions: int,
        control_visitors: int,
        variant_conversions: int,
        variant_visitors: int
    ) -> StatisticalTest:
        """Pooled two-proportion z-test of variant against control conversion."""
        return ExperimentAnalyzer(self.get_config()).two_proportion_test(
            control_conversions, control_visitors, variant_conversions, variant_visitors
        )

    def proportion_confidence_interval(self, conversions: int, visitors: int) -> Tuple[float, float]:
        """Wald interval for one conversion rate, clipped to [0, 1]."""
        return ExperimentAnalyzer(self.get_config()).proportion_confidence_interval(conversions, visitors)

    def power_analysis(
        self,
        baseline_rate: float,
        visitors_per_variant: int,
        minimum_detectable_effect: float,
        variants: int = 2,
        power: float = 0.8
    ) -> PowerAnalysis:
        """Current power and required visitors per variant for an absolute lift."""
        return ExperimentAnalyzer(self.get_config()).power_analysis(
            baseline_rate,
            visitors_per_variant,
            minimum_detectable_effect,
            variants=variants,
            power=power
        )
