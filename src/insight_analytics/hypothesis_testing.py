"""Hypothesis tests: Student t-tests and chi-square goodness of fit."""

import logging
from typing import Any, Optional, Tuple
import numpy as np
from scipy import stats

from . import formatting
from .base_models import StatisticalTest, TestMode
from .config import AnalyticsConfig
from .exceptions import ValidationError
from .validation import SampleValidator, clamp_probability

logger = logging.getLogger(__name__)

TEST_NAMES = {
    TestMode.ONE_SAMPLE: "One-Sample t-Test",
    TestMode.TWO_SAMPLE: "Two-Sample t-Test (Welch)",
    TestMode.PAIRED: "Paired t-Test",
}


class HypothesisTester:
    """
    Parametric hypothesis tests for business metrics.

    Two-sample comparisons use Welch's test, which does not assume the two
    groups share a variance. p-values are two-tailed.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize tester.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()

    def t_test(
        self,
        sample1: Any,
        sample2: Optional[Any] = None,
        mode: str = "two-sample",
        hypothesized_mean: float = 0.0
    ) -> StatisticalTest:
        """
        Run a one-sample, two-sample (Welch) or paired t-test.

        Args:
            sample1: First sample (the only sample for one-sample tests)
            sample2: Second sample, required for two-sample and paired tests
            mode: 'one-sample', 'two-sample' or 'paired'
            hypothesized_mean: Mean under the null hypothesis (one-sample only)

        Returns:
            StatisticalTest with statistic, df, two-tailed p-value and interval

        Raises:
            ValidationError: For unknown modes, missing or mismatched samples,
                samples below two observations, or zero-variance data
        """
        try:
            test_mode = TestMode(mode)
        except ValueError:
            valid = ", ".join(m.value for m in TestMode)
            raise ValidationError(f"Unknown t-test mode '{mode}' (expected one of: {valid})")

        if test_mode is TestMode.ONE_SAMPLE:
            sample = self.validator.validate_sample(sample1, "sample1", min_size=2)
            if not np.isfinite(hypothesized_mean):
                raise ValidationError("hypothesized_mean must be finite")
            return self._one_sample(sample, float(hypothesized_mean), test_mode)

        if sample2 is None:
            raise ValidationError(f"{TEST_NAMES[test_mode]} requires two samples")

        if test_mode is TestMode.PAIRED:
            first, second = self.validator.validate_paired(
                sample1, sample2, min_size=2, names=("sample1", "sample2")
            )
            return self._one_sample(first - second, 0.0, test_mode)

        first = self.validator.validate_sample(sample1, "sample1", min_size=2)
        second = self.validator.validate_sample(sample2, "sample2", min_size=2)
        return self._welch(first, second)

    def chi_square_test(
        self,
        observed: Any,
        expected: Optional[Any] = None
    ) -> StatisticalTest:
        """
        Chi-square goodness-of-fit test.

        Args:
            observed: Observed counts per category (at least two categories)
            expected: Expected counts; a uniform distribution when omitted

        Returns:
            StatisticalTest with df = categories - 1

        Raises:
            ValidationError: For negative observations, non-positive expected
                counts or mismatched category counts
        """
        obs = self.validator.validate_sample(observed, "observed", min_size=2)
        if np.any(obs < 0):
            raise ValidationError("observed counts must be non-negative")

        if expected is None:
            exp = np.full(obs.size, obs.mean())
        else:
            exp = self.validator.validate_sample(expected, "expected", min_size=2)
            if exp.size != obs.size:
                raise ValidationError(
                    f"expected has {exp.size} categories but observed has {obs.size}"
                )

        if np.any(exp <= 0):
            raise ValidationError("expected counts must be positive")

        if not np.isclose(obs.sum(), exp.sum()):
            logger.debug(
                "Observed total %.4f differs from expected total %.4f", obs.sum(), exp.sum()
            )

        statistic = float(np.sum((obs - exp) ** 2 / exp))
        df = obs.size - 1
        p_value = clamp_probability(stats.chi2.sf(statistic, df))
        alpha = self.config.significance_level
        is_significant = p_value < alpha

        logger.debug("Chi-square: statistic=%.4f df=%d p=%.4g", statistic, df, p_value)

        return StatisticalTest(
            name="Chi-Square Goodness of Fit Test",
            statistic=statistic,
            p_value=p_value,
            degrees_of_freedom=float(df),
            is_significant=is_significant,
            interpretation=formatting.interpret_chi_square(
                statistic, df, p_value, is_significant, alpha
            ),
            critical_value=float(stats.chi2.ppf(1 - alpha, df))
        )

    def _one_sample(
        self,
        sample: np.ndarray,
        hypothesized_mean: float,
        mode: TestMode
    ) -> StatisticalTest:
        """One-sample test; paired tests arrive here with the differences."""
        n = sample.size
        mean = float(sample.mean())
        standard_error = float(sample.std(ddof=1)) / np.sqrt(n)

        if standard_error == 0:
            raise ValidationError(
                f"{TEST_NAMES[mode]} is undefined for a sample with zero variance"
            )

        statistic = (mean - hypothesized_mean) / standard_error
        df = n - 1

        return self._build_result(
            mode=mode,
            statistic=statistic,
            df=float(df),
            center=mean,
            standard_error=standard_error
        )

    def _welch(self, sample1: np.ndarray, sample2: np.ndarray) -> StatisticalTest:
        """Welch's unequal-variance two-sample test."""
        n1, n2 = sample1.size, sample2.size
        term1 = float(sample1.var(ddof=1)) / n1
        term2 = float(sample2.var(ddof=1)) / n2
        standard_error = np.sqrt(term1 + term2)

        if standard_error == 0:
            raise ValidationError(
                "Two-Sample t-Test (Welch) is undefined when both samples have zero variance"
            )

        difference = float(sample1.mean() - sample2.mean())
        statistic = difference / standard_error

        # Welch-Satterthwaite approximation
        df = (term1 + term2) ** 2 / (term1 ** 2 / (n1 - 1) + term2 ** 2 / (n2 - 1))

        return self._build_result(
            mode=TestMode.TWO_SAMPLE,
            statistic=float(statistic),
            df=float(df),
            center=difference,
            standard_error=float(standard_error)
        )

    def _build_result(
        self,
        mode: TestMode,
        statistic: float,
        df: float,
        center: float,
        standard_error: float
    ) -> StatisticalTest:
        alpha = self.config.significance_level
        p_value = clamp_probability(2 * stats.t.sf(abs(statistic), df))
        is_significant = p_value < alpha

        logger.debug(
            "%s: t=%.4f df=%.3f p=%.4g", TEST_NAMES[mode], statistic, df, p_value
        )

        return StatisticalTest(
            name=TEST_NAMES[mode],
            statistic=float(statistic),
            p_value=p_value,
            degrees_of_freedom=df,
            is_significant=is_significant,
            interpretation=formatting.interpret_t_test(
                mode.value, statistic, df, p_value, is_significant, alpha
            ),
            critical_value=float(stats.t.ppf(1 - alpha / 2, df)),
            confidence_interval=self._interval(center, standard_error, df)
        )

    def _interval(self, center: float, standard_error: float, df: float) -> Tuple[float, float]:
        """Two-sided t interval at the configured confidence level."""
        margin = float(stats.t.ppf((1 + self.config.confidence_level) / 2, df)) * standard_error
        return (center - margin, center + margin)
