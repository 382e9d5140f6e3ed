"""Conversion experiment statistics: proportion tests and power analysis."""

import logging
import math
from typing import Optional, Tuple
import numpy as np
from scipy import stats

from . import formatting
from .base_models import PowerAnalysis, StatisticalTest
from .config import AnalyticsConfig
from .exceptions import ValidationError
from .validation import SampleValidator, clamp_probability

logger = logging.getLogger(__name__)


class ExperimentAnalyzer:
    """
    Frequentist statistics for A/B conversion experiments.

    Rates are conversions / visitors. Comparisons use the pooled two-proportion
    z-test; intervals use the normal approximation at ``confidence_level``.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize experiment analyzer.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()

    def two_proportion_test(
        self,
        control_conversions: int,
        control_visitors: int,
        variant_conversions: int,
        variant_visitors: int
    ) -> StatisticalTest:
        """
        Test whether the variant converts at a different rate than control.

        Args:
            control_conversions: Conversions in the control group
            control_visitors: Visitors in the control group
            variant_conversions: Conversions in the variant group
            variant_visitors: Visitors in the variant group

        Returns:
            StatisticalTest whose interval brackets variant rate minus control rate

        Raises:
            ValidationError: For empty groups or conversions exceeding visitors
        """
        self._check_counts(control_conversions, control_visitors, "control")
        self._check_counts(variant_conversions, variant_visitors, "variant")

        control_rate = control_conversions / control_visitors
        variant_rate = variant_conversions / variant_visitors
        difference = variant_rate - control_rate

        pooled_rate = (control_conversions + variant_conversions) / (control_visitors + variant_visitors)
        pooled_se = math.sqrt(
            pooled_rate * (1 - pooled_rate) * (1 / control_visitors + 1 / variant_visitors)
        )

        if pooled_se == 0:
            # Both groups all-converted or none-converted
            statistic = 0.0
            p_value = 1.0
        else:
            statistic = difference / pooled_se
            p_value = clamp_probability(2 * stats.norm.sf(abs(statistic)))

        alpha = self.config.significance_level
        is_significant = p_value < alpha

        # Unpooled standard error for the interval around the difference
        unpooled_se = math.sqrt(
            control_rate * (1 - control_rate) / control_visitors
            + variant_rate * (1 - variant_rate) / variant_visitors
        )
        z_critical = float(stats.norm.ppf((1 + self.config.confidence_level) / 2))
        margin = z_critical * unpooled_se

        logger.debug(
            "Two-proportion test: control=%.4f variant=%.4f z=%.4f p=%.4g",
            control_rate, variant_rate, statistic, p_value
        )

        return StatisticalTest(
            name="Two-Proportion z-Test",
            statistic=float(statistic),
            p_value=p_value,
            degrees_of_freedom=float("inf"),
            is_significant=is_significant,
            interpretation=formatting.interpret_proportion_test(
                control_rate, variant_rate, statistic, p_value, is_significant, alpha
            ),
            critical_value=float(stats.norm.ppf(1 - alpha / 2)),
            confidence_interval=(difference - margin, difference + margin)
        )

    def proportion_confidence_interval(
        self,
        conversions: int,
        visitors: int
    ) -> Tuple[float, float]:
        """Wald interval for a single conversion rate, clipped to [0, 1]."""
        self._check_counts(conversions, visitors, "group")
        rate = conversions / visitors
        z_critical = float(stats.norm.ppf((1 + self.config.confidence_level) / 2))
        margin = z_critical * math.sqrt(rate * (1 - rate) / visitors)
        return (max(0.0, rate - margin), min(1.0, rate + margin))

    def power_analysis(
        self,
        baseline_rate: float,
        visitors_per_variant: int,
        minimum_detectable_effect: float,
        variants: int = 2,
        power: float = 0.8
    ) -> PowerAnalysis:
        """
        Sample size planning for a conversion experiment.

        Args:
            baseline_rate: Control conversion rate
            visitors_per_variant: Visitors each variant has received (or will)
            minimum_detectable_effect: Absolute lift in conversion rate to detect
            variants: Number of arms including control; comparisons against
                control are Bonferroni-corrected
            power: Target probability of detecting the effect

        Returns:
            PowerAnalysis

        Raises:
            ValidationError: For rates outside (0, 1) or non-positive sizes
        """
        p1 = self.validator.validate_probability(baseline_rate, "baseline_rate")
        target_power = self.validator.validate_probability(power, "power")
        if minimum_detectable_effect == 0:
            raise ValidationError("minimum_detectable_effect must be non-zero")
        p2 = self.validator.validate_probability(p1 + minimum_detectable_effect, "target rate")
        if variants < 2:
            raise ValidationError(f"variants must be at least 2, got {variants}")
        if visitors_per_variant < 1:
            raise ValidationError(f"visitors_per_variant must be positive, got {visitors_per_variant}")

        alpha = self.config.significance_level / (variants - 1)
        z_alpha = stats.norm.ppf(1 - alpha / 2)
        z_beta = stats.norm.ppf(target_power)

        effect = abs(p2 - p1)
        p_bar = (p1 + p2) / 2
        null_sd = np.sqrt(2 * p_bar * (1 - p_bar))
        alt_sd = np.sqrt(p1 * (1 - p1) + p2 * (1 - p2))

        required = math.ceil(((z_alpha * null_sd + z_beta * alt_sd) / effect) ** 2)
        current_power = clamp_probability(
            stats.norm.cdf((effect * np.sqrt(visitors_per_variant) - z_alpha * null_sd) / alt_sd)
        )

        logger.debug(
            "Power analysis: baseline=%.4f effect=%.4f required=%d/variant current power=%.3f",
            p1, effect, required, current_power
        )

        return PowerAnalysis(
            current_power=current_power,
            required_sample_size=required,
            total_required_sample_size=required * variants,
            is_underpowered=current_power < target_power
        )

    def _check_counts(self, conversions: int, visitors: int, group: str) -> None:
        if visitors <= 0:
            raise ValidationError(f"{group} visitors must be positive, got {visitors}")
        if conversions < 0 or conversions > visitors:
            raise ValidationError(
                f"{group} conversions must be between 0 and visitors ({conversions} of {visitors})"
            )
