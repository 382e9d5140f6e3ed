"""Tests for A/B experiment statistics."""

import pytest

from insight_analytics.config import AnalyticsConfig
from insight_analytics.exceptions import ValidationError
from insight_analytics.experiments import ExperimentAnalyzer


@pytest.fixture
def analyzer():
    return ExperimentAnalyzer()


class TestTwoProportionTest:
    """Pooled two-proportion z-test."""

    def test_clear_winner(self, analyzer):
        result = analyzer.two_proportion_test(100, 1000, 150, 1000)

        assert result.name == "Two-Proportion z-Test"
        assert result.statistic == pytest.approx(3.38, abs=0.01)
        assert result.is_significant
        low, high = result.confidence_interval
        assert 0 < low < 0.05 < high

    def test_identical_rates(self, analyzer):
        result = analyzer.two_proportion_test(100, 1000, 100, 1000)

        assert result.statistic == 0.0
        assert result.p_value == pytest.approx(1.0)
        assert not result.is_significant

    def test_no_conversions_anywhere(self, analyzer):
        result = analyzer.two_proportion_test(0, 500, 0, 500)
        assert result.p_value == 1.0

    def test_label_swap_flips_sign(self, analyzer):
        forward = analyzer.two_proportion_test(80, 900, 110, 1000)
        backward = analyzer.two_proportion_test(110, 1000, 80, 900)

        assert forward.statistic == pytest.approx(-backward.statistic)
        assert forward.p_value == pytest.approx(backward.p_value)

    @pytest.mark.parametrize("counts", [
        (10, 0, 5, 100),
        (120, 100, 5, 100),
        (-1, 100, 5, 100),
    ])
    def test_invalid_counts(self, analyzer, counts):
        with pytest.raises(ValidationError):
            analyzer.two_proportion_test(*counts)


class TestProportionInterval:
    """Wald interval for one rate."""

    def test_half(self, analyzer):
        low, high = analyzer.proportion_confidence_interval(50, 100)
        assert low == pytest.approx(0.402, abs=1e-3)
        assert high == pytest.approx(0.598, abs=1e-3)

    def test_clipped_to_unit_interval(self, analyzer):
        low, high = analyzer.proportion_confidence_interval(1, 20)
        assert low == 0.0
        assert high < 1.0


class TestPowerAnalysis:
    """Sample size planning."""

    def test_ten_to_twelve_percent(self, analyzer):
        result = analyzer.power_analysis(0.10, 1000, 0.02)

        assert 3800 < result.required_sample_size < 3900
        assert result.total_required_sample_size == 2 * result.required_sample_size
        assert result.is_underpowered
        assert 0 < result.current_power < 0.5

    def test_enough_traffic(self, analyzer):
        result = analyzer.power_analysis(0.10, 10000, 0.02)
        assert not result.is_underpowered
        assert result.current_power > 0.8

    def test_more_variants_need_more_traffic(self, analyzer):
        two = analyzer.power_analysis(0.10, 1000, 0.02, variants=2)
        four = analyzer.power_analysis(0.10, 1000, 0.02, variants=4)
        assert four.required_sample_size > two.required_sample_size

    def test_stricter_alpha_needs_more_traffic(self):
        default = ExperimentAnalyzer().power_analysis(0.10, 1000, 0.02)
        strict = ExperimentAnalyzer(AnalyticsConfig(significance_level=0.01)).power_analysis(0.10, 1000, 0.02)
        assert strict.required_sample_size > default.required_sample_size

    @pytest.mark.parametrize("kwargs", [
        {"baseline_rate": 1.5, "visitors_per_variant": 100, "minimum_detectable_effect": 0.01},
        {"baseline_rate": 0.1, "visitors_per_variant": 100, "minimum_detectable_effect": 0.0},
        {"baseline_rate": 0.95, "visitors_per_variant": 100, "minimum_detectable_effect": 0.1},
        {"baseline_rate": 0.1, "visitors_per_variant": 100, "minimum_detectable_effect": 0.01, "variants": 1},
        {"baseline_rate": 0.1, "visitors_per_variant": 0, "minimum_detectable_effect": 0.01},
    ])
    def test_invalid_inputs(self, analyzer, kwargs):
        with pytest.raises(ValidationError):
            analyzer.power_analysis(**kwargs)
