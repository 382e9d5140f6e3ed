"""
Tests for the analytics engine facade.

Covers configuration management, configuration isolation, idempotence and
the end-to-end operations exposed to callers.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from insight_analytics import AnalyticsEngine, ValidationError
from insight_analytics.config import get_settings


@pytest.fixture
def engine():
    return AnalyticsEngine()


class TestConfiguration:
    """Configuration management."""

    def test_defaults(self, engine):
        config = engine.get_config()

        assert config.significance_level == 0.05
        assert config.confidence_level == 0.95
        assert config.max_iterations == 1000
        assert config.tolerance == 1e-8
        assert config.robust_methods is True

    def test_configure_merges(self, engine):
        config = engine.configure(significance_level=0.01, confidence_level=0.99, max_iterations=500)

        assert config.significance_level == 0.01
        assert config.confidence_level == 0.99
        assert config.max_iterations == 500
        assert config.tolerance == 1e-8
        assert engine.get_config() == config

    def test_configure_accepts_camel_case(self, engine):
        engine.configure(significanceLevel=0.01, robustMethods=False)

        config = engine.get_config()
        assert config.significance_level == 0.01
        assert config.robust_methods is False

    def test_unknown_option_keeps_previous_config(self, engine):
        before = engine.get_config()
        with pytest.raises(ValidationError):
            engine.configure(significance_level=0.01, smoothing=3)
        assert engine.get_config() == before

    def test_out_of_range_option(self, engine):
        with pytest.raises(ValidationError):
            engine.configure(confidence_level=1.5)

    def test_engines_are_independent(self):
        first = AnalyticsEngine()
        second = AnalyticsEngine()
        first.configure(significance_level=0.2)

        assert second.get_config().significance_level == 0.05

    def test_concurrent_configure(self, engine):
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: engine.configure(max_iterations=100 + i), range(50)))
        assert 100 <= engine.get_config().max_iterations < 150

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_SIGNIFICANCE_LEVEL", "0.01")
        monkeypatch.setenv("ANALYTICS_ANOMALY_THRESHOLD", "3.5")
        get_settings.cache_clear()
        try:
            engine = AnalyticsEngine.from_settings()
        finally:
            get_settings.cache_clear()

        assert engine.get_config().significance_level == 0.01
        assert engine.get_config().anomaly_threshold == 3.5


class TestConfigurationIsolation:
    """Alpha changes classification, never the computed values."""

    def test_t_test(self, engine):
        sample = [10, 12, 14, 16, 18, 20, 22, 24, 26, 28]
        engine.configure(significance_level=0.1)
        lenient = engine.t_test(sample, mode="one-sample", hypothesized_mean=15)
        engine.configure(significance_level=0.05)
        strict = engine.t_test(sample, mode="one-sample", hypothesized_mean=15)

        assert lenient.is_significant and not strict.is_significant
        assert lenient.statistic == strict.statistic
        assert lenient.p_value == strict.p_value

    def test_correlation(self, engine):
        x = [1, 2, 3, 4, 5, 6]
        y = [2, 1, 4, 3, 6, 3]
        engine.configure(significance_level=0.5)
        lenient = engine.correlation_analysis(x, y)
        engine.configure(significance_level=0.001)
        strict = engine.correlation_analysis(x, y)

        assert lenient.coefficient == strict.coefficient
        assert lenient.p_value == strict.p_value
        assert lenient.is_significant != strict.is_significant


class TestOperations:
    """End-to-end calls through the engine."""

    def test_pearson(self, engine):
        result = engine.correlation_analysis([1, 2, 3, 4, 5], [2, 4, 6, 8, 10], "pearson")
        assert result.coefficient == pytest.approx(1.0, abs=1e-9)
        assert result.is_significant

    def test_regression(self, engine):
        result = engine.multiple_regression([2, 4, 6, 8, 10], [[1], [2], [3], [4], [5]])
        assert result.r_squared == pytest.approx(1.0)
        assert result.type in ("simple", "multiple")
        assert "y =" in result.equation

    def test_chi_square(self, engine):
        result = engine.chi_square_test([10, 15, 12, 8], [11, 14, 13, 7])
        assert result.degrees_of_freedom == 3

    def test_trend(self, engine):
        result = engine.trend_analysis(list(range(1, 11)), periods=4)
        assert result.trend == "increasing"
        assert len(result.forecast.values) == 4

    def test_trend_with_timestamps(self, engine):
        result = engine.trend_analysis([10, 20, 40, 80], timestamps=[1, 2, 4, 8], periods=1)
        assert result.slope == pytest.approx(10.0)
        assert result.forecast.values == pytest.approx([100.0])

    def test_insights(self, engine):
        insights = engine.generate_insights({
            "sales": [100, 110, 120, 130, 140],
            "advertising": [10, 11, 12, 13, 14]
        })
        assert any(i.type == "correlation" for i in insights)

    def test_experiment_flow(self, engine):
        test = engine.two_proportion_test(100, 1000, 150, 1000)
        insight = engine.insight_from_test(test, "pricing page")
        power = engine.power_analysis(0.1, 1000, 0.05)

        assert test.is_significant
        assert insight.type == "test"
        assert power.required_sample_size > 0
        low, high = engine.proportion_confidence_interval(100, 1000)
        assert low < 0.1 < high

    def test_idempotent(self, engine):
        data = {
            "revenue": [5, 7, 6, 9, 12, 11, 14, 15, 13, 18],
            "marketing_spend": [1, 2, 2, 3, 4, 4, 5, 6, 5, 7]
        }
        assert engine.generate_insights(data) == engine.generate_insights(data)
        assert engine.trend_analysis(data["revenue"]) == engine.trend_analysis(data["revenue"])

    def test_camel_case_serialization(self, engine):
        result = engine.t_test([1, 2, 3, 4], [2, 3, 4, 6])
        dumped = result.model_dump(by_alias=True)

        assert "pValue" in dumped
        assert "degreesOfFreedom" in dumped
        assert "isSignificant" in dumped


@pytest.mark.parametrize("name", [
    "t_test",
    "chi_square_test",
    "correlation_analysis",
    "multiple_regression",
    "trend_analysis",
    "generate_insights",
    "insight_from_test",
    "two_proportion_test",
    "proportion_confidence_interval",
    "power_analysis",
])
def test_operations_are_documented(name):
    assert getattr(AnalyticsEngine, name).__doc__
