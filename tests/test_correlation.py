"""Tests for Pearson, Spearman and Kendall correlation."""

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from insight_analytics.config import AnalyticsConfig
from insight_analytics.correlation import CorrelationAnalyzer
from insight_analytics.exceptions import ValidationError


@pytest.fixture
def analyzer():
    return CorrelationAnalyzer()


@pytest.fixture
def noisy_pair():
    rng = np.random.default_rng(42)
    x = rng.normal(size=40)
    y = 0.6 * x + rng.normal(scale=0.8, size=40)
    return x, y


class TestPearson:
    """Test cases for Pearson correlation."""

    def test_perfect_linear(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4, 5], [2, 4, 6, 8, 10], "pearson")

        assert result.coefficient == pytest.approx(1.0, abs=1e-9)
        assert result.method == "pearson"
        assert result.strength == "very_strong"
        assert result.direction == "positive"
        assert result.is_significant

    def test_self_correlation(self, analyzer, noisy_pair):
        x, _ = noisy_pair
        result = analyzer.correlation_analysis(x, x)

        assert result.coefficient == pytest.approx(1.0)
        assert result.strength == "very_strong"
        assert result.direction == "positive"

    def test_negative(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4, 5], [9, 7, 6, 3, 1])
        assert result.direction == "negative"
        assert result.coefficient < -0.9

    def test_constant_series_has_no_correlation(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4], [5, 5, 5, 5])

        assert result.coefficient == 0.0
        assert result.direction == "none"
        assert result.strength == "none"
        assert not result.is_significant

    def test_matches_numpy(self, analyzer, noisy_pair):
        x, y = noisy_pair
        result = analyzer.correlation_analysis(x, y)
        assert result.coefficient == pytest.approx(np.corrcoef(x, y)[0, 1])
        assert result.sample_size == 40

    def test_confidence_interval_contains_coefficient(self, analyzer, noisy_pair):
        x, y = noisy_pair
        result = analyzer.correlation_analysis(x, y)

        low, high = result.confidence_interval
        assert -1 <= low < result.coefficient < high <= 1

    def test_three_points_interval_is_unbounded(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3], [1, 3, 2])
        assert result.confidence_interval == (-1.0, 1.0)

    def test_accepts_pandas_series(self, analyzer):
        result = analyzer.correlation_analysis(pd.Series([1, 2, 3, 4]), pd.Series([2, 4, 5, 9]))
        assert result.coefficient > 0.9


class TestSpearman:
    """Test cases for Spearman rank correlation."""

    def test_monotone_nonlinear(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4, 5], [1, 4, 9, 16, 25], "spearman")

        assert result.method == "spearman"
        assert result.coefficient == pytest.approx(1.0, abs=0.1)

    def test_ties_use_average_ranks(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 2, 3, 4], [10, 20, 20, 30, 40], "spearman")
        assert result.coefficient == pytest.approx(1.0)


class TestKendall:
    """Test cases for Kendall's tau."""

    def test_perfect_concordance_uses_exact_distribution(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4, 5], [3, 6, 7, 8, 20], "kendall")

        assert result.coefficient == pytest.approx(1.0)
        # Only the identity and the reversal are as extreme: 2 / 5!
        assert result.p_value == pytest.approx(2 / 120)
        assert result.is_significant

    def test_perfect_discordance(self, analyzer):
        result = analyzer.correlation_analysis([1, 2, 3, 4], [4, 3, 2, 1], "kendall")

        assert result.coefficient == pytest.approx(-1.0)
        assert result.direction == "negative"

    def test_large_sample_with_ties(self, analyzer):
        x = list(range(20))
        y = [v // 2 for v in range(20)]
        result = analyzer.correlation_analysis(x, y, "kendall")

        # 10 of the 190 pairs are tied in y; the other 180 are concordant
        assert result.coefficient == pytest.approx(180 / 190)
        assert result.p_value == pytest.approx(stats.kendalltau(x, y).pvalue)
        assert result.p_value < 0.05

    def test_exact_p_value_small_n(self, analyzer):
        # n = 3 has 6 permutations; only the identity is as extreme on each side
        result = analyzer.correlation_analysis([1, 2, 3], [5, 7, 9], "kendall")
        assert result.p_value == pytest.approx(2 / 6)

    def test_exact_threshold_switches_to_normal_approximation(self):
        x, y = [1, 2, 3, 4, 5], [3, 6, 7, 8, 20]
        result = CorrelationAnalyzer(AnalyticsConfig(kendall_exact_max_n=0)).correlation_analysis(x, y, "kendall")

        assert result.p_value == pytest.approx(stats.kendalltau(x, y, method="asymptotic").pvalue)
        assert result.p_value != pytest.approx(2 / 120)

    def test_constant_series(self, analyzer):
        result = analyzer.correlation_analysis([4, 4, 4, 4], [1, 2, 3, 4], "kendall")

        assert result.coefficient == 0.0
        assert result.p_value == 1.0
        assert result.direction == "none"

    def test_large_sample(self, analyzer):
        rng = np.random.default_rng(7)
        x = rng.normal(size=20000)
        y = 0.5 * x + rng.normal(size=20000)
        result = analyzer.correlation_analysis(x, y, "kendall")

        assert result.coefficient == pytest.approx(stats.kendalltau(x, y).statistic)
        assert result.sample_size == 20000
        assert result.is_significant


class TestStrengthBuckets:
    """Strength labels follow |r| cut-offs."""

    @pytest.mark.parametrize("coefficient,expected", [
        (0.05, "none"),
        (0.2, "weak"),
        (0.4, "moderate"),
        (0.6, "strong"),
        (0.8, "very_strong"),
        (-0.8, "very_strong"),
    ])
    def test_classify_strength(self, coefficient, expected):
        assert CorrelationAnalyzer.classify_strength(coefficient).value == expected


class TestValidation:
    """Invalid input is rejected."""

    def test_length_mismatch(self, analyzer):
        with pytest.raises(ValidationError):
            analyzer.correlation_analysis([1, 2, 3], [1, 2, 3, 4])

    def test_too_few_points(self, analyzer):
        with pytest.raises(ValidationError):
            analyzer.correlation_analysis([1, 2], [1, 2])

    def test_unknown_method(self, analyzer):
        with pytest.raises(ValidationError):
            analyzer.correlation_analysis([1, 2, 3], [1, 2, 3], "distance")
