"""Tests for text rendering helpers."""

from insight_analytics import formatting


def test_format_equation():
    assert formatting.format_equation([1.5, 2.0, -0.25]) == "y = 1.5000 + 2.0000*x1 - 0.2500*x2"


def test_humanize():
    assert formatting.humanize("ad_spend") == "ad spend"


def test_driver_and_outcome_keywords():
    assert formatting.is_driver("marketing_budget")
    assert formatting.is_outcome("monthly_revenue")
    assert not formatting.is_driver("leads")
    assert formatting.is_outcome("leads")


def test_driver_recommendation_for_strong_positive_pair():
    recommendations = formatting.correlation_recommendations(
        "very_strong", "positive", "revenue", "ad_spend"
    )
    assert recommendations[0].startswith("Consider increasing ad spend to lift revenue")


def test_negative_driver_recommendation():
    recommendations = formatting.correlation_recommendations(
        "strong", "negative", "discount_rate", "profit"
    )
    assert any("Review discount rate" in r for r in recommendations)
    assert any("inverse relationship" in r for r in recommendations)


def test_interpretations_mention_outcome():
    significant = formatting.interpret_t_test("one-sample", 3.2, 9, 0.01, True, 0.05)
    inconclusive = formatting.interpret_chi_square(1.2, 3, 0.75, False, 0.05)

    assert "t-test result" in significant
    assert "reject the null hypothesis" in significant
    assert "do not differ significantly" in inconclusive


def test_anomaly_recommendations_list_indices():
    recommendations = formatting.anomaly_recommendations("orders", [3, 17])
    assert "3, 17" in recommendations[0]


def test_format_equation_has_no_negative_zero():
    assert formatting.format_equation([-1e-12, 2.0]) == "y = 0.0000 + 2.0000*x1"
    assert formatting.format_equation([1.0, -1e-9]) == "y = 1.0000 + 0.0000*x1"
