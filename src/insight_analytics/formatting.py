"""
Text rendering for analysis results.

Everything user-facing lives here so the numeric modules stay free of
wording. Functions take computed numbers and return strings or lists of
strings; none of them change a result.
"""

from typing import List, Sequence

DRIVER_KEYWORDS = (
    "spend", "advertising", "ad_", "marketing", "budget", "campaign",
    "cost", "email", "outreach", "promotion", "discount", "impressions",
    "traffic", "visits", "sessions", "calls", "demos"
)
OUTCOME_KEYWORDS = (
    "revenue", "sales", "conversion", "signup", "lead", "profit", "orders",
    "bookings", "deals", "pipeline", "retention", "mrr", "arr", "purchases"
)


def _verdict(is_significant: bool, p_value: float, alpha: float) -> str:
    if is_significant:
        return (
            f"statistically significant (p = {p_value:.4f} < {alpha}). "
            "We reject the null hypothesis."
        )
    return (
        f"not statistically significant (p = {p_value:.4f} >= {alpha}). "
        "We fail to reject the null hypothesis."
    )


def interpret_t_test(
    mode: str,
    statistic: float,
    degrees_of_freedom: float,
    p_value: float,
    is_significant: bool,
    alpha: float
) -> str:
    """Describe a t-test outcome."""
    label = mode.replace("-", " ").capitalize()
    return (
        f"{label} t-test result: t = {statistic:.3f} with {degrees_of_freedom:.2f} "
        f"degrees of freedom; the difference is {_verdict(is_significant, p_value, alpha)}"
    )


def interpret_chi_square(
    statistic: float,
    degrees_of_freedom: float,
    p_value: float,
    is_significant: bool,
    alpha: float
) -> str:
    """Describe a chi-square goodness-of-fit outcome."""
    if is_significant:
        detail = "The observed frequencies differ significantly from expected."
    else:
        detail = "The observed frequencies do not differ significantly from expected."
    return (
        f"Chi-square test result: χ² = {statistic:.3f} with {degrees_of_freedom:.0f} "
        f"degrees of freedom, p = {p_value:.4f} (α = {alpha}). {detail}"
    )


def interpret_proportion_test(
    control_rate: float,
    variant_rate: float,
    statistic: float,
    p_value: float,
    is_significant: bool,
    alpha: float
) -> str:
    """Describe a two-proportion z-test outcome."""
    lift = variant_rate - control_rate
    return (
        f"Two-proportion z-test result: z = {statistic:.3f}; variant converts at "
        f"{variant_rate:.2%} vs {control_rate:.2%} for control ({lift:+.2%}). "
        f"The difference is {_verdict(is_significant, p_value, alpha)}"
    )


def format_equation(coefficients: Sequence[float], precision: int = 4) -> str:
    """Render ``y = b0 + b1*x1 + ...`` with rounded coefficients."""
    # Adding 0.0 turns a rounded -0.0 into 0.0
    rounded = [round(float(coef), precision) + 0.0 for coef in coefficients]
    equation = f"y = {rounded[0]:.{precision}f}"
    for i, coef in enumerate(rounded[1:], start=1):
        sign = "-" if coef < 0 else "+"
        equation += f" {sign} {abs(coef):.{precision}f}*x{i}"
    return equation


def humanize(name: str) -> str:
    """Turn a series key like ``ad_spend`` into ``ad spend``."""
    return name.replace("_", " ").strip()


def is_driver(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in DRIVER_KEYWORDS)


def is_outcome(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in OUTCOME_KEYWORDS)


# Correlation insights

def correlation_title(strength: str, direction: str, x_name: str, y_name: str) -> str:
    label = strength.replace("_", " ").capitalize()
    return f"{label} {direction} correlation between {humanize(x_name)} and {humanize(y_name)}"


def correlation_description(
    strength: str,
    direction: str,
    coefficient: float,
    p_value: float,
    x_name: str,
    y_name: str,
    is_significant: bool,
    alpha: float
) -> str:
    if is_significant:
        tail = f"which is statistically significant (p < {alpha})"
    else:
        tail = f"which is borderline and not significant at α = {alpha} (p = {p_value:.4f})"
    return (
        f"There is a {strength.replace('_', ' ')} {direction} correlation "
        f"(r = {coefficient:.3f}) between {humanize(x_name)} and {humanize(y_name)}, {tail}."
    )


def correlation_evidence(
    coefficient: float,
    p_value: float,
    sample_size: int,
    confidence_interval: Sequence[float],
    confidence_level: float
) -> List[str]:
    return [
        f"Correlation coefficient: {coefficient:.3f}",
        f"P-value: {p_value:.4f}",
        f"Sample size: {sample_size}",
        f"{confidence_level:.0%} confidence interval: "
        f"[{confidence_interval[0]:.3f}, {confidence_interval[1]:.3f}]"
    ]


def correlation_recommendations(
    strength: str,
    direction: str,
    x_name: str,
    y_name: str
) -> List[str]:
    """
    Recommendations for a correlation between two series.

    When one series looks like an input (spend, campaigns, traffic) and the
    other like an outcome (revenue, sales, conversions), a strong positive
    relationship recommends investing more in the input.
    """
    recommendations = []
    x_label, y_label = humanize(x_name), humanize(y_name)
    strong = strength in ("strong", "very_strong")

    driver, outcome = None, None
    if is_driver(x_name) and is_outcome(y_name):
        driver, outcome = x_label, y_label
    elif is_driver(y_name) and is_outcome(x_name):
        driver, outcome = y_label, x_label

    if driver and strong and direction == "positive":
        recommendations.append(
            f"Consider increasing {driver} to lift {outcome}, and validate the effect with a controlled test"
        )
    elif driver and direction == "negative":
        recommendations.append(
            f"Review {driver}: higher values coincide with lower {outcome}"
        )

    if strong:
        recommendations.append(f"Consider using {x_label} as a predictor for {y_label} in regression models")
        recommendations.append("Monitor both metrics together as they move closely")

    if direction == "negative":
        recommendations.append(f"Investigate the inverse relationship between {x_label} and {y_label}")

    recommendations.append("Collect more data to validate this relationship")
    return recommendations


# Trend insights

def trend_title(name: str, trend: str) -> str:
    return f"{humanize(name).capitalize()} shows {trend} trend"


def trend_description(name: str, trend: str, strength: float, slope: float) -> str:
    return (
        f"{humanize(name).capitalize()} is {trend} by {abs(slope):.3f} per period "
        f"({strength:.1%} of its average level)."
    )


def trend_evidence(
    trend: str,
    strength: float,
    p_value: float,
    change_points: Sequence[int],
    forecast_values: Sequence[float]
) -> List[str]:
    evidence = [
        f"Trend type: {trend}",
        f"Trend strength: {strength:.3f}",
        f"Slope p-value: {p_value:.4f}",
        f"Change points detected: {len(change_points)}"
    ]
    if forecast_values:
        evidence.append(f"Next period forecast: {forecast_values[0]:.2f}")
    return evidence


def trend_recommendations(name: str, trend: str, change_points: Sequence[int]) -> List[str]:
    label = humanize(name)
    recommendations = []
    if trend == "increasing":
        recommendations.append(f"Monitor the upward trend in {label} for sustainability")
        recommendations.append("Plan for continued growth based on the trend projection")
    elif trend == "decreasing":
        recommendations.append(f"Investigate causes of the declining trend in {label}")
        recommendations.append("Implement corrective measures to reverse the trend")

    if change_points:
        indices = ", ".join(str(i) for i in change_points)
        recommendations.append(f"Analyze events around change points at index {indices}")
    return recommendations


def seasonality_title(name: str, period: int) -> str:
    return f"{humanize(name).capitalize()} repeats every {period} periods"


def seasonality_description(name: str, period: int, strength: float) -> str:
    return (
        f"{humanize(name).capitalize()} shows a seasonal pattern with period {period} "
        f"(autocorrelation {strength:.2f} after removing the trend)."
    )


def seasonality_recommendations(name: str) -> List[str]:
    return [
        f"Plan resources around the seasonal pattern in {humanize(name)}",
        "Compare periods at the same seasonal phase rather than back to back"
    ]


# Anomaly insights

def anomaly_title(name: str, count: int) -> str:
    noun = "anomaly" if count == 1 else "anomalies"
    return f"{count} {noun} detected in {humanize(name)}"


def anomaly_description(name: str, count: int, total: int) -> str:
    return (
        f"{count} of {total} points in {humanize(name)} deviate strongly from the "
        f"rest of the series ({count / total:.1%} of the data)."
    )


def anomaly_evidence(
    indices: Sequence[int],
    values: Sequence[float],
    scores: Sequence[float],
    total: int
) -> List[str]:
    evidence = [
        f"Number of anomalies: {len(indices)}",
        f"Anomaly rate: {len(indices) / total:.1%}",
        f"Max anomaly score: {max(scores):.2f}"
    ]
    for index, value, score in zip(indices, values, scores):
        evidence.append(f"Index {index}: value {value:.2f} (score {score:.2f})")
    return evidence


def anomaly_recommendations(name: str, indices: Sequence[int]) -> List[str]:
    listed = ", ".join(str(i) for i in indices)
    return [
        f"Investigate {humanize(name)} at index {listed} for data quality issues",
        "Consider external factors such as campaigns, holidays or outages around these points",
        "Review data collection processes around the anomaly periods"
    ]


# Hypothesis test insights

def hypothesis_title(subject: str, test_name: str, is_significant: bool) -> str:
    outcome = "significant difference" if is_significant else "no significant difference"
    return f"{test_name} finds {outcome} for {humanize(subject)}"


def hypothesis_evidence(
    statistic: float,
    p_value: float,
    degrees_of_freedom: float,
    confidence_interval
) -> List[str]:
    evidence = [
        f"Test statistic: {statistic:.3f}",
        f"P-value: {p_value:.4f}",
        f"Degrees of freedom: {degrees_of_freedom:.2f}"
    ]
    if confidence_interval is not None:
        evidence.append(
            f"Confidence interval: [{confidence_interval[0]:.3f}, {confidence_interval[1]:.3f}]"
        )
    return evidence


def hypothesis_recommendations(subject: str, is_significant: bool) -> List[str]:
    label = humanize(subject)
    if is_significant:
        return [
            f"Act on the measured difference in {label}",
            "Confirm the effect holds on a fresh sample before rolling out widely"
        ]
    return [
        f"Keep collecting data on {label} before drawing conclusions",
        "Check the test has enough power to detect the effect you care about"
    ]
