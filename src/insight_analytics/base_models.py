"""Result models for the analytics engine."""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TestMode(str, Enum):
    """Flavour of Student t-test."""
    ONE_SAMPLE = "one-sample"
    TWO_SAMPLE = "two-sample"
    PAIRED = "paired"


class CorrelationMethod(str, Enum):
    """Correlation coefficient family."""
    PEARSON = "pearson"
    SPEARMAN = "spearman"
    KENDALL = "kendall"


class CorrelationStrength(str, Enum):
    """Bucket of |coefficient|."""
    NONE = "none"
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very_strong"


class Direction(str, Enum):
    """Sign of a correlation."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


class RegressionType(str, Enum):
    """Simple (one predictor) or multiple regression."""
    SIMPLE = "simple"
    MULTIPLE = "multiple"


class TrendDirection(str, Enum):
    """Direction of a fitted linear trend."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class InsightType(str, Enum):
    """Kind of finding an insight reports."""
    CORRELATION = "correlation"
    TREND = "trend"
    ANOMALY = "anomaly"
    TEST = "test"


class InsightSignificance(str, Enum):
    """Ranking tier of an insight."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalyticsModel(BaseModel):
    """
    Base class for all result value objects.

    Results are frozen once returned. ``model_dump(by_alias=True)`` yields the
    camelCase shape expected by the HTTP layer. Infinite statistics (the F of
    a perfect fit, the degrees of freedom of a z-test) are written to JSON as
    ``Infinity`` rather than ``null``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        ser_json_inf_nan="constants"
    )


class StatisticalTest(AnalyticsModel):
    """Result of a hypothesis test."""

    name: str
    statistic: float
    p_value: float = Field(ge=0, le=1)
    degrees_of_freedom: float = Field(description="Non-integer for Welch's test")
    is_significant: bool = Field(description="p_value < significance_level")
    interpretation: str

    critical_value: Optional[float] = Field(
        default=None,
        description="Two-tailed critical value at the significance level"
    )
    confidence_interval: Optional[Tuple[float, float]] = Field(
        default=None,
        description="Interval for the tested mean or mean difference"
    )


class CorrelationAnalysis(AnalyticsModel):
    """Result of a correlation analysis between two series."""

    method: CorrelationMethod
    coefficient: float = Field(ge=-1, le=1)
    p_value: float = Field(ge=0, le=1)
    is_significant: bool
    direction: Direction
    strength: CorrelationStrength
    confidence_interval: Tuple[float, float]
    sample_size: int


class RegressionResult(AnalyticsModel):
    """Ordinary least squares fit with diagnostics."""

    type: RegressionType
    coefficients: List[float] = Field(description="Index 0 is the intercept")
    r_squared: float
    adjusted_r_squared: float
    f_statistic: float
    p_value: float = Field(ge=0, le=1)
    is_significant: bool
    equation: str
    outliers: List[int] = Field(default_factory=list)
    residuals: List[float] = Field(default_factory=list)

    standard_errors: List[float] = Field(default_factory=list)
    predictions: List[float] = Field(default_factory=list)
    degrees_of_freedom: Tuple[int, int] = Field(description="(model, residual) degrees of freedom")


class Seasonality(AnalyticsModel):
    """Detected seasonal period."""

    period: int = Field(ge=2)
    strength: float = Field(description="Autocorrelation at the detected lag")


class AnomalyReport(AnalyticsModel):
    """Points whose z-score exceeds the anomaly threshold."""

    indices: List[int] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)
    scores: List[float] = Field(default_factory=list, description="|z| per flagged point")


class Forecast(AnalyticsModel):
    """Forward extrapolation with prediction intervals."""

    values: List[float] = Field(default_factory=list)
    confidence_intervals: List[Tuple[float, float]] = Field(default_factory=list)
    periods: int = 0


class TrendAnalysis(AnalyticsModel):
    """Trend, seasonality, change points, anomalies and forecast of one series."""

    trend: TrendDirection
    strength: float = Field(ge=0, description="Relative slope per period")
    slope: float = 0.0
    p_value: float = Field(default=1.0, ge=0, le=1, description="Significance of the slope")
    seasonality: Optional[Seasonality] = None
    change_points: List[int] = Field(default_factory=list)
    anomalies: AnomalyReport = Field(default_factory=AnomalyReport)
    forecast: Forecast = Field(default_factory=Forecast)


class AutomatedInsight(AnalyticsModel):
    """Human-readable finding synthesized from one or more analyses."""

    id: str
    type: InsightType
    category: str
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    significance: InsightSignificance
    supporting_evidence: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    actionable: bool = False


class PowerAnalysis(AnalyticsModel):
    """Sample size planning for a two-proportion experiment."""

    current_power: float = Field(ge=0, le=1)
    required_sample_size: int = Field(description="Per variant")
    total_required_sample_size: int
    is_underpowered: bool
