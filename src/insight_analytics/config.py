"""Engine configuration management."""

import logging
from functools import lru_cache
from typing import Any, Dict

import pydantic
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class AnalyticsConfig(BaseModel):
    """
    Immutable configuration read by every analysis.

    ``significance_level`` and ``confidence_level`` are independent knobs:
    the first drives ``is_significant`` classification, the second the width
    of every reported interval.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True
    )

    significance_level: float = Field(default=0.05, gt=0, lt=1)
    confidence_level: float = Field(default=0.95, gt=0, lt=1)
    max_iterations: int = Field(default=1000, ge=1)
    tolerance: float = Field(default=1e-8, gt=0)
    robust_methods: bool = True

    # Detection thresholds
    anomaly_threshold: float = Field(default=2.5, gt=0, description="|z| above which a point is an anomaly")
    outlier_threshold: float = Field(default=2.5, gt=0, description="|standardized residual| marking an outlier")
    change_point_threshold: float = Field(default=2.0, gt=0, description="Mean shift, in series std units")
    seasonality_threshold: float = Field(default=0.3, gt=0, lt=1, description="Minimum autocorrelation for a period")

    # Method selection
    kendall_exact_max_n: int = Field(default=10, ge=0, description="Largest n using the exact Kendall distribution")
    min_trend_length: int = Field(default=4, ge=3)
    max_forecast_horizon: int = Field(default=12, ge=1)

    def merge(self, **options: Any) -> "AnalyticsConfig":
        """
        Return a new configuration with ``options`` applied on top of this one.

        Accepts snake_case field names or their camelCase aliases.

        Raises:
            ValidationError: If an option is unknown or out of range
        """
        values = self.model_dump()
        values.update(_normalize_keys(options))
        try:
            return AnalyticsConfig(**values)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid analytics configuration: {e}") from e


def _normalize_keys(options: Dict[str, Any]) -> Dict[str, Any]:
    aliases = {
        field.alias: name
        for name, field in AnalyticsConfig.model_fields.items()
        if field.alias
    }
    return {aliases.get(key, key): value for key, value in options.items()}


class AnalyticsSettings(BaseSettings):
    """Environment defaults for engines built with ``AnalyticsEngine.from_settings``."""

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    significance_level: float = 0.05
    confidence_level: float = 0.95
    max_iterations: int = 1000
    tolerance: float = 1e-8
    robust_methods: bool = True

    anomaly_threshold: float = 2.5
    outlier_threshold: float = 2.5
    change_point_threshold: float = 2.0
    seasonality_threshold: float = 0.3

    kendall_exact_max_n: int = 10
    min_trend_length: int = 4
    max_forecast_horizon: int = 12

    def to_config(self) -> AnalyticsConfig:
        """Build a validated engine configuration from these settings."""
        try:
            return AnalyticsConfig(**self.model_dump())
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid analytics settings: {e}") from e


@lru_cache()
def get_settings() -> AnalyticsSettings:
    """Get cached settings instance, loading a local .env file first."""
    load_dotenv(find_dotenv(usecwd=True))
    settings = AnalyticsSettings()
    logger.debug("Loaded analytics settings: %s", settings.model_dump())
    return settings
