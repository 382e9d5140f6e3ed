"""Trend extrapolation with prediction intervals."""

import logging
from typing import Optional
import numpy as np
from scipy import stats

from .base_models import Forecast, RegressionResult
from .config import AnalyticsConfig

logger = logging.getLogger(__name__)


class TrendForecaster:
    """
    Forecasts a series by extending its fitted linear trend.

    When a seasonal period is supplied, the mean detrended value of each
    seasonal phase is added back to the projection. Intervals are OLS
    prediction intervals, so they widen the further the forecast reaches
    from the centre of the observed positions.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize forecaster.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()

    def default_horizon(self, n: int) -> int:
        """20% of the series length, at least one and at most max_forecast_horizon."""
        return min(self.config.max_forecast_horizon, max(1, int(n * 0.2)))

    def forecast(
        self,
        values: np.ndarray,
        fit: RegressionResult,
        periods: int,
        index: Optional[np.ndarray] = None,
        seasonal_period: Optional[int] = None
    ) -> Forecast:
        """
        Project ``periods`` points past the end of ``values``.

        Future x positions continue from the last observed position in steps
        of the median observed spacing (one step for the default index).

        Args:
            values: Observed series
            fit: Linear fit of ``values`` against ``index``
            periods: Forecast horizon
            index: x positions of the observations; 0..n-1 when omitted
            seasonal_period: Detected period, if any

        Returns:
            Forecast with point predictions and paired interval bounds
        """
        n = values.size
        if index is None:
            index = np.arange(n, dtype=float)
        intercept, slope = fit.coefficients[0], fit.coefficients[1]
        residuals = np.asarray(fit.residuals)

        seasonal = np.zeros(seasonal_period or 1)
        if seasonal_period:
            phases = np.arange(n) % seasonal_period
            seasonal = np.array([residuals[phases == phase].mean() for phase in range(seasonal_period)])
            residuals = residuals - seasonal[phases]

        df = n - 2
        residual_std = np.sqrt(np.sum(residuals ** 2) / df)
        t_critical = float(stats.t.ppf((1 + self.config.confidence_level) / 2, df))
        index_mean = index.mean()
        ss_index = float(np.sum((index - index_mean) ** 2))

        step = float(np.median(np.diff(index)))
        steps_ahead = np.arange(1, periods + 1)
        future = index[-1] + step * steps_ahead
        predictions = intercept + slope * future
        if seasonal_period:
            predictions = predictions + seasonal[(n - 1 + steps_ahead) % seasonal_period]

        margins = t_critical * residual_std * np.sqrt(
            1.0 + 1.0 / n + (future - index_mean) ** 2 / ss_index
        )

        logger.debug(
            "Forecast %d periods (seasonal period=%s, residual std=%.4g)",
            periods, seasonal_period, residual_std
        )

        return Forecast(
            values=predictions.tolist(),
            confidence_intervals=[
                (float(p - m), float(p + m)) for p, m in zip(predictions, margins)
            ],
            periods=periods
        )

    def flat_forecast(self, values: np.ndarray, periods: int) -> Forecast:
        """Repeat the last observation; used when a series is too short to fit."""
        last = float(values[-1])
        margin = 0.0
        if values.size >= 2:
            z_critical = float(stats.norm.ppf((1 + self.config.confidence_level) / 2))
            margin = z_critical * float(np.std(values, ddof=1))

        return Forecast(
            values=[last] * periods,
            confidence_intervals=[(last - margin, last + margin)] * periods,
            periods=periods
        )
