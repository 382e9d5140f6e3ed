"""Trend, seasonality and change point analysis of a single series."""

import logging
from typing import Any, List, Optional
import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.stattools import acf

from .anomaly_detection import AnomalyDetector
from .base_models import Seasonality, TrendAnalysis, TrendDirection
from .config import AnalyticsConfig
from .exceptions import ValidationError
from .forecasting import TrendForecaster
from .regression import RegressionAnalyzer
from .validation import SampleValidator

logger = logging.getLogger(__name__)

MAX_SEASONAL_LAG = 24


class TrendAnalyzer:
    """
    Decomposes a series into a linear trend plus diagnostics.

    Steps, in order: fit a line against the index or caller timestamps,
    look for a seasonal period in the detrended series, locate mean shifts,
    flag anomalies and extend the trend into a forecast. Change points and
    anomalies are always measured against the fitted line, so neither the
    trend nor the significance level that classifies it decides which
    points are flagged.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize trend analyzer.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()
        self.regression = RegressionAnalyzer(self.config)
        self.anomaly_detector = AnomalyDetector(self.config)
        self.forecaster = TrendForecaster(self.config)

    def trend_analysis(
        self,
        data: Any,
        timestamps: Optional[Any] = None,
        periods: Optional[int] = None
    ) -> TrendAnalysis:
        """
        Analyze a time-ordered series.

        Args:
            data: Series values in time order
            timestamps: Strictly increasing x positions of the values; the
                index 0..n-1 when omitted
            periods: Forecast horizon; defaults to 20% of the length, capped
                at ``max_forecast_horizon``

        Returns:
            TrendAnalysis

        Raises:
            ValidationError: If the series is empty or non-finite, timestamps
                do not align or increase, or ``periods`` < 1
        """
        if timestamps is None:
            values = self.validator.validate_sample(data, "series", min_size=1)
            index = np.arange(values.size, dtype=float)
        else:
            values, index = self.validator.validate_paired(
                data, timestamps, min_size=1, names=("series", "timestamps")
            )
            if np.any(np.diff(index) <= 0):
                raise ValidationError("timestamps must be strictly increasing")
        n = values.size

        if periods is None:
            periods = self.forecaster.default_horizon(n)
        elif periods < 1:
            raise ValidationError(f"periods must be at least 1, got {periods}")

        if n < self.config.min_trend_length:
            logger.debug("Series of length %d too short for trend analysis", n)
            return TrendAnalysis(
                trend=TrendDirection.STABLE,
                strength=0.0,
                forecast=self.forecaster.flat_forecast(values, periods)
            )

        fit = self.regression.multiple_regression(values, index)
        slope = fit.coefficients[1]
        # With one predictor the F-test p-value equals the slope t-test p-value
        p_value = fit.p_value

        level = float(np.mean(np.abs(values)))
        strength = abs(slope) / level if level > 0 else abs(slope)
        trend = self._classify(slope, p_value, strength)

        residuals = np.asarray(fit.residuals)
        seasonality = self._detect_seasonality(residuals, values)
        change_points = self._detect_change_points(residuals, values)
        anomalies = self.anomaly_detector.detect_anomalies(values, baseline=np.asarray(fit.predictions))
        forecast = self.forecaster.forecast(
            values,
            fit,
            periods,
            index=index,
            seasonal_period=seasonality.period if seasonality else None
        )

        logger.debug(
            "Trend %s (slope=%.4g, p=%.4g, strength=%.4f), seasonality=%s, change points=%s",
            trend.value, slope, p_value, strength,
            seasonality.period if seasonality else None, change_points
        )

        return TrendAnalysis(
            trend=trend,
            strength=float(strength),
            slope=float(slope),
            p_value=p_value,
            seasonality=seasonality,
            change_points=change_points,
            anomalies=anomalies,
            forecast=forecast
        )

    def _classify(self, slope: float, p_value: float, strength: float) -> TrendDirection:
        if p_value >= self.config.significance_level or strength <= self.config.tolerance:
            return TrendDirection.STABLE
        return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING

    def _detect_seasonality(
        self,
        residuals: np.ndarray,
        values: np.ndarray
    ) -> Optional[Seasonality]:
        """
        Strongest autocorrelation lag of the detrended series.

        A lag qualifies when its autocorrelation beats both the configured
        threshold and the two-sided white-noise bound z/sqrt(n).
        """
        n = residuals.size
        max_lag = min(n // 2, MAX_SEASONAL_LAG)
        if max_lag < 2:
            return None
        if np.std(residuals) <= self.config.tolerance * max(1.0, float(np.std(values))):
            return None

        autocorrelation = acf(residuals, nlags=max_lag, fft=False)

        # Smooth residuals decay monotonically; a period shows up as a local peak
        peaks = [
            lag for lag in range(2, max_lag + 1)
            if autocorrelation[lag] > autocorrelation[lag - 1]
            and (lag == max_lag or autocorrelation[lag] >= autocorrelation[lag + 1])
        ]
        if not peaks:
            return None
        best = max(peaks, key=lambda lag: autocorrelation[lag])

        z_critical = stats.norm.ppf(1 - self.config.significance_level / 2)
        threshold = max(self.config.seasonality_threshold, z_critical / np.sqrt(n))

        if autocorrelation[best] <= threshold:
            return None
        return Seasonality(period=int(best), strength=float(autocorrelation[best]))

    def _detect_change_points(
        self,
        reference: np.ndarray,
        values: np.ndarray
    ) -> List[int]:
        """
        Indices where the mean of the following window departs from the mean
        of the preceding window by more than ``change_point_threshold`` std.

        Adjacent candidate indices describe the same shift; only the largest
        one in each run is reported.
        """
        n = reference.size
        window = max(5, n // 10)
        if n < 2 * window:
            return []

        series = pd.Series(reference)
        scale = float(series.std(ddof=0))
        if scale <= self.config.tolerance * max(1.0, float(np.std(values))):
            return []

        rolling_mean = series.rolling(window).mean()
        before = rolling_mean.shift(1)
        after = rolling_mean.shift(-(window - 1))
        shift = (after - before).abs()

        candidates = shift[shift > self.config.change_point_threshold * scale].dropna()

        change_points: List[int] = []
        run: List[int] = []
        for index in candidates.index:
            if run and index != run[-1] + 1:
                change_points.append(int(shift.loc[run].idxmax()))
                run = []
            run.append(int(index))
        if run:
            change_points.append(int(shift.loc[run].idxmax()))

        return change_points
