"""Anomaly detection using z-scores."""

import logging
from typing import Any, Optional
import numpy as np

from .base_models import AnomalyReport
from .config import AnalyticsConfig
from .regression import standardize
from .validation import SampleValidator

logger = logging.getLogger(__name__)


class AnomalyDetector:
    """
    Statistical anomaly detection for univariate series.

    With ``robust_methods`` the z-score is built from the median and the
    median absolute deviation, so a single extreme point cannot inflate the
    scale and hide itself. Otherwise the classic mean/standard deviation
    z-score is used.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize anomaly detector.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()

    def detect_anomalies(
        self,
        data: Any,
        baseline: Optional[np.ndarray] = None
    ) -> AnomalyReport:
        """
        Flag points whose |z| exceeds ``config.anomaly_threshold``.

        Args:
            data: Series to scan
            baseline: Expected value per point (e.g. a fitted trend); scores
                are then computed on the deviations from it

        Returns:
            AnomalyReport with indices, original values and |z| scores
        """
        values = self.validator.validate_sample(data, "series")
        reference = values if baseline is None else values - baseline

        scale = float(np.std(reference))
        if scale <= self.config.tolerance * max(1.0, float(np.std(values))):
            return AnomalyReport()

        scores = np.abs(standardize(reference, scale, self.config.robust_methods))
        flagged = np.flatnonzero(scores > self.config.anomaly_threshold)

        logger.debug(
            "Anomaly scan (%s, detrended=%s): %d of %d points flagged",
            "robust" if self.config.robust_methods else "zscore",
            baseline is not None,
            flagged.size,
            values.size
        )

        return AnomalyReport(
            indices=flagged.tolist(),
            values=values[flagged].tolist(),
            scores=scores[flagged].tolist()
        )
