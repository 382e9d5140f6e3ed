"""
Insight Analytics Engine

Statistical analysis of named business metric series, with every number
computed by fixed code and then rendered into plain-language insights.

Modules:
- hypothesis_testing: One-sample, Welch two-sample and paired t-tests; chi-square
- correlation: Pearson, Spearman and Kendall correlation with Fisher z intervals
- regression: QR-based least squares with fit diagnostics and outliers
- trend_analysis: Trend, seasonality, change points, anomalies and forecast
- experiments: Two-proportion z-test and power analysis for A/B tests
- synthesizer: Ranked insight generation across series
- engine: Configuration holder and entry point for every analysis
"""

import logging

from .base_models import (
    AnomalyReport,
    AutomatedInsight,
    CorrelationAnalysis,
    Forecast,
    PowerAnalysis,
    RegressionResult,
    Seasonality,
    StatisticalTest,
    TrendAnalysis
)
from .config import AnalyticsConfig, AnalyticsSettings, get_settings
from .exceptions import AnalyticsError, ConvergenceError, SingularMatrixError, ValidationError

from .hypothesis_testing import HypothesisTester
from .correlation import CorrelationAnalyzer
from .regression import RegressionAnalyzer
from .anomaly_detection import AnomalyDetector
from .forecasting import TrendForecaster
from .trend_analysis import TrendAnalyzer
from .experiments import ExperimentAnalyzer
from .synthesizer import InsightSynthesizer
from .engine import AnalyticsEngine

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Engine and configuration
    'AnalyticsEngine',
    'AnalyticsConfig',
    'AnalyticsSettings',
    'get_settings',

    # Result models
    'StatisticalTest',
    'CorrelationAnalysis',
    'RegressionResult',
    'TrendAnalysis',
    'Seasonality',
    'AnomalyReport',
    'Forecast',
    'AutomatedInsight',
    'PowerAnalysis',

    # Errors
    'AnalyticsError',
    'ValidationError',
    'SingularMatrixError',
    'ConvergenceError',

    # Analyzers
    'HypothesisTester',
    'CorrelationAnalyzer',
    'RegressionAnalyzer',
    'AnomalyDetector',
    'TrendForecaster',
    'TrendAnalyzer',
    'ExperimentAnalyzer',
    'InsightSynthesizer'
]
