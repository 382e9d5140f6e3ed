"""Insight synthesizer - converts statistical results to ranked business insights."""

import logging
import re
from itertools import combinations
from typing import Any, Dict, List, Mapping, Optional, Union
import numpy as np
import pandas as pd
from scipy import stats

from . import formatting
from .base_models import (
    AutomatedInsight,
    CorrelationAnalysis,
    CorrelationStrength,
    InsightSignificance,
    InsightType,
    StatisticalTest,
    TrendAnalysis,
    TrendDirection
)
from .config import AnalyticsConfig
from .correlation import CorrelationAnalyzer
from .trend_analysis import TrendAnalyzer
from .validation import SampleValidator, clamp_probability

logger = logging.getLogger(__name__)

MIN_CORRELATION = 0.3
MIN_BORDERLINE_CORRELATION = 0.5
HIGH_ANOMALY_RATE = 0.1

_TIER_RANK = {
    InsightSignificance.LOW.value: 0,
    InsightSignificance.MEDIUM.value: 1,
    InsightSignificance.HIGH.value: 2,
}


class InsightSynthesizer:
    """
    Converts statistical analysis results into human-readable insights.

    Takes numbers computed by the analyzers and produces:
    - Titles and plain English descriptions
    - Supporting evidence lines
    - Actionable recommendations
    - A significance tier used for ranking
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize synthesizer.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or AnalyticsConfig()
        self.validator = SampleValidator()
        self.correlation_analyzer = CorrelationAnalyzer(self.config)
        self.trend_analyzer = TrendAnalyzer(self.config)

    def generate_insights(
        self,
        data: Union[Mapping[str, Any], pd.DataFrame]
    ) -> List[AutomatedInsight]:
        """
        Scan named series for correlations, trends, seasonality and anomalies.

        Args:
            data: Mapping of series name to values, or a DataFrame whose
                columns are series

        Returns:
            Insights sorted by tier (high first), then by confidence

        Raises:
            ValidationError: If any series is empty or contains non-finite values
        """
        series = self._collect(data)
        insights: List[AutomatedInsight] = []

        for (x_name, x), (y_name, y) in combinations(series.items(), 2):
            if x.size != y.size or x.size < 3:
                logger.debug("Skipping pair %s/%s: lengths %d and %d", x_name, y_name, x.size, y.size)
                continue
            analysis = self.correlation_analyzer.correlation_analysis(x, y)
            insight = self._correlation_insight(analysis, x_name, y_name)
            if insight is not None:
                insights.append(insight)

        for name, values in series.items():
            trend = self.trend_analyzer.trend_analysis(values)
            insights.extend(self._trend_insights(trend, name, values.size))

        ranked = sorted(
            insights,
            key=lambda insight: (_TIER_RANK[insight.significance], insight.confidence),
            reverse=True
        )

        logger.info("Generated %d insights from %d series", len(ranked), len(series))
        return ranked

    def insight_from_test(self, test: StatisticalTest, subject: str) -> AutomatedInsight:
        """
        Turn a hypothesis test into an experiment insight.

        Args:
            test: Result of t_test, chi_square_test or two_proportion_test
            subject: Name of the metric or experiment being tested

        Returns:
            AutomatedInsight of type ``test``
        """
        alpha = self.config.significance_level
        if test.is_significant and test.p_value < alpha / 10:
            tier = InsightSignificance.HIGH
        elif test.is_significant:
            tier = InsightSignificance.MEDIUM
        else:
            tier = InsightSignificance.LOW

        return self._build(
            insight_id=f"test-{_slug(subject)}",
            insight_type=InsightType.TEST,
            category="experiment",
            title=formatting.hypothesis_title(subject, test.name, test.is_significant),
            description=test.interpretation,
            confidence=1.0 - test.p_value,
            tier=tier,
            evidence=formatting.hypothesis_evidence(
                test.statistic, test.p_value, test.degrees_of_freedom, test.confidence_interval
            ),
            recommendations=formatting.hypothesis_recommendations(subject, test.is_significant)
        )

    def _collect(self, data: Union[Mapping[str, Any], pd.DataFrame]) -> Dict[str, np.ndarray]:
        if isinstance(data, pd.DataFrame):
            items = [(str(column), data[column]) for column in data.columns]
        else:
            items = [(str(name), values) for name, values in data.items()]
        return {
            name: self.validator.validate_sample(values, name)
            for name, values in items
        }

    def _correlation_insight(
        self,
        analysis: CorrelationAnalysis,
        x_name: str,
        y_name: str
    ) -> Optional[AutomatedInsight]:
        """Report significant moderate+ correlations, and strong borderline ones at low tier."""
        magnitude = abs(analysis.coefficient)
        alpha = self.config.significance_level

        if analysis.is_significant and magnitude >= MIN_CORRELATION:
            if analysis.strength == CorrelationStrength.VERY_STRONG:
                tier = InsightSignificance.HIGH
            else:
                tier = InsightSignificance.MEDIUM
        elif magnitude >= MIN_BORDERLINE_CORRELATION and analysis.p_value < 2 * alpha:
            tier = InsightSignificance.LOW
        else:
            return None

        return self._build(
            insight_id=f"correlation-{_slug(x_name)}-{_slug(y_name)}",
            insight_type=InsightType.CORRELATION,
            category="correlation",
            title=formatting.correlation_title(analysis.strength, analysis.direction, x_name, y_name),
            description=formatting.correlation_description(
                analysis.strength,
                analysis.direction,
                analysis.coefficient,
                analysis.p_value,
                x_name,
                y_name,
                analysis.is_significant,
                alpha
            ),
            confidence=1.0 - analysis.p_value,
            tier=tier,
            evidence=formatting.correlation_evidence(
                analysis.coefficient,
                analysis.p_value,
                analysis.sample_size,
                analysis.confidence_interval,
                self.config.confidence_level
            ),
            recommendations=formatting.correlation_recommendations(
                analysis.strength, analysis.direction, x_name, y_name
            )
        )

    def _trend_insights(
        self,
        analysis: TrendAnalysis,
        name: str,
        length: int
    ) -> List[AutomatedInsight]:
        insights = []

        if analysis.trend != TrendDirection.STABLE:
            if analysis.strength > 0.1:
                tier = InsightSignificance.HIGH
            elif analysis.strength > 0.05:
                tier = InsightSignificance.MEDIUM
            else:
                tier = InsightSignificance.LOW

            insights.append(self._build(
                insight_id=f"trend-{_slug(name)}",
                insight_type=InsightType.TREND,
                category="trend",
                title=formatting.trend_title(name, analysis.trend),
                description=formatting.trend_description(
                    name, analysis.trend, analysis.strength, analysis.slope
                ),
                confidence=1.0 - analysis.p_value,
                tier=tier,
                evidence=formatting.trend_evidence(
                    analysis.trend,
                    analysis.strength,
                    analysis.p_value,
                    analysis.change_points,
                    analysis.forecast.values
                ),
                recommendations=formatting.trend_recommendations(
                    name, analysis.trend, analysis.change_points
                )
            ))

        if analysis.seasonality is not None:
            period = analysis.seasonality.period
            strength = analysis.seasonality.strength
            insights.append(self._build(
                insight_id=f"seasonality-{_slug(name)}",
                insight_type=InsightType.TREND,
                category="seasonality",
                title=formatting.seasonality_title(name, period),
                description=formatting.seasonality_description(name, period, strength),
                confidence=strength,
                tier=InsightSignificance.MEDIUM,
                evidence=[f"Period: {period}", f"Autocorrelation at lag {period}: {strength:.3f}"],
                recommendations=formatting.seasonality_recommendations(name)
            ))

        anomalies = analysis.anomalies
        if anomalies.indices:
            count = len(anomalies.indices)
            rate = count / length
            max_score = max(anomalies.scores)
            insights.append(self._build(
                insight_id=f"anomaly-{_slug(name)}",
                insight_type=InsightType.ANOMALY,
                category="anomaly",
                title=formatting.anomaly_title(name, count),
                description=formatting.anomaly_description(name, count, length),
                confidence=1.0 - 2 * stats.norm.sf(max_score),
                tier=InsightSignificance.HIGH if rate > HIGH_ANOMALY_RATE else InsightSignificance.MEDIUM,
                evidence=formatting.anomaly_evidence(
                    anomalies.indices, anomalies.values, anomalies.scores, length
                ),
                recommendations=formatting.anomaly_recommendations(name, anomalies.indices)
            ))

        return insights

    def _build(
        self,
        insight_id: str,
        insight_type: InsightType,
        category: str,
        title: str,
        description: str,
        confidence: float,
        tier: InsightSignificance,
        evidence: List[str],
        recommendations: List[str]
    ) -> AutomatedInsight:
        return AutomatedInsight(
            id=insight_id,
            type=insight_type,
            category=category,
            title=title,
            description=description,
            confidence=clamp_probability(confidence),
            significance=tier,
            supporting_evidence=evidence,
            recommendations=recommendations,
            actionable=tier in (InsightSignificance.MEDIUM, InsightSignificance.HIGH)
        )


def _slug(name: str) -> str:
    """Lowercase id fragment: ``Ad Spend`` -> ``ad-spend``."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
