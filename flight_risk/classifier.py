"""
Flight Risk Scoring Engine - Classifier.

============================================================
PURPOSE
============================================================
Maps a numeric risk score to a discrete risk level and
derives the evaluation trend shown next to it.

============================================================
BANDS
============================================================
    score > 70        -> HIGH
    40 < score <= 70  -> MEDIUM
    score <= 40       -> LOW

Boundary values belong to the lower band. Scores at or
below zero (other than the failure sentinel, which never
reaches this module) are valid and classify as LOW.

============================================================
"""

from typing import Optional, Sequence

from .config import ClassificationConfig
from .types import (
    EvaluationTrend,
    FeatureVector,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
    ScorerResult,
)


def classify_risk(score: float, config: Optional[ClassificationConfig] = None) -> RiskLevel:
    """
    Classify a risk score.

    Args:
        score: Risk score, nominally 0-100
        config: Threshold configuration (defaults if omitted)

    Returns:
        RiskLevel classification
    """
    config = config or ClassificationConfig()

    if score > config.high_threshold:
        return RiskLevel.HIGH
    elif score > config.medium_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def derive_trend(recent_scores: Sequence[float]) -> EvaluationTrend:
    """
    Trend of the two most recent scores (most-recent-first).

    Fewer than two scores is STABLE.
    """
    if len(recent_scores) < 2:
        return EvaluationTrend.STABLE

    latest, previous = recent_scores[0], recent_scores[1]
    if latest < previous:
        return EvaluationTrend.FALLING
    if latest > previous:
        return EvaluationTrend.RISING
    return EvaluationTrend.STABLE


def build_factors(features: FeatureVector) -> RiskFactors:
    return RiskFactors(
        evaluation_trend=derive_trend(features.recent_scores),
        absences_90d=features.absences_90d,
        lates_90d=features.lates_90d,
        tenure_months=features.tenure_months,
    )


def build_assessment(
    person_id: str,
    features: FeatureVector,
    result: ScorerResult,
    config: Optional[ClassificationConfig] = None,
) -> RiskAssessment:
    """
    Combine a successful scorer result with the person's features.

    Raises:
        ValueError: If result is the failure sentinel
    """
    if result.is_failure:
        raise ValueError(f"No assessment available for {person_id}: scorer failed")

    return RiskAssessment(
        person_id=person_id,
        risk_score=result.risk_score,
        risk_level=classify_risk(result.risk_score, config),
        summary=result.summary,
        factors=build_factors(features),
    )
