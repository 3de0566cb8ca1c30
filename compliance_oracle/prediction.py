"""
Predictive Risk Engine

Forecasts future violations across a cohort of entities.

Per-entity model:
    risk_score = (100 - compliance_score)
               + violations * 15
               + 20 if stale for more than 720 blocks
               + escalation_level * 10

The score is unbounded above 100. Above 75 the entity is at risk and gets
an immediate-audit recommendation; above 80 it counts as a predicted
violation.

    confidence = (freshness + consistency) // 2
    freshness   = 90 if updated within 144 blocks, else 60
    consistency = 80 if fewer than 3 violations, else 50

Cohort aggregations read a point-in-time snapshot of the entity registry
and never write.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .bounds import bounded, capped_append
from .config import (
    AT_RISK_RECOMMENDATION,
    AT_RISK_THRESHOLD,
    CONSISTENCY_VIOLATIONS,
    CONSISTENT_CONFIDENCE,
    DATA_QUALITY_MIN_ENTITIES,
    ESCALATION_WEIGHT,
    FRESH_CONFIDENCE,
    FRESHNESS_WINDOW,
    HIGH_DATA_QUALITY,
    INCONSISTENT_CONFIDENCE,
    LOW_DATA_QUALITY,
    MAX_AT_RISK,
    MAX_COHORT,
    MAX_RECOMMENDATIONS,
    PREDICTED_VIOLATION_THRESHOLD,
    SCORE_MAX,
    STALE_CONFIDENCE,
    STALENESS_PENALTY,
    STALENESS_WINDOW,
    TREND_MARGIN,
    VIOLATION_WEIGHT,
)
from .records import Entity, RiskCategory, Trend
from .store import StateStore


@dataclass
class EntityForecast:
    """Forecast for a single entity."""
    entity: str
    risk_score: int
    confidence: int
    at_risk: bool
    predicted_violation: bool
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "entity": self.entity,
            "risk_score": self.risk_score,
            "confidence": self.confidence,
            "at_risk": self.at_risk,
            "predicted_violation": self.predicted_violation,
        }
        if self.recommendation:
            d["recommendation"] = self.recommendation
        return d


@dataclass
class RiskProfile:
    """Cohort risk distribution folded over the entity list."""
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0
    total_violations: int = 0
    average_score: int = 0
    trend: Trend = Trend.STABLE

    @property
    def assessed(self) -> int:
        return self.high_risk + self.medium_risk + self.low_risk

    def to_dict(self) -> Dict[str, Any]:
        return {
            "high_risk": self.high_risk,
            "medium_risk": self.medium_risk,
            "low_risk": self.low_risk,
            "total_violations": self.total_violations,
            "average_score": self.average_score,
            "trend": self.trend.value,
        }


@dataclass
class RiskPrediction:
    """Cohort forecast."""
    predicted_violations: int = 0
    at_risk_entities: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    confidence: int = 0
    forecasts: List[EntityForecast] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "predicted_violations": self.predicted_violations,
            "at_risk_entities": list(self.at_risk_entities),
            "recommendations": list(self.recommendations),
            "confidence": self.confidence,
            "forecasts": [f.to_dict() for f in self.forecasts],
        }


def predictive_risk_score(entity: Entity, now: int) -> int:
    score = (SCORE_MAX - entity.compliance_score) + entity.violations * VIOLATION_WEIGHT
    if now - entity.last_updated > STALENESS_WINDOW:
        score += STALENESS_PENALTY
    score += entity.escalation_level * ESCALATION_WEIGHT
    return score


def prediction_confidence(entity: Entity, now: int) -> int:
    freshness = FRESH_CONFIDENCE if now - entity.last_updated < FRESHNESS_WINDOW else STALE_CONFIDENCE
    consistency = (
        CONSISTENT_CONFIDENCE if entity.violations < CONSISTENCY_VIOLATIONS
        else INCONSISTENT_CONFIDENCE
    )
    return (freshness + consistency) // 2


def forecast_entity(entity: Entity, now: int) -> EntityForecast:
    risk = predictive_risk_score(entity, now)
    at_risk = risk > AT_RISK_THRESHOLD
    return EntityForecast(
        entity=entity.identity,
        risk_score=risk,
        confidence=prediction_confidence(entity, now),
        at_risk=at_risk,
        predicted_violation=risk > PREDICTED_VIOLATION_THRESHOLD,
        recommendation=AT_RISK_RECOMMENDATION if at_risk else None,
    )


def trend_label(score: int, running_average: int) -> Trend:
    if score > running_average + TREND_MARGIN:
        return Trend.IMPROVING
    if score + TREND_MARGIN < running_average:
        return Trend.DECLINING
    return Trend.STABLE


def aggregate_risk_profile(entities: Sequence[Entity]) -> RiskProfile:
    """
    Fold the cohort into a risk profile.

    ``average_score`` is a pairwise running average starting from zero:
    each step halves the sum of the accumulator and the next score, so it
    is not the arithmetic mean. The trend compares each score with the
    accumulator before that step; the last comparison wins.
    """
    profile = RiskProfile()
    for entity in entities:
        if entity.risk_category == RiskCategory.HIGH:
            profile.high_risk += 1
        elif entity.risk_category == RiskCategory.MEDIUM:
            profile.medium_risk += 1
        elif entity.risk_category == RiskCategory.LOW:
            profile.low_risk += 1

        profile.total_violations += entity.violations
        profile.trend = trend_label(entity.compliance_score, profile.average_score)
        profile.average_score = (profile.average_score + entity.compliance_score) // 2
    return profile


def predict_risks(entities: Sequence[Entity], now: int) -> RiskPrediction:
    prediction = RiskPrediction()
    confidences = []

    for entity in entities:
        forecast = forecast_entity(entity, now)
        prediction.forecasts.append(forecast)
        confidences.append(forecast.confidence)

        if forecast.at_risk:
            capped_append(prediction.at_risk_entities, entity.identity, MAX_AT_RISK)
            if forecast.recommendation not in prediction.recommendations:
                capped_append(prediction.recommendations, forecast.recommendation, MAX_RECOMMENDATIONS)
        if forecast.predicted_violation:
            prediction.predicted_violations += 1

    if confidences:
        prediction.confidence = sum(confidences) // len(confidences)
    return prediction


def overall_confidence(profile: RiskProfile, prediction: RiskPrediction) -> int:
    """Average of data quality and the cohort's prediction confidence."""
    data_quality = (
        HIGH_DATA_QUALITY if profile.assessed > DATA_QUALITY_MIN_ENTITIES
        else LOW_DATA_QUALITY
    )
    return (data_quality + prediction.confidence) // 2


class PredictiveRiskEngine:
    """Read-only cohort analytics over the entity registry."""

    def __init__(self, store: StateStore):
        self.store = store

    def snapshot(self, entity_ids: Sequence[str]) -> List[Entity]:
        """
        Consistent view of the cohort, in request order.

        Unknown identities are skipped; duplicates are kept.
        """
        ids = bounded(entity_ids, MAX_COHORT, "entities")
        found = self.store.snapshot_entities(set(ids))
        return [found[i] for i in ids if i in found]

    def forecast(self, entity: Entity, now: int) -> EntityForecast:
        return forecast_entity(entity, now)

    def risk_profile(self, entity_ids: Sequence[str]) -> RiskProfile:
        return aggregate_risk_profile(self.snapshot(entity_ids))

    def predict(self, entity_ids: Sequence[str], now: int) -> RiskPrediction:
        return predict_risks(self.snapshot(entity_ids), now)
