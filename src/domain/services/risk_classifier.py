"""Risk classifier: exceedance probability, risk level and recommended action."""

from __future__ import annotations

from src.domain.entities.prediction import RecommendedAction, RiskLevel
from src.domain.services.environment_factors import (
    CRITICAL_THRESHOLD,
    WARNING_THRESHOLD,
)

_EXCEEDANCE_STEPS = (
    (0.1, 0.80),
    (0.2, 0.50),
    (0.3, 0.30),
)
EXCEEDED_PROBABILITY = 0.95
DISTANT_PROBABILITY = 0.10

_ACTIONS = {
    RiskLevel.CRITICAL: RecommendedAction.IMMEDIATE_TREATMENT,
    RiskLevel.HIGH: RecommendedAction.SCHEDULE_TREATMENT,
    RiskLevel.MEDIUM: RecommendedAction.MONITOR,
    RiskLevel.LOW: RecommendedAction.NO_ACTION,
}


def exceedance_probability(predicted: float, limit: float) -> float:
    """Step function of the signed headroom ``limit - predicted``."""
    headroom = limit - predicted
    if headroom <= 0:
        return EXCEEDED_PROBABILITY
    for upper_bound, probability in _EXCEEDANCE_STEPS:
        if headroom < upper_bound:
            return probability
    return DISTANT_PROBABILITY


def classify_risk(predicted: float, probability: float, limit: float) -> RiskLevel:
    """First matching rule wins, most severe first."""
    if predicted >= CRITICAL_THRESHOLD or probability >= 0.9:
        return RiskLevel.CRITICAL
    if predicted >= limit or probability >= 0.7:
        return RiskLevel.HIGH
    if predicted >= WARNING_THRESHOLD or probability >= 0.4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def recommend_action(level: RiskLevel) -> RecommendedAction:
    return _ACTIONS[level]
