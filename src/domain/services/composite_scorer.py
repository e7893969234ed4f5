"""
Composite risk scorer.

Blends the lice exceedance probability with mortality, water quality and
treatment effectiveness into a single 0-100 index. Environment and
treatment quality are inverted: better conditions lower the contributed risk.
"""

from __future__ import annotations

from typing import Optional

from src.domain.entities.risk_score import (
    CompositeRiskLevel,
    RiskScore,
    ScoreDefaultsUsed,
)
from src.domain.services.rounding import round_half_up

DEFAULT_MORTALITY_SCORE = 20.0
DEFAULT_ENVIRONMENT_SCORE = 80
DEFAULT_TREATMENT_SCORE = 50
MORTALITY_SCALE = 10.0

LICE_WEIGHT = 0.4
MORTALITY_WEIGHT = 0.2
ENVIRONMENT_WEIGHT = 0.2
TREATMENT_WEIGHT = 0.2


def lice_score(exceedance_probability: float) -> int:
    return int(round_half_up(exceedance_probability * 100))


def mortality_score(average_daily_mortality: Optional[float]) -> float:
    """Average daily dead fish over the trailing week, scaled x10 and capped."""
    if average_daily_mortality is None:
        return DEFAULT_MORTALITY_SCORE
    return min(100.0, average_daily_mortality * MORTALITY_SCALE)


def temperature_quality_score(temperature: float) -> int:
    """100 inside 8-14 degrees, stepping down outside it."""
    if temperature < 4 or temperature > 18:
        return 50
    if temperature < 6 or temperature > 16:
        return 70
    if temperature < 8 or temperature > 14:
        return 85
    return 100


def oxygen_quality_score(oxygen_percent: float) -> int:
    if oxygen_percent < 60:
        return 30
    if oxygen_percent < 70:
        return 50
    if oxygen_percent < 80:
        return 70
    if oxygen_percent < 90:
        return 85
    return 100


def environment_score(
    temperature: Optional[float], oxygen_percent: Optional[float]
) -> int:
    """Mean of the temperature and oxygen band scores.

    A missing measurement contributes the default "good" score.
    """
    if temperature is None and oxygen_percent is None:
        return DEFAULT_ENVIRONMENT_SCORE
    temp_part = (
        temperature_quality_score(temperature)
        if temperature is not None
        else DEFAULT_ENVIRONMENT_SCORE
    )
    oxygen_part = (
        oxygen_quality_score(oxygen_percent)
        if oxygen_percent is not None
        else DEFAULT_ENVIRONMENT_SCORE
    )
    return int(round_half_up((temp_part + oxygen_part) / 2))


def treatment_score(mean_effectiveness: Optional[float]) -> int:
    if mean_effectiveness is None:
        return DEFAULT_TREATMENT_SCORE
    return int(round_half_up(mean_effectiveness))


def overall_score(
    lice: float, mortality: float, environment: float, treatment: float
) -> int:
    weighted = (
        lice * LICE_WEIGHT
        + mortality * MORTALITY_WEIGHT
        + (100 - environment) * ENVIRONMENT_WEIGHT
        + (100 - treatment) * TREATMENT_WEIGHT
    )
    return int(round_half_up(weighted))


def composite_level(score: float) -> CompositeRiskLevel:
    if score >= 70:
        return CompositeRiskLevel.CRITICAL
    if score >= 50:
        return CompositeRiskLevel.HIGH
    if score >= 30:
        return CompositeRiskLevel.MODERATE
    return CompositeRiskLevel.LOW


def build_risk_score(
    population_id: str,
    exceedance_probability: float,
    mortality: float,
    environment: int,
    treatment: int,
    defaults_used: Optional[ScoreDefaultsUsed] = None,
) -> RiskScore:
    """Assemble a RiskScore from already-derived component scores."""
    lice = lice_score(exceedance_probability)
    overall = overall_score(lice, mortality, environment, treatment)
    return RiskScore(
        population_id=population_id,
        lice_score=lice,
        mortality_score=mortality,
        environment_score=environment,
        treatment_score=treatment,
        overall_score=overall,
        risk_level=composite_level(overall),
        defaults_used=defaults_used or ScoreDefaultsUsed(),
    )
