"""
Application DTOs - Risk Score

Data Transfer Objects for composite population risk scores.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities.risk_score import CompositeRiskLevel, RiskScore


class ScoreDefaultsUsedDTO(BaseModel):
    mortality: bool = False
    environment: bool = False
    treatment: bool = False


class RiskScoreDTO(BaseModel):
    """DTO for one composite risk score."""

    id: UUID
    population_id: str
    lice_score: int = Field(..., ge=0, le=100)
    mortality_score: float = Field(..., ge=0, le=100)
    environment_score: int = Field(..., ge=0, le=100)
    treatment_score: int = Field(..., ge=0, le=100)
    overall_score: int
    risk_level: CompositeRiskLevel
    computed_at: datetime
    defaults_used: ScoreDefaultsUsedDTO

    @classmethod
    def from_domain(cls, score: RiskScore) -> "RiskScoreDTO":
        return cls(
            id=score.id,
            population_id=score.population_id,
            lice_score=score.lice_score,
            mortality_score=score.mortality_score,
            environment_score=score.environment_score,
            treatment_score=score.treatment_score,
            overall_score=score.overall_score,
            risk_level=score.risk_level,
            computed_at=score.computed_at,
            defaults_used=ScoreDefaultsUsedDTO(
                mortality=score.defaults_used.mortality,
                environment=score.defaults_used.environment,
                treatment=score.defaults_used.treatment,
            ),
        )


class RiskScoreOverviewDTO(BaseModel):
    """Current scores of every population with a fleet aggregate."""

    scores: List[RiskScoreDTO] = Field(default_factory=list)
    aggregate_score: Optional[int] = None
    aggregate_level: Optional[CompositeRiskLevel] = None
