"""Domain entities for the composite population risk score."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4


class CompositeRiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(slots=True)
class ScoreDefaultsUsed:
    """Which composite inputs fell back to defaults."""

    mortality: bool = False
    environment: bool = False
    treatment: bool = False


@dataclass
class RiskScore:
    """0-100 blend of lice, mortality, environment and treatment signals.

    Each computation is a new row; only the latest per population is current.
    """

    population_id: str
    lice_score: int
    mortality_score: float
    environment_score: int
    treatment_score: int
    overall_score: int
    risk_level: CompositeRiskLevel
    defaults_used: ScoreDefaultsUsed = field(default_factory=ScoreDefaultsUsed)
    id: UUID = field(default_factory=uuid4)
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
