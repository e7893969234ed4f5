"""
Domain Entities - Prediction

Forecast records produced by the lice growth engine. A Prediction is a log
entry: created once per generation, population and horizon, never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from src.shared.consts import MODEL_VERSION

MAX_PREDICTED_VALUE = 3.0


class RiskLevel(str, Enum):
    """Ordinal lice risk level for a single forecast."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def severity_rank(self) -> int:
        """Sort key, most severe first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    RiskLevel.CRITICAL: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.MEDIUM: 3,
    RiskLevel.LOW: 4,
}


class RecommendedAction(str, Enum):
    IMMEDIATE_TREATMENT = "IMMEDIATE_TREATMENT"
    SCHEDULE_TREATMENT = "SCHEDULE_TREATMENT"
    MONITOR = "MONITOR"
    NO_ACTION = "NO_ACTION"


class ProjectionMode(str, Enum):
    """Which projection produced the predicted value."""

    REGRESSION = "regression"
    EXPONENTIAL = "exponential"


@dataclass(slots=True)
class TrendEstimate:
    """Ordinary least-squares fit over sample positions."""

    slope: float = 0.0
    intercept: float = 0.0
    r2: float = 0.0
    sample_count: int = 0


@dataclass(slots=True)
class GrowthProjection:
    """Point estimate for one horizon with its confidence."""

    predicted_value: float
    confidence: float
    mode: ProjectionMode
    adjusted_growth_rate: float


@dataclass(slots=True)
class ForecastFactors:
    """Breakdown of the inputs that shaped a forecast."""

    seasonal_factor: float
    temperature_factor: float
    temperature: float
    treatment_damping: float
    adjusted_growth_rate: float
    regression_slope: float
    regression_r2: float
    sample_count: int
    treatment_count: int


@dataclass(slots=True)
class DefaultsUsed:
    """Which reads fell back to defaults because data was absent or unreadable."""

    history: bool = False
    temperature: bool = False
    treatments: bool = False

    @property
    def any(self) -> bool:
        return self.history or self.temperature or self.treatments


@dataclass
class Prediction:
    """A persisted lice forecast for one population and horizon."""

    population_id: str
    horizon_days: int
    target_date: date
    current_value: float
    predicted_value: float
    confidence: float
    exceedance_probability: float
    risk_level: RiskLevel
    recommended_action: RecommendedAction
    projection_mode: ProjectionMode
    factors: ForecastFactors
    defaults_used: DefaultsUsed = field(default_factory=DefaultsUsed)
    id: UUID = field(default_factory=uuid4)
    generation_id: Optional[UUID] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    model_version: str = MODEL_VERSION
    population_name: Optional[str] = None
    site_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.predicted_value <= MAX_PREDICTED_VALUE:
            raise ValueError(
                f"predicted_value must be within [0, {MAX_PREDICTED_VALUE}]"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")
        if not 0.0 <= self.exceedance_probability <= 1.0:
            raise ValueError("exceedance_probability must be within [0, 1]")
        if not self.model_version:
            raise ValueError("model_version is required")

    @property
    def is_critical(self) -> bool:
        return self.risk_level == RiskLevel.CRITICAL
