"""Domain entities describing fleet-wide forecast batches and scheduler runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from src.domain.entities.prediction import Prediction


@dataclass(slots=True)
class PopulationFailure:
    """A population skipped during a batch because its forecast raised."""

    population_id: str
    error: str


@dataclass
class ForecastBatch:
    """All predictions of one generation for a single horizon."""

    horizon_days: int
    generation_id: UUID = field(default_factory=uuid4)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    predictions: List[Prediction] = field(default_factory=list)
    failures: List[PopulationFailure] = field(default_factory=list)

    @property
    def critical_predictions(self) -> List[Prediction]:
        return [prediction for prediction in self.predictions if prediction.is_critical]


@dataclass
class ForecastRunSummary:
    """Outcome of one scheduled or manually triggered forecast cycle."""

    success: bool
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    prediction_count_by_horizon: Dict[int, int] = field(default_factory=dict)
    critical_count: int = 0
    failed_populations: Dict[str, str] = field(default_factory=dict)
    risk_scores_refreshed: int = 0
    skipped: bool = False
    error: Optional[str] = None


@dataclass(slots=True)
class SchedulerStatus:
    """Point-in-time view of the daily forecast scheduler."""

    armed: bool
    running: bool
    target_hour: int
    interval_hours: float
    timezone: str
    minutes_until_next_run: Optional[int] = None
    last_run: Optional[ForecastRunSummary] = None
