"""
Application DTOs - Scheduler

Data Transfer Objects for the daily forecast scheduler surface.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.forecast_run import ForecastRunSummary, SchedulerStatus


class ForecastRunSummaryDTO(BaseModel):
    """Outcome of one forecast cycle."""

    success: bool
    skipped: bool = False
    started_at: datetime
    finished_at: Optional[datetime] = None
    prediction_count_by_horizon: Dict[int, int] = Field(default_factory=dict)
    critical_count: int = 0
    failed_populations: Dict[str, str] = Field(default_factory=dict)
    risk_scores_refreshed: int = 0
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, summary: ForecastRunSummary) -> "ForecastRunSummaryDTO":
        return cls(
            success=summary.success,
            skipped=summary.skipped,
            started_at=summary.started_at,
            finished_at=summary.finished_at,
            prediction_count_by_horizon=dict(summary.prediction_count_by_horizon),
            critical_count=summary.critical_count,
            failed_populations=dict(summary.failed_populations),
            risk_scores_refreshed=summary.risk_scores_refreshed,
            error=summary.error,
        )


class SchedulerStatusDTO(BaseModel):
    """Scheduler state as seen by operators."""

    armed: bool
    running: bool
    target_hour: int
    interval_hours: float
    timezone: str
    minutes_until_next_run: Optional[int] = None
    last_run: Optional[ForecastRunSummaryDTO] = None

    @classmethod
    def from_domain(cls, status: SchedulerStatus) -> "SchedulerStatusDTO":
        return cls(
            armed=status.armed,
            running=status.running,
            target_hour=status.target_hour,
            interval_hours=status.interval_hours,
            timezone=status.timezone,
            minutes_until_next_run=status.minutes_until_next_run,
            last_run=(
                ForecastRunSummaryDTO.from_domain(status.last_run)
                if status.last_run is not None
                else None
            ),
        )


class RunForecastRequestDTO(BaseModel):
    """Payload for a manual full-cycle run."""

    horizons: Optional[List[int]] = Field(
        default=None, description="Horizons in days; configured horizons if omitted"
    )
