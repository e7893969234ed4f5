"""
Scheduler Router - Presentation Layer

Operator control surface of the daily forecast scheduler.
"""

from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.scheduler_dto import (
    ForecastRunSummaryDTO,
    RunForecastRequestDTO,
    SchedulerStatusDTO,
)
from src.infrastructure.services.forecast_scheduler import DailyForecastScheduler

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/scheduler", tags=["Scheduler"])


@router.get("/status", response_model=SchedulerStatusDTO)
@inject
async def get_scheduler_status(
    scheduler: DailyForecastScheduler = Depends(Provide["forecast_scheduler"]),
) -> SchedulerStatusDTO:
    return SchedulerStatusDTO.from_domain(scheduler.status())


@router.post("/start", response_model=SchedulerStatusDTO)
@inject
async def start_scheduler(
    scheduler: DailyForecastScheduler = Depends(Provide["forecast_scheduler"]),
) -> SchedulerStatusDTO:
    """Arm the daily timer; a no-op when it is already armed."""
    scheduler.start()
    return SchedulerStatusDTO.from_domain(scheduler.status())


@router.post("/stop", response_model=SchedulerStatusDTO)
@inject
async def stop_scheduler(
    scheduler: DailyForecastScheduler = Depends(Provide["forecast_scheduler"]),
) -> SchedulerStatusDTO:
    scheduler.stop()
    return SchedulerStatusDTO.from_domain(scheduler.status())


@router.post("/run", response_model=ForecastRunSummaryDTO)
@inject
async def run_forecast_cycle(
    request: Optional[RunForecastRequestDTO] = None,
    scheduler: DailyForecastScheduler = Depends(Provide["forecast_scheduler"]),
) -> ForecastRunSummaryDTO:
    """
    Run a full cycle now and return its summary.

    A failed cycle is still reported with 200 and ``success`` false; only a
    run rejected because another one is in progress yields 409.
    """
    horizons = request.horizons if request is not None else None
    if horizons is not None and any(h <= 0 for h in horizons):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="horizons must be positive",
        )

    summary = await scheduler.run_now(horizons=horizons)
    if summary.skipped:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A forecast run is already in progress",
        )
    if not summary.success:
        logger.warning("scheduler.manual_run.failed", error=summary.error)
    return ForecastRunSummaryDTO.from_domain(summary)
