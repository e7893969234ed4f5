from __future__ import annotations

from datetime import datetime, timezone
from typing import cast

import pytest
from fastapi import HTTPException

from src.application.dtos.scheduler_dto import RunForecastRequestDTO
from src.domain.entities.forecast_run import ForecastRunSummary, SchedulerStatus
from src.infrastructure.services.forecast_scheduler import DailyForecastScheduler
from src.presentation.controllers.scheduler_controller import (
    get_scheduler_status,
    run_forecast_cycle,
    start_scheduler,
    stop_scheduler,
)


class _StubScheduler:
    def __init__(self, summary: ForecastRunSummary | None = None):
        self.armed = False
        self.summary = summary or ForecastRunSummary(success=True)
        self.horizons = "unset"

    def start(self) -> bool:
        was_armed = self.armed
        self.armed = True
        return not was_armed

    def stop(self) -> bool:
        was_armed = self.armed
        self.armed = False
        return was_armed

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            armed=self.armed,
            running=False,
            target_hour=6,
            interval_hours=24.0,
            timezone="Europe/Oslo",
            minutes_until_next_run=90 if self.armed else None,
        )

    async def run_now(self, horizons=None) -> ForecastRunSummary:
        self.horizons = horizons
        return self.summary


def _as_scheduler(stub: _StubScheduler) -> DailyForecastScheduler:
    return cast(DailyForecastScheduler, stub)


@pytest.mark.asyncio
async def test_start_status_stop_cycle():
    stub = _StubScheduler()

    started = await start_scheduler(scheduler=_as_scheduler(stub))
    again = await start_scheduler(scheduler=_as_scheduler(stub))
    status = await get_scheduler_status(scheduler=_as_scheduler(stub))
    stopped = await stop_scheduler(scheduler=_as_scheduler(stub))

    assert started.armed is True
    assert again.armed is True
    assert status.minutes_until_next_run == 90
    assert stopped.armed is False
    assert stopped.minutes_until_next_run is None


@pytest.mark.asyncio
async def test_run_uses_configured_horizons_without_body():
    stub = _StubScheduler(
        ForecastRunSummary(
            success=True,
            finished_at=datetime.now(timezone.utc),
            prediction_count_by_horizon={7: 10, 14: 10},
        )
    )

    summary = await run_forecast_cycle(request=None, scheduler=_as_scheduler(stub))

    assert stub.horizons is None
    assert summary.prediction_count_by_horizon == {7: 10, 14: 10}


@pytest.mark.asyncio
async def test_run_forwards_requested_horizons():
    stub = _StubScheduler()

    await run_forecast_cycle(
        request=RunForecastRequestDTO(horizons=[3]), scheduler=_as_scheduler(stub)
    )

    assert stub.horizons == [3]


@pytest.mark.asyncio
async def test_run_rejects_non_positive_horizons():
    with pytest.raises(HTTPException) as excinfo:
        await run_forecast_cycle(
            request=RunForecastRequestDTO(horizons=[7, 0]),
            scheduler=_as_scheduler(_StubScheduler()),
        )

    assert excinfo.value.status_code == 422


@pytest.mark.asyncio
async def test_run_conflicts_with_run_in_progress():
    stub = _StubScheduler(ForecastRunSummary(success=False, skipped=True))

    with pytest.raises(HTTPException) as excinfo:
        await run_forecast_cycle(request=None, scheduler=_as_scheduler(stub))

    assert excinfo.value.status_code == 409


@pytest.mark.asyncio
async def test_failed_run_is_reported_not_raised():
    stub = _StubScheduler(
        ForecastRunSummary(success=False, error="Failed to store prediction batch")
    )

    summary = await run_forecast_cycle(request=None, scheduler=_as_scheduler(stub))

    assert summary.success is False
    assert summary.error == "Failed to store prediction batch"
