from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities.forecast_run import ForecastRunSummary
from src.infrastructure.services import DailyForecastScheduler


class _RecordingRunner:
    def __init__(
        self, gate: asyncio.Event | None = None, error: Exception | None = None
    ):
        self.calls: list = []
        self.gate = gate
        self.error = error
        self.called = asyncio.Event()

    async def execute(self, horizons=None) -> ForecastRunSummary:
        self.calls.append(horizons)
        self.called.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return ForecastRunSummary(success=True, prediction_count_by_horizon={7: 3})


def _fixed_clock(moment: datetime):
    return lambda: moment


NOW = datetime(2025, 7, 14, 5, 0, 30, tzinfo=timezone.utc)


def _scheduler(runner, clock=None, **kwargs) -> DailyForecastScheduler:
    kwargs.setdefault("timezone_name", "UTC")
    return DailyForecastScheduler(runner, clock=clock or _fixed_clock(NOW), **kwargs)


@pytest.mark.parametrize(
    "kwargs", [{"target_hour": 24}, {"target_hour": -1}, {"interval_hours": 0}]
)
def test_rejects_invalid_configuration(kwargs) -> None:
    with pytest.raises(ValueError):
        DailyForecastScheduler(_RecordingRunner(), **kwargs)


def test_seconds_until_next_run_before_and_after_target() -> None:
    scheduler = _scheduler(_RecordingRunner())

    before = datetime(2025, 7, 14, 5, tzinfo=timezone.utc)
    exactly = datetime(2025, 7, 14, 6, tzinfo=timezone.utc)

    assert scheduler.seconds_until_next_run(before) == 3600
    assert scheduler.seconds_until_next_run(exactly) == 86400


def test_target_hour_is_local_time() -> None:
    scheduler = _scheduler(_RecordingRunner(), timezone_name="Europe/Oslo")

    # 05:00 CEST is 03:00 UTC; 06:00 CEST is 04:00 UTC.
    now = datetime(2025, 7, 14, 3, tzinfo=timezone.utc)

    assert scheduler.seconds_until_next_run(now) == 3600


def test_next_run_keeps_local_hour_across_dst_change() -> None:
    scheduler = _scheduler(_RecordingRunner(), timezone_name="Europe/Oslo")

    # Just after 06:00 CEST on the last summer-time day; the next 06:00 is CET.
    now = datetime(2025, 10, 25, 4, 0, 1, tzinfo=timezone.utc)

    assert scheduler.seconds_until_next_run(now) == 25 * 3600 - 1


@pytest.mark.asyncio
async def test_start_is_idempotent_and_stop_disarms() -> None:
    scheduler = _scheduler(_RecordingRunner())

    assert scheduler.start() is True
    assert scheduler.start() is False
    status = scheduler.status()
    assert status.armed is True
    assert status.running is False
    assert status.minutes_until_next_run == 60

    assert scheduler.stop() is True
    assert scheduler.stop() is False
    await asyncio.sleep(0)
    status = scheduler.status()
    assert status.armed is False
    assert status.minutes_until_next_run is None


@pytest.mark.asyncio
async def test_status_rounds_remaining_time_up_to_whole_minutes() -> None:
    now = datetime(2025, 7, 14, 4, 59, 1, tzinfo=timezone.utc)
    scheduler = _scheduler(_RecordingRunner(), clock=_fixed_clock(now))

    scheduler.start()
    status = scheduler.status()
    scheduler.stop()

    assert scheduler.seconds_until_next_run(now) == 3659
    assert status.minutes_until_next_run == 61


@pytest.mark.asyncio
async def test_run_on_start_triggers_immediate_cycle() -> None:
    runner = _RecordingRunner()
    scheduler = _scheduler(runner, run_on_start=True)

    scheduler.start()
    await scheduler.wait_for_runs()
    scheduler.stop()

    assert runner.calls == [None]
    assert scheduler.last_run.success is True


@pytest.mark.asyncio
async def test_run_now_passes_horizons() -> None:
    runner = _RecordingRunner()
    scheduler = _scheduler(runner)

    summary = await scheduler.run_now([14])

    assert runner.calls == [[14]]
    assert summary.prediction_count_by_horizon == {7: 3}
    assert scheduler.status().last_run is summary


@pytest.mark.asyncio
async def test_overlapping_run_is_skipped() -> None:
    gate = asyncio.Event()
    runner = _RecordingRunner(gate=gate)
    scheduler = _scheduler(runner)

    first = asyncio.create_task(scheduler.run_now())
    await runner.called.wait()
    assert scheduler.status().running is True

    second = await scheduler.run_now()
    gate.set()
    completed = await first

    assert second.skipped is True
    assert second.success is False
    assert completed.success is True
    assert len(runner.calls) == 1
    assert scheduler.last_run is completed


@pytest.mark.asyncio
async def test_runner_exception_becomes_failed_summary() -> None:
    scheduler = _scheduler(_RecordingRunner(error=RuntimeError("mongo down")))

    summary = await scheduler.run_now()

    assert summary.success is False
    assert summary.error == "mongo down"
    assert scheduler.running is False


@pytest.mark.asyncio
async def test_timer_fires_at_target_hour_and_rearms() -> None:
    runner = _RecordingRunner()
    start = datetime(2025, 7, 14, 5, 59, 59, 990000, tzinfo=timezone.utc)
    origin = time.monotonic()

    def clock() -> datetime:
        return start + timedelta(seconds=time.monotonic() - origin)

    scheduler = _scheduler(runner, clock=clock, max_sleep_seconds=0.005)

    scheduler.start()
    await asyncio.wait_for(runner.called.wait(), timeout=2)
    await scheduler.wait_for_runs()
    await asyncio.sleep(0.01)

    remaining = scheduler.seconds_until_next_run()
    scheduler.stop()

    assert runner.calls == [None]
    assert 86000 < remaining <= 86400


@pytest.mark.asyncio
async def test_stop_does_not_cancel_run_in_flight() -> None:
    gate = asyncio.Event()
    runner = _RecordingRunner(gate=gate)
    scheduler = _scheduler(runner, run_on_start=True)

    scheduler.start()
    await runner.called.wait()
    scheduler.stop()
    gate.set()
    await scheduler.wait_for_runs()

    assert scheduler.last_run is not None
    assert scheduler.last_run.success is True
