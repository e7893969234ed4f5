"""
Daily Forecast Scheduler - Infrastructure Layer

Process-wide asyncio timer that runs the full forecast cycle once a day at
a fixed local hour. One instance is owned by the DI container; timer fires
and manual triggers share a run lock so cycles never overlap.
"""

from __future__ import annotations

import asyncio
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional, Sequence, Set
from zoneinfo import ZoneInfo

import structlog

from src.domain.entities.forecast_run import ForecastRunSummary, SchedulerStatus
from src.domain.ports.forecast_cycle import IForecastCycleRunner

logger = structlog.get_logger(__name__)

DEFAULT_TARGET_HOUR = 6
DEFAULT_INTERVAL_HOURS = 24.0
DEFAULT_TIMEZONE = "Europe/Oslo"
MAX_SLEEP_SECONDS = 60.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DailyForecastScheduler:
    """Arms, fires and reports on the daily forecast cycle.

    States are stopped and armed. ``start`` arms a single timer task,
    ``stop`` cancels it. The timer sleeps in short slices and re-reads the
    wall clock each time, so the next run always reconciles with real time.
    """

    def __init__(
        self,
        cycle_runner: IForecastCycleRunner,
        target_hour: int = DEFAULT_TARGET_HOUR,
        interval_hours: float = DEFAULT_INTERVAL_HOURS,
        timezone_name: str = DEFAULT_TIMEZONE,
        run_on_start: bool = False,
        clock: Callable[[], datetime] = _utc_now,
        max_sleep_seconds: float = MAX_SLEEP_SECONDS,
    ):
        if not 0 <= target_hour <= 23:
            raise ValueError("target_hour must be between 0 and 23")
        if interval_hours <= 0:
            raise ValueError("interval_hours must be positive")

        self._runner = cycle_runner
        self.target_hour = target_hour
        self.interval_hours = float(interval_hours)
        self.timezone_name = timezone_name
        self.run_on_start = run_on_start
        self._tz = ZoneInfo(timezone_name)
        self._interval = timedelta(hours=interval_hours)
        self._clock = clock
        self._max_sleep = max_sleep_seconds

        self._timer_task: Optional[asyncio.Task] = None
        self._next_run_at: Optional[datetime] = None
        self._runs: Set[asyncio.Task] = set()
        self._run_lock = asyncio.Lock()
        self.last_run: Optional[ForecastRunSummary] = None

    @property
    def armed(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    def start(self) -> bool:
        """
        Arm the daily timer. Must be called from a running event loop.

        Returns:
            True if the timer was armed, False if it already was
        """
        if self.armed:
            logger.warning("scheduler.start.already_armed")
            return False

        if self.run_on_start:
            logger.info("scheduler.start.immediate_run")
            self._spawn_run("startup")

        now = self._clock()
        self._next_run_at = self._next_target_after(now)
        self._timer_task = asyncio.create_task(
            self._timer_loop(), name="daily-forecast-timer"
        )
        logger.info(
            "scheduler.started",
            target_hour=self.target_hour,
            timezone=self.timezone_name,
            next_run_at=self._next_run_at.isoformat(),
            minutes_until_next_run=self._minutes_until_next_run(now),
        )
        return True

    def stop(self) -> bool:
        """
        Cancel the timer. A run already in progress completes.

        Returns:
            True if the timer was armed
        """
        was_armed = self.armed
        if self._timer_task is not None:
            self._timer_task.cancel()
        self._timer_task = None
        self._next_run_at = None
        if was_armed:
            logger.info("scheduler.stopped", runs_in_flight=len(self._runs))
        return was_armed

    async def wait_for_runs(self) -> None:
        """Wait until every in-flight run has finished."""
        if self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    def status(self) -> SchedulerStatus:
        minutes = None
        if self.armed and self._next_run_at is not None:
            minutes = self._minutes_until_next_run()
        return SchedulerStatus(
            armed=self.armed,
            running=self.running,
            target_hour=self.target_hour,
            interval_hours=self.interval_hours,
            timezone=self.timezone_name,
            minutes_until_next_run=minutes,
            last_run=self.last_run,
        )

    async def run_now(
        self, horizons: Optional[Sequence[int]] = None
    ) -> ForecastRunSummary:
        """Run a cycle immediately unless one is already in progress."""
        return await self._execute("manual", horizons)

    def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
        """Seconds until the armed deadline, or until the next target hour."""
        now = now or self._clock()
        deadline = self._next_run_at or self._next_target_after(now)
        return max(0.0, (deadline - now).total_seconds())

    def _local_target(self, day: date) -> datetime:
        local = datetime.combine(day, time(hour=self.target_hour), tzinfo=self._tz)
        return local.astimezone(timezone.utc)

    def _next_target_after(self, now: datetime) -> datetime:
        """Next occurrence of the target hour strictly after ``now``."""
        today = now.astimezone(self._tz).date()
        target = self._local_target(today)
        if target <= now:
            target = self._local_target(today + timedelta(days=1))
        return target

    def _advance(self, deadline: datetime) -> datetime:
        if self._interval == timedelta(hours=24):
            # Step by calendar day so the local hour survives DST changes.
            day = deadline.astimezone(self._tz).date() + timedelta(days=1)
            return self._local_target(day)
        return deadline + self._interval

    def _minutes_until_next_run(self, now: Optional[datetime] = None) -> int:
        return math.ceil(self.seconds_until_next_run(now) / 60)

    async def _timer_loop(self) -> None:
        while True:
            remaining = (self._next_run_at - self._clock()).total_seconds()
            if remaining > 0:
                await asyncio.sleep(min(remaining, self._max_sleep))
                continue

            self._spawn_run("timer")

            now = self._clock()
            deadline = self._advance(self._next_run_at)
            while deadline <= now:
                deadline = self._advance(deadline)
            self._next_run_at = deadline
            logger.info("scheduler.rearmed", next_run_at=deadline.isoformat())

    def _spawn_run(self, trigger: str) -> asyncio.Task:
        task = asyncio.create_task(self._execute(trigger))
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def _execute(
        self, trigger: str, horizons: Optional[Sequence[int]] = None
    ) -> ForecastRunSummary:
        if self._run_lock.locked():
            logger.warning("scheduler.run.skipped", trigger=trigger)
            return ForecastRunSummary(
                success=False,
                skipped=True,
                finished_at=self._clock(),
                error="A forecast run is already in progress",
            )

        async with self._run_lock:
            with structlog.contextvars.bound_contextvars(run_trigger=trigger):
                logger.info("scheduler.run.started", trigger=trigger)
                try:
                    summary = await self._runner.execute(horizons)
                except Exception as exc:
                    logger.error(
                        "scheduler.run.failed",
                        trigger=trigger,
                        error=str(exc),
                        exc_info=True,
                    )
                    summary = ForecastRunSummary(
                        success=False, finished_at=self._clock(), error=str(exc)
                    )
                self.last_run = summary
                logger.info(
                    "scheduler.run.finished", trigger=trigger, success=summary.success
                )
                return summary
