"""
Application Service - Historical Data Reader

Wraps the records gateway with the engine's degradation policy: every read
is bounded by a timeout and any failure or absence resolves to a documented
default. Each result reports whether that default was used so forecasts can
carry their provenance.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Awaitable, Generic, List, Optional, TypeVar

import structlog

from src.domain.entities.observations import (
    CountObservation,
    EnvironmentReading,
    TreatmentEvent,
)
from src.domain.gateways.records_gateway import IRecordsGateway

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_TEMPERATURE = 10.0
DEFAULT_HISTORY_WINDOW_DAYS = 30
DEFAULT_TREATMENT_WINDOW_DAYS = 14
MORTALITY_WINDOW_DAYS = 7
EFFECTIVENESS_WINDOW_DAYS = 30


@dataclass
class SourceRead(Generic[T]):
    """Value returned by a guarded read and whether it is a fallback."""

    value: T
    defaulted: bool = False


class HistoricalDataReader:
    """Reads forecast inputs for one population, never raising."""

    def __init__(
        self,
        records_gateway: IRecordsGateway,
        history_window_days: int = DEFAULT_HISTORY_WINDOW_DAYS,
        treatment_window_days: int = DEFAULT_TREATMENT_WINDOW_DAYS,
        read_timeout_seconds: Optional[float] = 30.0,
    ) -> None:
        self._gateway = records_gateway
        self._history_window_days = history_window_days
        self._treatment_window_days = treatment_window_days
        self._read_timeout = read_timeout_seconds

    async def read_count_history(
        self,
        population_id: str,
        as_of: date,
        window_days: Optional[int] = None,
    ) -> SourceRead[List[CountObservation]]:
        """Ascending daily ratios; empty means cold start, not failure."""
        window = window_days or self._history_window_days
        read = await self._guarded(
            "count_history",
            population_id,
            self._gateway.get_count_history(
                population_id, since=as_of - timedelta(days=window)
            ),
            default=[],
        )
        if not read.value:
            read.defaulted = True
        return read

    async def read_latest_temperature(self, population_id: str) -> SourceRead[float]:
        """Latest water temperature, 10 degrees when unavailable."""
        read = await self._guarded(
            "latest_temperature",
            population_id,
            self._gateway.get_latest_environment_reading(population_id),
            default=None,
        )
        reading: Optional[EnvironmentReading] = read.value
        if reading is None or reading.temperature is None:
            return SourceRead(DEFAULT_TEMPERATURE, defaulted=True)
        return SourceRead(float(reading.temperature))

    async def read_recent_treatments(
        self,
        population_id: str,
        as_of: date,
        window_days: Optional[int] = None,
    ) -> SourceRead[List[TreatmentEvent]]:
        """Completed treatments in the window, most recent first.

        An empty result is the normal untreated case and is only flagged
        as defaulted when the read itself failed.
        """
        window = window_days or self._treatment_window_days
        return await self._guarded(
            "recent_treatments",
            population_id,
            self._gateway.get_completed_treatments(
                population_id, since=as_of - timedelta(days=window)
            ),
            default=[],
        )

    async def read_average_mortality(
        self, population_id: str, as_of: date
    ) -> SourceRead[Optional[float]]:
        read = await self._guarded(
            "average_mortality",
            population_id,
            self._gateway.get_average_daily_mortality(
                population_id, since=as_of - timedelta(days=MORTALITY_WINDOW_DAYS)
            ),
            default=None,
        )
        if read.value is None:
            read.defaulted = True
        return read

    async def read_water_quality(
        self, population_id: str
    ) -> SourceRead[Optional[EnvironmentReading]]:
        read = await self._guarded(
            "water_quality",
            population_id,
            self._gateway.get_latest_environment_reading(population_id),
            default=None,
        )
        if read.value is None:
            read.defaulted = True
        return read

    async def read_treatment_effectiveness(
        self, population_id: str, as_of: date
    ) -> SourceRead[Optional[float]]:
        """Mean effectiveness of completed treatments over the trailing month."""
        read = await self._guarded(
            "treatment_effectiveness",
            population_id,
            self._gateway.get_completed_treatments(
                population_id, since=as_of - timedelta(days=EFFECTIVENESS_WINDOW_DAYS)
            ),
            default=[],
        )
        scores = [
            treatment.effectiveness_percent
            for treatment in read.value
            if treatment.effectiveness_percent is not None
        ]
        if not scores:
            return SourceRead(None, defaulted=True)
        return SourceRead(sum(scores) / len(scores), defaulted=read.defaulted)

    async def _guarded(
        self,
        read_name: str,
        population_id: str,
        call: Awaitable[T],
        default: T,
    ) -> SourceRead[T]:
        try:
            if self._read_timeout:
                value = await asyncio.wait_for(call, timeout=self._read_timeout)
            else:
                value = await call
            return SourceRead(value)
        except asyncio.TimeoutError:
            logger.warning(
                "records.read.timeout",
                read=read_name,
                population_id=population_id,
                timeout_seconds=self._read_timeout,
            )
        except Exception as exc:
            logger.warning(
                "records.read.failed",
                read=read_name,
                population_id=population_id,
                error=str(exc),
            )
        return SourceRead(default, defaulted=True)
