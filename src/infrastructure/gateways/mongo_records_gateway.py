"""
MongoDB Records Gateway - Infrastructure Layer

Reads populations, lice samples, water measurements, treatments and
mortality records from the record-keeping collections.
"""

from collections import OrderedDict
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

import pymongo.errors
import structlog

from src.domain.entities.errors import RecordsUnavailableError
from src.domain.entities.observations import (
    CountObservation,
    EnvironmentReading,
    TreatmentEvent,
)
from src.domain.entities.population import Population
from src.domain.gateways.records_gateway import IRecordsGateway
from src.infrastructure.database import MongoDatabase

logger = structlog.get_logger(__name__)

MOBILE_LICE_WEIGHT = 0.5
COMPLETED_STATUS = "completed"


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def _as_instant(value: Any) -> datetime:
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        return _start_of_day(value)
    else:
        instant = datetime.fromisoformat(str(value))
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


class MongoRecordsGateway(IRecordsGateway):
    """MongoDB implementation of the records gateway."""

    POPULATIONS = "populations"
    LICE_SAMPLES = "lice_samples"
    ENVIRONMENT_READINGS = "environment_readings"
    TREATMENTS = "treatments"
    MORTALITY_RECORDS = "mortality_records"

    def __init__(self, mongo_database: MongoDatabase):
        self.db = mongo_database

    def _to_population(self, document: Dict[str, Any]) -> Population:
        return Population(
            id=str(document["id"]),
            site_id=document.get("site_id"),
            name=document.get("name"),
            active=bool(document.get("active", True)),
        )

    async def list_active_populations(self) -> List[Population]:
        try:
            documents = await self.db.find_many(
                self.POPULATIONS, {"active": True}, sort_by="id", limit=0
            )
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                "Could not read populations", {"error": str(exc)}
            ) from exc
        return [self._to_population(document) for document in documents]

    async def get_population(self, population_id: str) -> Optional[Population]:
        try:
            document = await self.db.find_one(self.POPULATIONS, {"id": population_id})
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                f"Could not read population {population_id}", {"error": str(exc)}
            ) from exc
        return self._to_population(document) if document else None

    async def get_count_history(
        self, population_id: str, since: date
    ) -> List[CountObservation]:
        """
        Aggregate raw samples into one weighted ratio per sampling day.

        ratio = (sum adult females + 0.5 * sum mobile) / sum fish examined.
        Days where no fish were examined are skipped.
        """
        try:
            documents = await self.db.find_many(
                self.LICE_SAMPLES,
                {
                    "population_id": population_id,
                    "sampled_at": {"$gte": _start_of_day(since)},
                },
                sort_by="sampled_at",
                sort_direction=pymongo.ASCENDING,
                limit=0,
            )
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                f"Could not read lice samples for {population_id}",
                {"error": str(exc)},
            ) from exc

        days: "OrderedDict[date, List[float]]" = OrderedDict()
        for document in documents:
            day = _as_date(document["sampled_at"])
            totals = days.setdefault(day, [0.0, 0.0, 0.0])
            totals[0] += float(document.get("adult_female_lice") or 0)
            totals[1] += float(document.get("mobile_lice") or 0)
            totals[2] += float(document.get("fish_examined") or 0)

        observations = []
        for day, (adult_females, mobile, fish) in sorted(days.items()):
            if fish <= 0:
                continue
            observations.append(
                CountObservation(
                    population_id=population_id,
                    date=day,
                    value=(adult_females + MOBILE_LICE_WEIGHT * mobile) / fish,
                )
            )
        return observations

    async def get_latest_environment_reading(
        self, population_id: str
    ) -> Optional[EnvironmentReading]:
        try:
            document = await self.db.find_one(
                self.ENVIRONMENT_READINGS,
                {"population_id": population_id},
                sort=[("timestamp", pymongo.DESCENDING)],
            )
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                f"Could not read environment readings for {population_id}",
                {"error": str(exc)},
            ) from exc

        if document is None:
            return None
        return EnvironmentReading(
            population_id=population_id,
            timestamp=document["timestamp"],
            temperature=_optional_float(document.get("temperature")),
            oxygen_percent=_optional_float(document.get("oxygen_percent")),
        )

    async def get_completed_treatments(
        self, population_id: str, since: date
    ) -> List[TreatmentEvent]:
        try:
            documents = await self.db.find_many(
                self.TREATMENTS,
                {
                    "population_id": population_id,
                    "status": COMPLETED_STATUS,
                    "completed_at": {"$gte": _start_of_day(since)},
                },
                sort_by="completed_at",
                sort_direction=pymongo.DESCENDING,
                limit=0,
            )
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                f"Could not read treatments for {population_id}",
                {"error": str(exc)},
            ) from exc

        return [
            TreatmentEvent(
                population_id=population_id,
                completed_at=_as_instant(document["completed_at"]),
                effectiveness_percent=_optional_float(
                    document.get("effectiveness_percent")
                ),
                treatment_type=document.get("treatment_type"),
            )
            for document in documents
        ]

    async def get_average_daily_mortality(
        self, population_id: str, since: date
    ) -> Optional[float]:
        try:
            documents = await self.db.find_many(
                self.MORTALITY_RECORDS,
                {
                    "population_id": population_id,
                    "recorded_at": {"$gte": _start_of_day(since)},
                },
                limit=0,
            )
        except pymongo.errors.PyMongoError as exc:
            raise RecordsUnavailableError(
                f"Could not read mortality records for {population_id}",
                {"error": str(exc)},
            ) from exc

        counts = [
            float(document["count"])
            for document in documents
            if document.get("count") is not None
        ]
        if not counts:
            return None
        return sum(counts) / len(counts)
