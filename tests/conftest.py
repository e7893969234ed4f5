from __future__ import annotations

import sys
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import pymongo.errors
import pytest

from src.domain.entities.observations import (
    CountObservation,
    EnvironmentReading,
    TreatmentEvent,
)
from src.domain.entities.population import Population
from src.domain.entities.prediction import (
    DefaultsUsed,
    ForecastFactors,
    Prediction,
    ProjectionMode,
    RecommendedAction,
    RiskLevel,
)
from src.domain.gateways.records_gateway import IRecordsGateway

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _sort_documents(
    documents: List[Dict[str, Any]], sort_keys: Sequence[Tuple[str, int]]
) -> List[Dict[str, Any]]:
    ordered = list(documents)
    for key, direction in reversed(list(sort_keys)):
        ordered.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
    return ordered


class FakeCursor:
    def __init__(self, documents: Sequence[Dict[str, Any]]):
        self._documents = list(documents)
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: Any, direction: int = 1) -> "FakeCursor":
        if isinstance(key_or_list, list):
            sort_keys = key_or_list
        else:
            sort_keys = [(key_or_list, direction)]
        self._documents = _sort_documents(self._documents, sort_keys)
        return self

    def skip(self, amount: int) -> "FakeCursor":
        self._skip = amount
        return self

    def limit(self, amount: int) -> "FakeCursor":
        self._limit = amount
        return self

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        docs = self._documents[self._skip :]
        if self._limit:
            docs = docs[: self._limit]
        return iter(docs)


class FakeCollection:
    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.last_query: Dict[str, Any] | None = None
        self.created_indexes: List[tuple[Any, ...]] = []
        self.sessions: List[Any] = []

    def find_one(
        self, query: Dict[str, Any], sort: Optional[List[Tuple[str, int]]] = None
    ) -> Dict[str, Any] | None:
        self.last_query = query
        matches = [doc for doc in self.documents if self._matches(doc, query)]
        if sort:
            matches = _sort_documents(matches, sort)
        return matches[0] if matches else None

    def find(self, query: Dict[str, Any]) -> FakeCursor:
        self.last_query = query
        return FakeCursor([doc for doc in self.documents if self._matches(doc, query)])

    def count_documents(self, query: Dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if self._matches(doc, query))

    def insert_one(self, document: Dict[str, Any]) -> Any:
        self.documents.append(document)
        return SimpleNamespace(acknowledged=True, inserted_id=document.get("id"))

    def insert_many(
        self, documents: List[Dict[str, Any]], ordered: bool = True, session=None
    ) -> Any:
        self.sessions.append(session)
        self.documents.extend(documents)
        return SimpleNamespace(
            acknowledged=True, inserted_ids=[doc.get("id") for doc in documents]
        )

    def replace_one(
        self, query: Dict[str, Any], document: Dict[str, Any], upsert: bool = False
    ) -> Any:
        for index, existing in enumerate(self.documents):
            if self._matches(existing, query):
                self.documents[index] = document
                return SimpleNamespace(matched_count=1, acknowledged=True)
        if upsert:
            self.documents.append(document)
            return SimpleNamespace(matched_count=0, acknowledged=True)
        return SimpleNamespace(matched_count=0, acknowledged=False)

    def create_index(self, keys: Any, name: str | None = None, **kwargs: Any) -> Any:
        self.created_indexes.append((keys, name, kwargs))
        return name or keys

    @staticmethod
    def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
        for key, condition in query.items():
            value = document.get(key)
            if isinstance(condition, dict):
                if "$gte" in condition and (
                    value is None or value < condition["$gte"]
                ):
                    return False
                if "$in" in condition and value not in condition["$in"]:
                    return False
            elif value != condition:
                return False
        return True


class FakeMongoDatabase:
    """In-memory stand-in for MongoDatabase used by repository tests."""

    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}
        self.fail_batch_insert = False
        self.fail_reads = False

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    def _check_reads(self) -> None:
        if self.fail_reads:
            raise pymongo.errors.ServerSelectionTimeoutError("no servers available")

    async def find_one(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> Any:
        self._check_reads()
        return self.get_collection(collection_name).find_one(
            query, sort=list(sort) if sort else None
        )

    async def find_many(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort_by: str | None = None,
        sort_direction: int = 1,
        skip: int = 0,
        limit: int = 100,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> List[Dict[str, Any]]:
        self._check_reads()
        cursor = self.get_collection(collection_name).find(query)
        if sort:
            cursor.sort(list(sort))
        elif sort_by:
            cursor.sort(sort_by, sort_direction)
        cursor.skip(skip)
        cursor.limit(limit)
        return list(cursor)

    async def count_documents(
        self, collection_name: str, query: Dict[str, Any]
    ) -> int:
        self._check_reads()
        return self.get_collection(collection_name).count_documents(query)

    async def insert_one(self, collection_name: str, document: Dict[str, Any]) -> Any:
        self.get_collection(collection_name).insert_one(document)
        return document

    async def insert_many_atomic(
        self, collection_name: str, documents: List[Dict[str, Any]]
    ) -> int:
        if self.fail_batch_insert:
            raise pymongo.errors.OperationFailure("Transaction aborted")
        self.get_collection(collection_name).insert_many(documents)
        return len(documents)

    async def upsert_one(
        self, collection_name: str, query: Dict[str, Any], document: Dict[str, Any]
    ) -> Any:
        self.get_collection(collection_name).replace_one(query, document, upsert=True)
        return document

    async def create_indexes(self) -> None:  # pragma: no cover - stub for tests
        pass

    def close(self) -> None:
        pass


class StubRecordsGateway(IRecordsGateway):
    """Records gateway backed by plain dictionaries."""

    def __init__(
        self,
        populations: Optional[List[Population]] = None,
        history: Optional[Dict[str, List[float]]] = None,
        temperatures: Optional[Dict[str, Optional[float]]] = None,
        oxygen: Optional[Dict[str, float]] = None,
        treatments: Optional[Dict[str, List[TreatmentEvent]]] = None,
        mortality: Optional[Dict[str, float]] = None,
        history_start: date = date(2025, 6, 16),
    ) -> None:
        self.populations = populations or []
        self.history = history or {}
        self.temperatures = temperatures or {}
        self.oxygen = oxygen or {}
        self.treatments = treatments or {}
        self.mortality = mortality or {}
        self.history_start = history_start
        self.failing: set[str] = set()
        self.calls: List[str] = []

    def _maybe_fail(self, read: str) -> None:
        self.calls.append(read)
        if read in self.failing:
            raise RuntimeError(f"{read} unavailable")

    async def list_active_populations(self) -> List[Population]:
        self._maybe_fail("populations")
        return [p for p in self.populations if p.active]

    async def get_population(self, population_id: str) -> Optional[Population]:
        self._maybe_fail("population")
        return next((p for p in self.populations if p.id == population_id), None)

    async def get_count_history(
        self, population_id: str, since: date
    ) -> List[CountObservation]:
        self._maybe_fail("history")
        return [
            CountObservation(
                population_id=population_id,
                date=self.history_start + timedelta(days=7 * index),
                value=value,
            )
            for index, value in enumerate(self.history.get(population_id, []))
        ]

    async def get_latest_environment_reading(
        self, population_id: str
    ) -> Optional[EnvironmentReading]:
        self._maybe_fail("environment")
        if (
            population_id not in self.temperatures
            and population_id not in self.oxygen
        ):
            return None
        return EnvironmentReading(
            population_id=population_id,
            timestamp=datetime(2025, 7, 14, 5, tzinfo=timezone.utc),
            temperature=self.temperatures.get(population_id),
            oxygen_percent=self.oxygen.get(population_id),
        )

    async def get_completed_treatments(
        self, population_id: str, since: date
    ) -> List[TreatmentEvent]:
        self._maybe_fail("treatments")
        return [
            t
            for t in self.treatments.get(population_id, [])
            if t.completed_date >= since
        ]

    async def get_average_daily_mortality(
        self, population_id: str, since: date
    ) -> Optional[float]:
        self._maybe_fail("mortality")
        return self.mortality.get(population_id)


def make_treatment(
    population_id: str,
    completed_on: date,
    effectiveness_percent: Optional[float] = None,
    hour: int = 0,
) -> TreatmentEvent:
    return TreatmentEvent(
        population_id=population_id,
        completed_at=datetime.combine(
            completed_on, time(hour=hour), tzinfo=timezone.utc
        ),
        effectiveness_percent=effectiveness_percent,
    )


def make_prediction(
    population_id: str = "merd-1",
    risk_level: RiskLevel = RiskLevel.LOW,
    predicted_value: float = 0.1,
    exceedance_probability: float = 0.1,
    horizon_days: int = 7,
    **overrides: Any,
) -> Prediction:
    actions = {
        RiskLevel.CRITICAL: RecommendedAction.IMMEDIATE_TREATMENT,
        RiskLevel.HIGH: RecommendedAction.SCHEDULE_TREATMENT,
        RiskLevel.MEDIUM: RecommendedAction.MONITOR,
        RiskLevel.LOW: RecommendedAction.NO_ACTION,
    }
    values: Dict[str, Any] = dict(
        population_id=population_id,
        horizon_days=horizon_days,
        target_date=date(2025, 7, 21),
        current_value=0.1,
        predicted_value=predicted_value,
        confidence=0.6,
        exceedance_probability=exceedance_probability,
        risk_level=risk_level,
        recommended_action=actions[risk_level],
        projection_mode=ProjectionMode.EXPONENTIAL,
        factors=ForecastFactors(
            seasonal_factor=1.5,
            temperature_factor=1.0,
            temperature=12.0,
            treatment_damping=1.0,
            adjusted_growth_rate=0.18,
            regression_slope=0.0,
            regression_r2=0.0,
            sample_count=3,
            treatment_count=0,
        ),
        defaults_used=DefaultsUsed(),
    )
    values.update(overrides)
    return Prediction(**values)


@pytest.fixture()
def fake_mongo_database() -> FakeMongoDatabase:
    return FakeMongoDatabase()


@pytest.fixture()
def july_day() -> date:
    return date(2025, 7, 14)


@pytest.fixture()
def dummy_now() -> datetime:
    return datetime.now(timezone.utc)
