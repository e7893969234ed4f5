from __future__ import annotations

import pymongo.errors
import pytest

from src.domain.entities.errors import ForecastPersistenceError
from src.domain.entities.risk_score import CompositeRiskLevel, ScoreDefaultsUsed
from src.domain.services.composite_scorer import build_risk_score
from src.infrastructure.repositories import RiskScoreRepository


def _score(population_id: str, probability: float):
    return build_risk_score(
        population_id=population_id,
        exceedance_probability=probability,
        mortality=20.0,
        environment=80,
        treatment=50,
        defaults_used=ScoreDefaultsUsed(mortality=True),
    )


@pytest.fixture()
def repository(fake_mongo_database) -> RiskScoreRepository:
    return RiskScoreRepository(fake_mongo_database)


@pytest.mark.asyncio
async def test_save_appends_history_and_replaces_current(
    repository, fake_mongo_database
):
    await repository.save(_score("merd-1", 0.1))
    await repository.save(_score("merd-1", 0.95))

    history = fake_mongo_database.get_collection("risk_scores").documents
    current = await repository.find_latest_by_population("merd-1")
    assert len(history) == 2
    assert current.lice_score == 95
    assert current.defaults_used.mortality is True


@pytest.mark.asyncio
async def test_find_latest_orders_by_overall_score(repository):
    await repository.save(_score("merd-1", 0.1))
    await repository.save(_score("merd-2", 0.95))
    await repository.save(_score("merd-3", 0.1))

    scores = await repository.find_latest()

    assert [s.population_id for s in scores] == ["merd-2", "merd-1", "merd-3"]
    assert scores[0].overall_score == 56
    assert scores[0].risk_level == CompositeRiskLevel.HIGH


@pytest.mark.asyncio
async def test_unknown_population_has_no_score(repository):
    assert await repository.find_latest_by_population("merd-9") is None


@pytest.mark.asyncio
async def test_store_failure_is_wrapped(repository, fake_mongo_database):
    async def _fail(*args, **kwargs):
        raise pymongo.errors.AutoReconnect("connection reset")

    fake_mongo_database.insert_one = _fail

    with pytest.raises(ForecastPersistenceError):
        await repository.save(_score("merd-1", 0.5))
