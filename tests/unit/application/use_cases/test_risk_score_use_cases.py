from __future__ import annotations

from datetime import date

import pytest

from src.application.services import HistoricalDataReader, PopulationForecaster
from src.application.use_cases.risk_score_use_cases import (
    ComputeRiskScoreUseCase,
    GetLatestRiskScoresUseCase,
    RiskScoreError,
    RiskScoreNotFoundError,
)
from src.domain.entities.errors import RecordsUnavailableError
from src.domain.entities.population import Population
from src.domain.entities.risk_score import CompositeRiskLevel
from src.infrastructure.repositories import RiskScoreRepository
from tests.conftest import StubRecordsGateway, make_prediction, make_treatment

AS_OF = date(2025, 7, 14)


def _use_case(gateway, fake_mongo_database) -> ComputeRiskScoreUseCase:
    reader = HistoricalDataReader(gateway)
    return ComputeRiskScoreUseCase(
        records_gateway=gateway,
        records_reader=reader,
        forecaster=PopulationForecaster(reader),
        risk_score_repository=RiskScoreRepository(fake_mongo_database),
    )


def _stressed_gateway() -> StubRecordsGateway:
    return StubRecordsGateway(
        populations=[Population(id="merd-1")],
        temperatures={"merd-1": 3.0},
        oxygen={"merd-1": 55.0},
        mortality={"merd-1": 8.0},
        treatments={
            "merd-1": [make_treatment("merd-1", date(2025, 7, 10), 30.0)]
        },
    )


@pytest.mark.asyncio
async def test_score_blends_all_signals(fake_mongo_database):
    use_case = _use_case(_stressed_gateway(), fake_mongo_database)
    prediction = make_prediction("merd-1", exceedance_probability=0.9)

    score = await use_case.score_from_prediction(prediction, as_of=AS_OF)

    assert score.lice_score == 90
    assert score.mortality_score == pytest.approx(80.0)
    assert score.environment_score == 40
    assert score.treatment_score == 30
    assert score.overall_score == 78
    assert score.risk_level == CompositeRiskLevel.CRITICAL
    assert score.defaults_used.mortality is False
    assert score.defaults_used.environment is False
    assert score.defaults_used.treatment is False


@pytest.mark.asyncio
async def test_missing_signals_use_defaults(fake_mongo_database):
    use_case = _use_case(StubRecordsGateway(), fake_mongo_database)
    prediction = make_prediction("merd-9", exceedance_probability=0.1)

    score = await use_case.score_from_prediction(prediction, as_of=AS_OF)

    assert score.mortality_score == 20.0
    assert score.environment_score == 80
    assert score.treatment_score == 50
    assert score.overall_score == 22
    assert score.risk_level == CompositeRiskLevel.LOW
    assert score.defaults_used.mortality is True
    assert score.defaults_used.environment is True
    assert score.defaults_used.treatment is True


@pytest.mark.asyncio
async def test_each_computation_is_logged_and_replaces_current(fake_mongo_database):
    use_case = _use_case(_stressed_gateway(), fake_mongo_database)

    await use_case.score_from_prediction(
        make_prediction("merd-1", exceedance_probability=0.9), as_of=AS_OF
    )
    await use_case.score_from_prediction(
        make_prediction("merd-1", exceedance_probability=0.1), as_of=AS_OF
    )

    history = fake_mongo_database.get_collection("risk_scores").documents
    current = fake_mongo_database.get_collection("risk_scores_current").documents
    assert len(history) == 2
    assert len(current) == 1
    assert current[0]["lice_score"] == 10


@pytest.mark.asyncio
async def test_execute_forecasts_and_scores_population(fake_mongo_database):
    use_case = _use_case(_stressed_gateway(), fake_mongo_database)

    dto = await use_case.execute("merd-1", as_of=AS_OF)

    assert dto.population_id == "merd-1"
    # Cold start forecast: zero lice ratio, distant from the limit.
    assert dto.lice_score == 10
    assert dto.environment_score == 40


@pytest.mark.asyncio
async def test_execute_unknown_population(fake_mongo_database):
    use_case = _use_case(StubRecordsGateway(), fake_mongo_database)

    with pytest.raises(RiskScoreNotFoundError):
        await use_case.execute("missing", as_of=AS_OF)


@pytest.mark.asyncio
async def test_execute_store_offline(fake_mongo_database):
    class OfflineGateway(StubRecordsGateway):
        async def get_population(self, population_id):
            raise RecordsUnavailableError("records store offline")

    use_case = _use_case(OfflineGateway(), fake_mongo_database)

    with pytest.raises(RiskScoreError):
        await use_case.execute("merd-1", as_of=AS_OF)


@pytest.mark.asyncio
async def test_latest_scores_aggregate(fake_mongo_database):
    gateway = _stressed_gateway()
    use_case = _use_case(gateway, fake_mongo_database)
    await use_case.score_from_prediction(
        make_prediction("merd-1", exceedance_probability=0.9), as_of=AS_OF
    )
    await use_case.score_from_prediction(
        make_prediction("merd-2", exceedance_probability=0.1), as_of=AS_OF
    )

    overview = await GetLatestRiskScoresUseCase(
        risk_score_repository=RiskScoreRepository(fake_mongo_database)
    ).execute()

    assert [s.population_id for s in overview.scores] == ["merd-1", "merd-2"]
    assert [s.overall_score for s in overview.scores] == [78, 22]
    assert overview.aggregate_score == 50
    assert overview.aggregate_level == CompositeRiskLevel.HIGH


@pytest.mark.asyncio
async def test_latest_scores_empty(fake_mongo_database):
    overview = await GetLatestRiskScoresUseCase(
        risk_score_repository=RiskScoreRepository(fake_mongo_database)
    ).execute()

    assert overview.scores == []
    assert overview.aggregate_score is None
    assert overview.aggregate_level is None
