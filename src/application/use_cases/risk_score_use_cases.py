"""
Risk Score Use Cases - Application Layer

Computes composite risk scores from the 7-day lice forecast and the
independently read mortality, water quality and treatment signals.
"""

from datetime import date, datetime, timezone
from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject

from src.domain.entities.errors import RecordsUnavailableError
from src.domain.entities.prediction import Prediction
from src.domain.entities.risk_score import RiskScore, ScoreDefaultsUsed
from src.domain.gateways.records_gateway import IRecordsGateway
from src.domain.repositories.risk_score_repository import IRiskScoreRepository
from src.domain.services import composite_scorer as scorer
from src.domain.services.rounding import round_half_up

from ..dtos.risk_score_dto import RiskScoreDTO, RiskScoreOverviewDTO
from ..services.forecaster import PopulationForecaster
from ..services.records_reader import HistoricalDataReader

logger = structlog.get_logger(__name__)

LICE_HORIZON_DAYS = 7


class RiskScoreError(Exception):
    """Base exception for risk score use cases."""


class RiskScoreNotFoundError(RiskScoreError):
    """Raised when the population to score does not exist."""


class ComputeRiskScoreUseCase:
    """Computes, stores and returns the composite score of a population."""

    @inject
    def __init__(
        self,
        records_gateway: IRecordsGateway = Provide["records_gateway"],
        records_reader: HistoricalDataReader = Provide["records_reader"],
        forecaster: PopulationForecaster = Provide["population_forecaster"],
        risk_score_repository: IRiskScoreRepository = Provide[
            "risk_score_repository"
        ],
    ):
        self.records_gateway = records_gateway
        self.records_reader = records_reader
        self.forecaster = forecaster
        self.risk_score_repository = risk_score_repository

    async def execute(
        self, population_id: str, as_of: Optional[date] = None
    ) -> RiskScoreDTO:
        """
        Score one population from a fresh 7-day forecast.

        Raises:
            RiskScoreNotFoundError: If the population is unknown
            RiskScoreError: If the population cannot be looked up
            ForecastPersistenceError: If the score cannot be stored
        """
        try:
            population = await self.records_gateway.get_population(population_id)
        except RecordsUnavailableError as exc:
            raise RiskScoreError(exc.message) from exc

        if population is None:
            raise RiskScoreNotFoundError(f"Population {population_id} not found")

        prediction = await self.forecaster.forecast(
            population, LICE_HORIZON_DAYS, as_of=as_of
        )
        score = await self.score_from_prediction(prediction, as_of=as_of)
        return RiskScoreDTO.from_domain(score)

    async def score_from_prediction(
        self, prediction: Prediction, as_of: Optional[date] = None
    ) -> RiskScore:
        """Blend an existing forecast with the other signals and store it."""
        if as_of is None:
            as_of = datetime.now(timezone.utc).date()
        elif isinstance(as_of, datetime):
            as_of = as_of.date()
        population_id = prediction.population_id

        mortality_read = await self.records_reader.read_average_mortality(
            population_id, as_of
        )
        quality_read = await self.records_reader.read_water_quality(population_id)
        effectiveness_read = await self.records_reader.read_treatment_effectiveness(
            population_id, as_of
        )

        reading = quality_read.value
        environment = scorer.environment_score(
            reading.temperature if reading is not None else None,
            reading.oxygen_percent if reading is not None else None,
        )

        score = scorer.build_risk_score(
            population_id=population_id,
            exceedance_probability=prediction.exceedance_probability,
            mortality=scorer.mortality_score(mortality_read.value),
            environment=environment,
            treatment=scorer.treatment_score(effectiveness_read.value),
            defaults_used=ScoreDefaultsUsed(
                mortality=mortality_read.defaulted,
                environment=quality_read.defaulted,
                treatment=effectiveness_read.defaulted,
            ),
        )
        await self.risk_score_repository.save(score)

        logger.info(
            "risk_score.computed",
            population_id=population_id,
            overall_score=score.overall_score,
            risk_level=score.risk_level.value,
        )
        return score


class GetLatestRiskScoresUseCase:
    """Returns the current score of every population with a fleet aggregate."""

    @inject
    def __init__(
        self,
        risk_score_repository: IRiskScoreRepository = Provide[
            "risk_score_repository"
        ],
    ):
        self.risk_score_repository = risk_score_repository

    async def execute(self) -> RiskScoreOverviewDTO:
        scores = await self.risk_score_repository.find_latest()
        if not scores:
            return RiskScoreOverviewDTO()

        aggregate = int(
            round_half_up(sum(s.overall_score for s in scores) / len(scores))
        )
        return RiskScoreOverviewDTO(
            scores=[RiskScoreDTO.from_domain(score) for score in scores],
            aggregate_score=aggregate,
            aggregate_level=scorer.composite_level(aggregate),
        )
