"""
Forecast Use Cases - Application Layer

Generate, persist and compute on demand lice forecasts for the fleet of
active populations.
"""

from datetime import date, datetime, timezone
from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject

from src.domain.entities.errors import (
    ForecastPersistenceError,
    RecordsUnavailableError,
)
from src.domain.entities.forecast_run import ForecastBatch, PopulationFailure
from src.domain.gateways.records_gateway import IRecordsGateway
from src.domain.repositories.prediction_repository import IPredictionRepository

from ..dtos.prediction_dto import PredictionDTO
from ..services.forecaster import PopulationForecaster

logger = structlog.get_logger(__name__)


class ForecastError(Exception):
    """Base exception for forecast use cases."""


class ForecastNotFoundError(ForecastError):
    """Raised when the population to forecast does not exist."""


class CalculatePopulationForecastUseCase:
    """Computes a forecast for one population without persisting it."""

    @inject
    def __init__(
        self,
        records_gateway: IRecordsGateway = Provide["records_gateway"],
        forecaster: PopulationForecaster = Provide["population_forecaster"],
    ):
        self.records_gateway = records_gateway
        self.forecaster = forecaster

    async def execute(
        self,
        population_id: str,
        horizon_days: int = 7,
        as_of: Optional[date] = None,
    ) -> PredictionDTO:
        """
        Forecast a single population.

        Args:
            population_id: Population to forecast
            horizon_days: Days ahead
            as_of: Reference date or instant, now when omitted

        Returns:
            The forecast as a DTO

        Raises:
            ForecastNotFoundError: If the population is unknown
            ForecastError: If the population cannot be looked up
        """
        try:
            population = await self.records_gateway.get_population(population_id)
        except RecordsUnavailableError as exc:
            raise ForecastError(exc.message) from exc

        if population is None:
            raise ForecastNotFoundError(f"Population {population_id} not found")

        prediction = await self.forecaster.forecast(
            population, horizon_days, as_of=as_of
        )
        return PredictionDTO.from_domain(prediction)


class GenerateForecastsUseCase:
    """Forecasts every active population for one horizon."""

    @inject
    def __init__(
        self,
        records_gateway: IRecordsGateway = Provide["records_gateway"],
        forecaster: PopulationForecaster = Provide["population_forecaster"],
    ):
        self.records_gateway = records_gateway
        self.forecaster = forecaster

    async def execute(
        self, horizon_days: int, as_of: Optional[date] = None
    ) -> ForecastBatch:
        """
        Generate one batch of predictions sharing a generation id.

        Populations are processed sequentially. A population whose forecast
        raises is recorded in ``batch.failures`` and the run continues.

        Raises:
            ForecastError: If the active populations cannot be listed
        """
        if horizon_days <= 0:
            raise ForecastError("horizon_days must be positive")

        try:
            populations = await self.records_gateway.list_active_populations()
        except RecordsUnavailableError as exc:
            raise ForecastError(
                f"Could not list active populations: {exc.message}"
            ) from exc

        batch = ForecastBatch(
            horizon_days=horizon_days, generated_at=datetime.now(timezone.utc)
        )
        as_of = as_of or batch.generated_at
        logger.info(
            "forecast.batch.started",
            horizon_days=horizon_days,
            generation_id=str(batch.generation_id),
            populations=len(populations),
        )

        for population in populations:
            try:
                prediction = await self.forecaster.forecast(
                    population, horizon_days, as_of=as_of
                )
            except Exception as exc:
                logger.error(
                    "forecast.population.failed",
                    population_id=population.id,
                    horizon_days=horizon_days,
                    error=str(exc),
                    exc_info=True,
                )
                batch.failures.append(
                    PopulationFailure(population_id=population.id, error=str(exc))
                )
                continue

            prediction.generation_id = batch.generation_id
            prediction.generated_at = batch.generated_at
            batch.predictions.append(prediction)

        logger.info(
            "forecast.batch.completed",
            horizon_days=horizon_days,
            generation_id=str(batch.generation_id),
            predictions=len(batch.predictions),
            critical=len(batch.critical_predictions),
            failures=len(batch.failures),
        )
        return batch


class PersistForecastsUseCase:
    """Appends a generated batch to the prediction log."""

    @inject
    def __init__(
        self,
        prediction_repository: IPredictionRepository = Provide[
            "prediction_repository"
        ],
    ):
        self.prediction_repository = prediction_repository

    async def execute(self, batch: ForecastBatch) -> int:
        """
        Store every prediction of ``batch`` atomically.

        Returns:
            Number of stored predictions

        Raises:
            ForecastPersistenceError: If the batch was rolled back
        """
        if not batch.predictions:
            logger.info(
                "forecast.batch.empty",
                horizon_days=batch.horizon_days,
                generation_id=str(batch.generation_id),
            )
            return 0

        try:
            stored = await self.prediction_repository.save_batch(batch.predictions)
        except ForecastPersistenceError:
            logger.error(
                "forecast.batch.persist_failed",
                horizon_days=batch.horizon_days,
                generation_id=str(batch.generation_id),
            )
            raise

        logger.info(
            "forecast.batch.persisted",
            horizon_days=batch.horizon_days,
            generation_id=str(batch.generation_id),
            stored=stored,
        )
        return stored
