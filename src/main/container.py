"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from src.application.services.forecaster import PopulationForecaster
from src.application.services.records_reader import HistoricalDataReader
from src.application.use_cases.forecast_cycle_use_case import RunForecastCycleUseCase
from src.application.use_cases.forecast_use_cases import (
    CalculatePopulationForecastUseCase,
    GenerateForecastsUseCase,
    PersistForecastsUseCase,
)
from src.application.use_cases.prediction_query_use_cases import (
    GetModelInfoUseCase,
    GetPredictionsUseCase,
    GetPredictionSummaryUseCase,
)
from src.application.use_cases.risk_score_use_cases import (
    ComputeRiskScoreUseCase,
    GetLatestRiskScoresUseCase,
)
from src.infrastructure.database import MongoDatabase
from src.infrastructure.gateways.mongo_records_gateway import MongoRecordsGateway
from src.infrastructure.repositories.prediction_repository import (
    PredictionRepository,
)
from src.infrastructure.repositories.risk_score_repository import (
    RiskScoreRepository,
)
from src.infrastructure.services.alert_notifier import LoggingAlertNotifier
from src.infrastructure.services.forecast_scheduler import DailyForecastScheduler
from src.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependecy-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()
    run_scheduler_on_start = providers.Object(False)

    # Infrastructure
    mongo_database = providers.Singleton(
        MongoDatabase,
        mongo_uri=config.database.mongo_uri,
        db_name=config.database.database_name,
    )

    records_gateway = providers.Singleton(
        MongoRecordsGateway,
        mongo_database=mongo_database,
    )

    prediction_repository = providers.Singleton(
        PredictionRepository,
        mongo_database=mongo_database,
    )

    risk_score_repository = providers.Singleton(
        RiskScoreRepository,
        mongo_database=mongo_database,
    )

    alert_notifier = providers.Singleton(LoggingAlertNotifier)

    # Application services
    records_reader = providers.Singleton(
        HistoricalDataReader,
        records_gateway=records_gateway,
        history_window_days=config.forecast.history_window_days,
        treatment_window_days=config.forecast.treatment_window_days,
        read_timeout_seconds=config.forecast.read_timeout_seconds,
    )

    population_forecaster = providers.Singleton(
        PopulationForecaster,
        records_reader=records_reader,
        model_version=config.forecast.model_version,
    )

    # Application (use cases)
    calculate_population_forecast_use_case = providers.Factory(
        CalculatePopulationForecastUseCase,
        records_gateway=records_gateway,
        forecaster=population_forecaster,
    )

    generate_forecasts_use_case = providers.Factory(
        GenerateForecastsUseCase,
        records_gateway=records_gateway,
        forecaster=population_forecaster,
    )

    persist_forecasts_use_case = providers.Factory(
        PersistForecastsUseCase,
        prediction_repository=prediction_repository,
    )

    compute_risk_score_use_case = providers.Factory(
        ComputeRiskScoreUseCase,
        records_gateway=records_gateway,
        records_reader=records_reader,
        forecaster=population_forecaster,
        risk_score_repository=risk_score_repository,
    )

    get_latest_risk_scores_use_case = providers.Factory(
        GetLatestRiskScoresUseCase,
        risk_score_repository=risk_score_repository,
    )

    get_predictions_use_case = providers.Factory(
        GetPredictionsUseCase,
        prediction_repository=prediction_repository,
    )

    get_prediction_summary_use_case = providers.Factory(
        GetPredictionSummaryUseCase,
        prediction_repository=prediction_repository,
    )

    get_model_info_use_case = providers.Factory(
        GetModelInfoUseCase,
        model_version=config.forecast.model_version,
    )

    run_forecast_cycle_use_case = providers.Factory(
        RunForecastCycleUseCase,
        generate_forecasts=generate_forecasts_use_case,
        persist_forecasts=persist_forecasts_use_case,
        compute_risk_score=compute_risk_score_use_case,
        alert_notifier=alert_notifier,
        horizons=config.scheduler.horizons,
        refresh_risk_scores=config.scheduler.refresh_risk_scores,
    )

    # One scheduler per process
    forecast_scheduler = providers.Singleton(
        DailyForecastScheduler,
        cycle_runner=run_forecast_cycle_use_case,
        target_hour=config.scheduler.target_hour,
        interval_hours=config.scheduler.interval_hours,
        timezone_name=config.scheduler.timezone,
        run_on_start=run_scheduler_on_start,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    container.run_scheduler_on_start.override(
        providers.Object(settings.run_scheduler_on_start)
    )
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan(start_scheduler: bool = True):
    """
    Centralized lifecycle management for external resources.

    Creates the Mongo indexes, arms the daily forecast scheduler when
    enabled and, on shutdown, stops it, lets a running cycle finish and
    closes the Mongo client.
    """
    container = get_container()

    mongo_database = container.mongo_database()
    scheduler = container.forecast_scheduler()

    try:
        logger.info("container.mongo.ensure_connection")
        await mongo_database.create_indexes()

        if start_scheduler and container.config.scheduler.enabled():
            scheduler.start()
        else:
            logger.info("container.scheduler.disabled")

        logger.info("container.resources.initialized")
        yield container

    finally:
        logger.info("container.scheduler.stop")
        scheduler.stop()
        await scheduler.wait_for_runs()

        logger.info("container.mongo.close")
        mongo_database.close()

        logger.info("container.resources.shutdown")
