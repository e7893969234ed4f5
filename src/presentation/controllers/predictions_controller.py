"""
Predictions Router - Presentation Layer

Operator endpoints for lice forecasts: manual generation, on-demand
calculation, listing, fleet summary and model description.
"""

from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.application.dtos.prediction_dto import (
    GenerateForecastRequestDTO,
    GenerateForecastResponseDTO,
    ModelInfoDTO,
    PaginatedPredictionsDTO,
    PredictionDTO,
    PredictionSummaryDTO,
)
from src.application.use_cases.forecast_use_cases import (
    CalculatePopulationForecastUseCase,
    ForecastError,
    ForecastNotFoundError,
)
from src.application.use_cases.prediction_query_use_cases import (
    GetModelInfoUseCase,
    GetPredictionsUseCase,
    GetPredictionSummaryUseCase,
)
from src.domain.entities.prediction import RiskLevel
from src.infrastructure.services.forecast_scheduler import DailyForecastScheduler

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/predictions", tags=["Predictions"])


@router.post("/generate", response_model=GenerateForecastResponseDTO)
@inject
async def generate_predictions(
    request: GenerateForecastRequestDTO,
    scheduler: DailyForecastScheduler = Depends(Provide["forecast_scheduler"]),
) -> GenerateForecastResponseDTO:
    """
    Generate and store forecasts for every active population.

    Runs through the scheduler so it never overlaps a timer-driven cycle.
    """
    summary = await scheduler.run_now(horizons=[request.horizon_days])
    if summary.skipped:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A forecast run is already in progress",
        )
    if not summary.success:
        logger.error(
            "predictions.generate.failed",
            horizon_days=request.horizon_days,
            error=summary.error,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=summary.error or "Forecast run failed",
        )

    return GenerateForecastResponseDTO(
        horizon_days=request.horizon_days,
        prediction_count=summary.prediction_count_by_horizon.get(
            request.horizon_days, 0
        ),
        critical_count=summary.critical_count,
        failed_populations=summary.failed_populations,
        skipped=summary.skipped,
        success=summary.success,
        error=summary.error,
    )


@router.get("/calculate/{population_id}", response_model=PredictionDTO)
@inject
async def calculate_prediction(
    population_id: str,
    horizon_days: int = Query(7, gt=0, le=60, description="Days ahead"),
    calculate_use_case: CalculatePopulationForecastUseCase = Depends(
        Provide["calculate_population_forecast_use_case"]
    ),
) -> PredictionDTO:
    """Forecast one population on demand without storing the result."""
    try:
        return await calculate_use_case.execute(
            population_id=population_id, horizon_days=horizon_days
        )
    except ForecastNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ForecastError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(
            "predictions.calculate.failed",
            population_id=population_id,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("/summary", response_model=PredictionSummaryDTO)
@inject
async def get_prediction_summary(
    summary_use_case: GetPredictionSummaryUseCase = Depends(
        Provide["get_prediction_summary_use_case"]
    ),
) -> PredictionSummaryDTO:
    """Fleet overview of the most recent 7-day generation."""
    try:
        return await summary_use_case.execute()
    except Exception as e:
        logger.error("predictions.summary.failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("/model-info", response_model=ModelInfoDTO)
@inject
async def get_model_info(
    model_info_use_case: GetModelInfoUseCase = Depends(
        Provide["get_model_info_use_case"]
    ),
) -> ModelInfoDTO:
    return await model_info_use_case.execute()


@router.get("", response_model=PaginatedPredictionsDTO)
@inject
async def list_predictions(
    population_id: Optional[str] = Query(None, description="Filter by population"),
    risk_level: Optional[RiskLevel] = Query(None, description="Filter by risk level"),
    horizon_days: Optional[int] = Query(None, gt=0, description="Filter by horizon"),
    latest_only: bool = Query(
        False, description="Only return the most recent generation"
    ),
    skip: int = Query(0, ge=0, description="Number of predictions to skip"),
    limit: int = Query(
        50, ge=1, le=500, description="Maximum number of predictions to return"
    ),
    get_predictions_use_case: GetPredictionsUseCase = Depends(
        Provide["get_predictions_use_case"]
    ),
) -> PaginatedPredictionsDTO:
    """
    List stored predictions, most severe first.

    Predictions are a log: without ``latest_only`` several generations of
    the same population can appear.
    """
    try:
        return await get_predictions_use_case.execute(
            population_id=population_id,
            risk_level=risk_level,
            horizon_days=horizon_days,
            latest_only=latest_only,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.error("predictions.list.failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
