"""
Risk Scores Router - Presentation Layer

This module defines the FastAPI router for composite risk score endpoints.
"""

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.risk_score_dto import RiskScoreDTO, RiskScoreOverviewDTO
from src.application.use_cases.risk_score_use_cases import (
    ComputeRiskScoreUseCase,
    GetLatestRiskScoresUseCase,
    RiskScoreError,
    RiskScoreNotFoundError,
)
from src.domain.entities.errors import ForecastPersistenceError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/risk-scores", tags=["Risk Scores"])


@router.get("", response_model=RiskScoreOverviewDTO)
@inject
async def get_risk_scores(
    get_latest_use_case: GetLatestRiskScoresUseCase = Depends(
        Provide["get_latest_risk_scores_use_case"]
    ),
) -> RiskScoreOverviewDTO:
    """Current score of every population with the fleet aggregate."""
    try:
        return await get_latest_use_case.execute()
    except Exception as e:
        logger.error("risk_scores.list.failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("/{population_id}", response_model=RiskScoreDTO)
@inject
async def compute_risk_score(
    population_id: str,
    compute_use_case: ComputeRiskScoreUseCase = Depends(
        Provide["compute_risk_score_use_case"]
    ),
) -> RiskScoreDTO:
    """Compute, store and return a fresh composite score for one population."""
    try:
        return await compute_use_case.execute(population_id=population_id)
    except RiskScoreNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (RiskScoreError, ForecastPersistenceError) as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(
            "risk_scores.compute.failed", population_id=population_id, error=str(e)
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
