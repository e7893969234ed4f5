"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and the presentation layer.
"""

from .prediction_dto import (
    DefaultsUsedDTO,
    ForecastFactorsDTO,
    GenerateForecastRequestDTO,
    GenerateForecastResponseDTO,
    ModelInfoDTO,
    PaginatedPredictionsDTO,
    PredictionDTO,
    PredictionSummaryDTO,
)
from .risk_score_dto import RiskScoreDTO, RiskScoreOverviewDTO, ScoreDefaultsUsedDTO
from .scheduler_dto import (
    ForecastRunSummaryDTO,
    RunForecastRequestDTO,
    SchedulerStatusDTO,
)

__all__ = [
    "DefaultsUsedDTO",
    "ForecastFactorsDTO",
    "GenerateForecastRequestDTO",
    "GenerateForecastResponseDTO",
    "ModelInfoDTO",
    "PaginatedPredictionsDTO",
    "PredictionDTO",
    "PredictionSummaryDTO",
    "RiskScoreDTO",
    "RiskScoreOverviewDTO",
    "ScoreDefaultsUsedDTO",
    "ForecastRunSummaryDTO",
    "RunForecastRequestDTO",
    "SchedulerStatusDTO",
]
