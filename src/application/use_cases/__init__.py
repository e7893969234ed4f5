"""
Use Cases Package - Application Layer

This package contains use cases that implement the business logic
of the application. Use cases orchestrate the flow of data to and from
the entities and implement the business rules of the application.
"""

from .forecast_cycle_use_case import RunForecastCycleUseCase
from .forecast_use_cases import (
    CalculatePopulationForecastUseCase,
    ForecastError,
    ForecastNotFoundError,
    GenerateForecastsUseCase,
    PersistForecastsUseCase,
)
from .prediction_query_use_cases import (
    GetModelInfoUseCase,
    GetPredictionSummaryUseCase,
    GetPredictionsUseCase,
)
from .risk_score_use_cases import (
    ComputeRiskScoreUseCase,
    GetLatestRiskScoresUseCase,
    RiskScoreError,
    RiskScoreNotFoundError,
)

__all__ = [
    "CalculatePopulationForecastUseCase",
    "ComputeRiskScoreUseCase",
    "ForecastError",
    "ForecastNotFoundError",
    "GenerateForecastsUseCase",
    "GetLatestRiskScoresUseCase",
    "GetModelInfoUseCase",
    "GetPredictionSummaryUseCase",
    "GetPredictionsUseCase",
    "PersistForecastsUseCase",
    "RiskScoreError",
    "RiskScoreNotFoundError",
    "RunForecastCycleUseCase",
]
