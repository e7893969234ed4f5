"""
Domain Entities Package

Core entities of the lice forecasting engine.
"""

from .errors import (
    DomainError,
    ForecastPersistenceError,
    PopulationNotFoundError,
    RecordsUnavailableError,
)
from .forecast_run import (
    ForecastBatch,
    ForecastRunSummary,
    PopulationFailure,
    SchedulerStatus,
)
from .observations import CountObservation, EnvironmentReading, TreatmentEvent
from .population import Population
from .prediction import (
    DefaultsUsed,
    ForecastFactors,
    GrowthProjection,
    Prediction,
    ProjectionMode,
    RecommendedAction,
    RiskLevel,
    TrendEstimate,
)
from .risk_score import CompositeRiskLevel, RiskScore, ScoreDefaultsUsed

__all__ = [
    "CompositeRiskLevel",
    "CountObservation",
    "DefaultsUsed",
    "DomainError",
    "EnvironmentReading",
    "ForecastBatch",
    "ForecastFactors",
    "ForecastPersistenceError",
    "ForecastRunSummary",
    "GrowthProjection",
    "Population",
    "PopulationFailure",
    "PopulationNotFoundError",
    "Prediction",
    "ProjectionMode",
    "RecommendedAction",
    "RecordsUnavailableError",
    "RiskLevel",
    "RiskScore",
    "SchedulerStatus",
    "ScoreDefaultsUsed",
    "TreatmentEvent",
    "TrendEstimate",
]
