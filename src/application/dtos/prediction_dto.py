"""
Application DTOs - Prediction

Data Transfer Objects for lice forecasts, their summaries and the model
description exposed by the operator API.
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.prediction import (
    Prediction,
    ProjectionMode,
    RecommendedAction,
    RiskLevel,
)


class ForecastFactorsDTO(BaseModel):
    """Inputs that shaped a forecast."""

    seasonal_factor: float
    temperature_factor: float
    temperature: float
    treatment_damping: float
    adjusted_growth_rate: float
    regression_slope: float
    regression_r2: float
    sample_count: int
    treatment_count: int


class DefaultsUsedDTO(BaseModel):
    """Reads that fell back to defaults."""

    history: bool = False
    temperature: bool = False
    treatments: bool = False


class PredictionDTO(BaseModel):
    """DTO for a single persisted or on-demand forecast."""

    id: UUID
    generation_id: Optional[UUID] = None
    population_id: str
    population_name: Optional[str] = None
    site_id: Optional[str] = None
    generated_at: datetime
    target_date: date
    horizon_days: int = Field(..., gt=0)
    current_value: float
    predicted_value: float = Field(..., ge=0, le=3.0)
    confidence: float = Field(..., ge=0, le=1)
    exceedance_probability: float = Field(..., ge=0, le=1)
    risk_level: RiskLevel
    recommended_action: RecommendedAction
    projection_mode: ProjectionMode
    model_version: str
    factors: ForecastFactorsDTO
    defaults_used: DefaultsUsedDTO

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "7f1c8f0e-9d7c-4c84-9f0b-6f2a1b7e9a10",
                "generation_id": "2a8c5a8e-2f8d-4b1f-8f5e-0c1d2e3f4a5b",
                "population_id": "merd-04",
                "population_name": "Merd 4",
                "site_id": "site-hardanger",
                "generated_at": "2025-07-14T06:00:00Z",
                "target_date": "2025-07-21",
                "horizon_days": 7,
                "current_value": 0.3,
                "predicted_value": 0.35,
                "confidence": 0.55,
                "exceedance_probability": 0.5,
                "risk_level": "MEDIUM",
                "recommended_action": "MONITOR",
                "projection_mode": "exponential",
                "model_version": "statistical-v1.0",
                "factors": {
                    "seasonal_factor": 1.5,
                    "temperature_factor": 1.0,
                    "temperature": 12.0,
                    "treatment_damping": 1.0,
                    "adjusted_growth_rate": 0.18,
                    "regression_slope": 0.067,
                    "regression_r2": 0.99,
                    "sample_count": 4,
                    "treatment_count": 0,
                },
                "defaults_used": {
                    "history": False,
                    "temperature": False,
                    "treatments": False,
                },
            }
        }
    )

    @classmethod
    def from_domain(cls, prediction: Prediction) -> "PredictionDTO":
        factors = prediction.factors
        defaults = prediction.defaults_used
        return cls(
            id=prediction.id,
            generation_id=prediction.generation_id,
            population_id=prediction.population_id,
            population_name=prediction.population_name,
            site_id=prediction.site_id,
            generated_at=prediction.generated_at,
            target_date=prediction.target_date,
            horizon_days=prediction.horizon_days,
            current_value=prediction.current_value,
            predicted_value=prediction.predicted_value,
            confidence=prediction.confidence,
            exceedance_probability=prediction.exceedance_probability,
            risk_level=prediction.risk_level,
            recommended_action=prediction.recommended_action,
            projection_mode=prediction.projection_mode,
            model_version=prediction.model_version,
            factors=ForecastFactorsDTO(
                seasonal_factor=factors.seasonal_factor,
                temperature_factor=factors.temperature_factor,
                temperature=factors.temperature,
                treatment_damping=factors.treatment_damping,
                adjusted_growth_rate=factors.adjusted_growth_rate,
                regression_slope=factors.regression_slope,
                regression_r2=factors.regression_r2,
                sample_count=factors.sample_count,
                treatment_count=factors.treatment_count,
            ),
            defaults_used=DefaultsUsedDTO(
                history=defaults.history,
                temperature=defaults.temperature,
                treatments=defaults.treatments,
            ),
        )


class PaginatedPredictionsDTO(BaseModel):
    """Page of predictions with the total matching count."""

    items: List[PredictionDTO]
    total: int
    skip: int
    limit: int
    generation_id: Optional[UUID] = None


class GenerateForecastRequestDTO(BaseModel):
    """Payload for a manually triggered forecast run."""

    horizon_days: int = Field(default=7, gt=0, le=60, description="Days ahead")


class GenerateForecastResponseDTO(BaseModel):
    """Outcome of a manually triggered forecast run for one horizon."""

    horizon_days: int
    prediction_count: int = 0
    critical_count: int = 0
    failed_populations: Dict[str, str] = Field(default_factory=dict)
    skipped: bool = False
    success: bool = True
    error: Optional[str] = None


class PredictionSummaryDTO(BaseModel):
    """Fleet overview of the latest 7-day generation."""

    generation_id: Optional[UUID] = None
    generated_at: Optional[datetime] = None
    horizon_days: int = 7
    total_populations: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    avg_predicted_value: Optional[float] = None
    avg_exceedance_probability: Optional[float] = None
    treatment_needed_count: int = 0
    populations_needing_treatment: List[str] = Field(default_factory=list)


class ModelInfoDTO(BaseModel):
    """Static description of the statistical forecasting model."""

    name: str
    version: str
    description: str
    base_weekly_growth_rate: float
    factors: List[str]
    thresholds: Dict[str, float]
    seasonal_factors: Dict[str, float]
    regression_min_points: int
    regression_min_r2: float
    max_predicted_value: float
