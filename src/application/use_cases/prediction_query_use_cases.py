"""
Prediction Query Use Cases - Application Layer

Read-side use cases over the prediction log: paginated listing, the fleet
summary of the latest generation and the model description.
"""

from typing import List, Optional

from dependency_injector.wiring import Provide, inject

from src.domain.entities.prediction import (
    MAX_PREDICTED_VALUE,
    Prediction,
    RecommendedAction,
    RiskLevel,
)
from src.domain.repositories.prediction_repository import IPredictionRepository
from src.domain.services import environment_factors as env
from src.domain.services.growth_projector import (
    BASE_WEEKLY_GROWTH_RATE,
    MIN_REGRESSION_POINTS,
    MIN_REGRESSION_R2,
)
from src.domain.services.rounding import round_half_up
from src.shared.consts import MODEL_VERSION

from ..dtos.prediction_dto import (
    ModelInfoDTO,
    PaginatedPredictionsDTO,
    PredictionDTO,
    PredictionSummaryDTO,
)

MODEL_NAME = "Sea Lice Statistical Prediction Model"
SUMMARY_HORIZON_DAYS = 7
_MONTH_NAMES = (
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
)
_TREATMENT_ACTIONS = {
    RecommendedAction.IMMEDIATE_TREATMENT,
    RecommendedAction.SCHEDULE_TREATMENT,
}


class GetPredictionsUseCase:
    """Use case for listing stored predictions."""

    @inject
    def __init__(
        self,
        prediction_repository: IPredictionRepository = Provide[
            "prediction_repository"
        ],
    ):
        self.prediction_repository = prediction_repository

    async def execute(
        self,
        population_id: Optional[str] = None,
        risk_level: Optional[RiskLevel] = None,
        horizon_days: Optional[int] = None,
        latest_only: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> PaginatedPredictionsDTO:
        """
        Retrieve predictions with pagination and filtering.

        Args:
            population_id: Filter by population
            risk_level: Filter by risk level
            horizon_days: Filter by horizon
            latest_only: Restrict to the most recent generation
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Page of predictions, most severe first
        """
        level = risk_level.value if risk_level is not None else None
        generation_id = None
        if latest_only:
            generation_id = await self.prediction_repository.latest_generation_id(
                horizon_days
            )
            if generation_id is None:
                return PaginatedPredictionsDTO(
                    items=[], total=0, skip=skip, limit=limit
                )

        filters = dict(
            population_id=population_id,
            risk_level=level,
            horizon_days=horizon_days,
            generation_id=generation_id,
        )
        predictions = await self.prediction_repository.find(
            **filters, skip=skip, limit=limit
        )
        total = await self.prediction_repository.count(**filters)
        return PaginatedPredictionsDTO(
            items=[PredictionDTO.from_domain(p) for p in predictions],
            total=total,
            skip=skip,
            limit=limit,
            generation_id=generation_id,
        )


class GetPredictionSummaryUseCase:
    """Use case summarising the latest 7-day generation."""

    @inject
    def __init__(
        self,
        prediction_repository: IPredictionRepository = Provide[
            "prediction_repository"
        ],
    ):
        self.prediction_repository = prediction_repository

    async def execute(
        self, horizon_days: int = SUMMARY_HORIZON_DAYS
    ) -> PredictionSummaryDTO:
        generation_id = await self.prediction_repository.latest_generation_id(
            horizon_days
        )
        if generation_id is None:
            return PredictionSummaryDTO(horizon_days=horizon_days)

        total = await self.prediction_repository.count(
            horizon_days=horizon_days, generation_id=generation_id
        )
        predictions = await self.prediction_repository.find(
            horizon_days=horizon_days,
            generation_id=generation_id,
            limit=max(total, 1),
        )
        return self._summarize(generation_id, horizon_days, predictions)

    @staticmethod
    def _summarize(generation_id, horizon_days: int, predictions: List[Prediction]):
        counts = {level: 0 for level in RiskLevel}
        for prediction in predictions:
            counts[prediction.risk_level] += 1

        needing_treatment = [
            prediction.population_name or prediction.population_id
            for prediction in predictions
            if prediction.recommended_action in _TREATMENT_ACTIONS
        ]

        avg_predicted = None
        avg_probability = None
        if predictions:
            avg_predicted = round_half_up(
                sum(p.predicted_value for p in predictions) / len(predictions), 2
            )
            avg_probability = round_half_up(
                sum(p.exceedance_probability for p in predictions) / len(predictions),
                2,
            )

        return PredictionSummaryDTO(
            generation_id=generation_id,
            generated_at=predictions[0].generated_at if predictions else None,
            horizon_days=horizon_days,
            total_populations=len(predictions),
            critical_count=counts[RiskLevel.CRITICAL],
            high_count=counts[RiskLevel.HIGH],
            medium_count=counts[RiskLevel.MEDIUM],
            low_count=counts[RiskLevel.LOW],
            avg_predicted_value=avg_predicted,
            avg_exceedance_probability=avg_probability,
            treatment_needed_count=len(needing_treatment),
            populations_needing_treatment=needing_treatment,
        )


class GetModelInfoUseCase:
    """Describes the constants of the statistical model."""

    def __init__(self, model_version: str = MODEL_VERSION):
        self.model_version = model_version

    async def execute(self) -> ModelInfoDTO:
        return ModelInfoDTO(
            name=MODEL_NAME,
            version=self.model_version,
            description=(
                "Least-squares trend extrapolation with an exponential growth "
                "fallback, adjusted for season, water temperature and recent "
                "treatments."
            ),
            base_weekly_growth_rate=BASE_WEEKLY_GROWTH_RATE,
            factors=[
                "historical_trend",
                "seasonal_pattern",
                "water_temperature",
                "recent_treatments",
            ],
            thresholds={
                "adult_female_limit": env.ADULT_FEMALE_LIMIT,
                "spring_limit": env.SPRING_LIMIT,
                "warning_threshold": env.WARNING_THRESHOLD,
                "critical_threshold": env.CRITICAL_THRESHOLD,
            },
            seasonal_factors={
                _MONTH_NAMES[month - 1]: factor
                for month, factor in env.SEASONAL_FACTORS.items()
            },
            regression_min_points=MIN_REGRESSION_POINTS,
            regression_min_r2=MIN_REGRESSION_R2,
            max_predicted_value=MAX_PREDICTED_VALUE,
        )
