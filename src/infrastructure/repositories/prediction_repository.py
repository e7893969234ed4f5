"""
MongoDB Prediction Repository - Infrastructure Layer

This module implements the IPredictionRepository interface using MongoDB.
Predictions are appended per generation inside a transaction and never
updated.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import pymongo
import pymongo.errors
import structlog

from src.domain.entities.errors import ForecastPersistenceError
from src.domain.entities.prediction import (
    DefaultsUsed,
    ForecastFactors,
    Prediction,
    ProjectionMode,
    RecommendedAction,
    RiskLevel,
)
from src.domain.repositories.prediction_repository import IPredictionRepository
from src.infrastructure.database import MongoDatabase

logger = structlog.get_logger(__name__)

SEVERITY_SORT = [
    ("severity_rank", pymongo.ASCENDING),
    ("predicted_value", pymongo.DESCENDING),
]


class PredictionRepository(IPredictionRepository):
    """MongoDB implementation of the prediction log."""

    COLLECTION_NAME = "predictions"

    def __init__(self, mongo_database: MongoDatabase):
        self.db = mongo_database

    def _to_document(self, prediction: Prediction) -> Dict[str, Any]:
        factors = prediction.factors
        return {
            "id": str(prediction.id),
            "generation_id": str(prediction.generation_id),
            "population_id": prediction.population_id,
            "population_name": prediction.population_name,
            "site_id": prediction.site_id,
            "generated_at": prediction.generated_at,
            "target_date": prediction.target_date.isoformat(),
            "horizon_days": prediction.horizon_days,
            "current_value": prediction.current_value,
            "predicted_value": prediction.predicted_value,
            "confidence": prediction.confidence,
            "exceedance_probability": prediction.exceedance_probability,
            "risk_level": prediction.risk_level.value,
            "severity_rank": prediction.risk_level.severity_rank,
            "recommended_action": prediction.recommended_action.value,
            "projection_mode": prediction.projection_mode.value,
            "model_version": prediction.model_version,
            "factors": {
                "seasonal_factor": factors.seasonal_factor,
                "temperature_factor": factors.temperature_factor,
                "temperature": factors.temperature,
                "treatment_damping": factors.treatment_damping,
                "adjusted_growth_rate": factors.adjusted_growth_rate,
                "regression_slope": factors.regression_slope,
                "regression_r2": factors.regression_r2,
                "sample_count": factors.sample_count,
                "treatment_count": factors.treatment_count,
            },
            "defaults_used": {
                "history": prediction.defaults_used.history,
                "temperature": prediction.defaults_used.temperature,
                "treatments": prediction.defaults_used.treatments,
            },
        }

    def _to_entity(self, document: Dict[str, Any]) -> Prediction:
        factors = document.get("factors") or {}
        defaults = document.get("defaults_used") or {}
        generation_id = document.get("generation_id")
        return Prediction(
            id=UUID(document["id"]),
            generation_id=UUID(generation_id) if generation_id else None,
            population_id=document["population_id"],
            population_name=document.get("population_name"),
            site_id=document.get("site_id"),
            generated_at=document["generated_at"],
            target_date=date.fromisoformat(document["target_date"]),
            horizon_days=int(document["horizon_days"]),
            current_value=float(document["current_value"]),
            predicted_value=float(document["predicted_value"]),
            confidence=float(document["confidence"]),
            exceedance_probability=float(document["exceedance_probability"]),
            risk_level=RiskLevel(document["risk_level"]),
            recommended_action=RecommendedAction(document["recommended_action"]),
            projection_mode=ProjectionMode(
                document.get("projection_mode", ProjectionMode.EXPONENTIAL.value)
            ),
            model_version=document["model_version"],
            factors=ForecastFactors(
                seasonal_factor=float(factors.get("seasonal_factor", 0.0)),
                temperature_factor=float(factors.get("temperature_factor", 0.0)),
                temperature=float(factors.get("temperature", 0.0)),
                treatment_damping=float(factors.get("treatment_damping", 1.0)),
                adjusted_growth_rate=float(factors.get("adjusted_growth_rate", 0.0)),
                regression_slope=float(factors.get("regression_slope", 0.0)),
                regression_r2=float(factors.get("regression_r2", 0.0)),
                sample_count=int(factors.get("sample_count", 0)),
                treatment_count=int(factors.get("treatment_count", 0)),
            ),
            defaults_used=DefaultsUsed(
                history=bool(defaults.get("history", False)),
                temperature=bool(defaults.get("temperature", False)),
                treatments=bool(defaults.get("treatments", False)),
            ),
        )

    @staticmethod
    def _build_query(
        population_id: Optional[str],
        risk_level: Optional[str],
        horizon_days: Optional[int],
        generation_id: Optional[UUID],
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if population_id:
            query["population_id"] = population_id
        if risk_level:
            query["risk_level"] = risk_level
        if horizon_days is not None:
            query["horizon_days"] = horizon_days
        if generation_id is not None:
            query["generation_id"] = str(generation_id)
        return query

    async def save_batch(self, predictions: Sequence[Prediction]) -> int:
        """
        Append one generation atomically.

        Raises:
            ForecastPersistenceError: If the batch mixes generations, the
                generation was already written or the transaction aborted
        """
        if not predictions:
            return 0

        generation_ids = {prediction.generation_id for prediction in predictions}
        if len(generation_ids) != 1 or None in generation_ids:
            raise ForecastPersistenceError(
                "A prediction batch must carry exactly one generation_id"
            )
        generation_id = str(generation_ids.pop())

        try:
            existing = await self.db.count_documents(
                self.COLLECTION_NAME, {"generation_id": generation_id}
            )
            if existing:
                raise ForecastPersistenceError(
                    f"Generation {generation_id} was already persisted",
                    {"generation_id": generation_id, "existing": existing},
                )
            documents = [self._to_document(p) for p in predictions]
            return await self.db.insert_many_atomic(self.COLLECTION_NAME, documents)
        except pymongo.errors.PyMongoError as exc:
            logger.error(
                "predictions.batch.rolled_back",
                generation_id=generation_id,
                size=len(predictions),
                error=str(exc),
            )
            raise ForecastPersistenceError(
                f"Failed to store prediction batch {generation_id}",
                {"generation_id": generation_id, "error": str(exc)},
            ) from exc

    async def find(
        self,
        population_id: Optional[str] = None,
        risk_level: Optional[str] = None,
        horizon_days: Optional[int] = None,
        generation_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Prediction]:
        query = self._build_query(
            population_id, risk_level, horizon_days, generation_id
        )
        documents = await self.db.find_many(
            self.COLLECTION_NAME,
            query,
            sort=SEVERITY_SORT,
            skip=skip,
            limit=limit,
        )
        return [self._to_entity(document) for document in documents]

    async def count(
        self,
        population_id: Optional[str] = None,
        risk_level: Optional[str] = None,
        horizon_days: Optional[int] = None,
        generation_id: Optional[UUID] = None,
    ) -> int:
        query = self._build_query(
            population_id, risk_level, horizon_days, generation_id
        )
        return await self.db.count_documents(self.COLLECTION_NAME, query)

    async def latest_generation_id(
        self, horizon_days: Optional[int] = None
    ) -> Optional[UUID]:
        query: Dict[str, Any] = {}
        if horizon_days is not None:
            query["horizon_days"] = horizon_days
        document = await self.db.find_one(
            self.COLLECTION_NAME,
            query,
            sort=[("generated_at", pymongo.DESCENDING)],
        )
        if document is None or not document.get("generation_id"):
            return None
        return UUID(document["generation_id"])
