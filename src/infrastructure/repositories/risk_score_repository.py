"""
MongoDB Risk Score Repository - Infrastructure Layer

Scores are appended to ``risk_scores`` for history and upserted into
``risk_scores_current``, which holds exactly one row per population.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

import pymongo
import pymongo.errors

from src.domain.entities.errors import ForecastPersistenceError
from src.domain.entities.risk_score import (
    CompositeRiskLevel,
    RiskScore,
    ScoreDefaultsUsed,
)
from src.domain.repositories.risk_score_repository import IRiskScoreRepository
from src.infrastructure.database import MongoDatabase


class RiskScoreRepository(IRiskScoreRepository):
    """MongoDB implementation of the RiskScoreRepository."""

    HISTORY_COLLECTION = "risk_scores"
    CURRENT_COLLECTION = "risk_scores_current"

    def __init__(self, mongo_database: MongoDatabase):
        self.db = mongo_database

    def _to_document(self, score: RiskScore) -> Dict[str, Any]:
        return {
            "id": str(score.id),
            "population_id": score.population_id,
            "lice_score": score.lice_score,
            "mortality_score": score.mortality_score,
            "environment_score": score.environment_score,
            "treatment_score": score.treatment_score,
            "overall_score": score.overall_score,
            "risk_level": score.risk_level.value,
            "computed_at": score.computed_at,
            "defaults_used": {
                "mortality": score.defaults_used.mortality,
                "environment": score.defaults_used.environment,
                "treatment": score.defaults_used.treatment,
            },
        }

    def _to_entity(self, document: Dict[str, Any]) -> RiskScore:
        defaults = document.get("defaults_used") or {}
        return RiskScore(
            id=UUID(document["id"]),
            population_id=document["population_id"],
            lice_score=int(document["lice_score"]),
            mortality_score=float(document["mortality_score"]),
            environment_score=int(document["environment_score"]),
            treatment_score=int(document["treatment_score"]),
            overall_score=int(document["overall_score"]),
            risk_level=CompositeRiskLevel(document["risk_level"]),
            computed_at=document["computed_at"],
            defaults_used=ScoreDefaultsUsed(
                mortality=bool(defaults.get("mortality", False)),
                environment=bool(defaults.get("environment", False)),
                treatment=bool(defaults.get("treatment", False)),
            ),
        )

    async def save(self, score: RiskScore) -> RiskScore:
        document = self._to_document(score)
        try:
            await self.db.insert_one(self.HISTORY_COLLECTION, dict(document))
            await self.db.upsert_one(
                self.CURRENT_COLLECTION,
                {"population_id": score.population_id},
                dict(document),
            )
        except pymongo.errors.PyMongoError as exc:
            raise ForecastPersistenceError(
                f"Failed to store risk score for {score.population_id}",
                {"population_id": score.population_id, "error": str(exc)},
            ) from exc
        return score

    async def find_latest(self) -> List[RiskScore]:
        documents = await self.db.find_many(
            self.CURRENT_COLLECTION,
            {},
            sort=[
                ("overall_score", pymongo.DESCENDING),
                ("population_id", pymongo.ASCENDING),
            ],
            limit=0,
        )
        return [self._to_entity(document) for document in documents]

    async def find_latest_by_population(
        self, population_id: str
    ) -> Optional[RiskScore]:
        document = await self.db.find_one(
            self.CURRENT_COLLECTION, {"population_id": population_id}
        )
        if document is None:
            return None
        return self._to_entity(document)
