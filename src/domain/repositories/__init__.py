"""
Repository interfaces package - Domain Layer

Persistence contracts for forecast logs and composite risk scores.
"""

from src.domain.repositories.prediction_repository import IPredictionRepository
from src.domain.repositories.risk_score_repository import IRiskScoreRepository

__all__ = ["IPredictionRepository", "IRiskScoreRepository"]
