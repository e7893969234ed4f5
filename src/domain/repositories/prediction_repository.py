"""
Prediction Repository Interface

Predictions are an append-only log. There is no update path: consumers
that need "current" forecasts must select the most recent generation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from uuid import UUID

from src.domain.entities.prediction import Prediction


class IPredictionRepository(ABC):
    """Interface for Prediction repository implementations."""

    @abstractmethod
    async def save_batch(self, predictions: Sequence[Prediction]) -> int:
        """
        Append a batch atomically: every row is stored or none is.

        Args:
            predictions: Predictions sharing one generation_id

        Returns:
            Number of stored predictions

        Raises:
            ForecastPersistenceError: If the batch cannot be stored or its
                generation was already written
        """
        pass

    @abstractmethod
    async def find(
        self,
        population_id: Optional[str] = None,
        risk_level: Optional[str] = None,
        horizon_days: Optional[int] = None,
        generation_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Prediction]:
        """
        Find predictions, most severe first then highest predicted value.

        Args:
            population_id: Filter by population
            risk_level: Filter by risk level (e.g. 'CRITICAL')
            horizon_days: Filter by forecast horizon
            generation_id: Restrict to one generation
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return

        Returns:
            List of predictions matching the criteria
        """
        pass

    @abstractmethod
    async def count(
        self,
        population_id: Optional[str] = None,
        risk_level: Optional[str] = None,
        horizon_days: Optional[int] = None,
        generation_id: Optional[UUID] = None,
    ) -> int:
        """Count predictions matching the same filters as find()."""
        pass

    @abstractmethod
    async def latest_generation_id(
        self, horizon_days: Optional[int] = None
    ) -> Optional[UUID]:
        """Generation id of the most recently generated batch, if any."""
        pass
