"""
Risk Score Repository Interface

Every computation is appended to a history log and replaces the current
score of its population.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities.risk_score import RiskScore


class IRiskScoreRepository(ABC):
    """Interface for RiskScore repository implementations."""

    @abstractmethod
    async def save(self, score: RiskScore) -> RiskScore:
        """
        Store a freshly computed score.

        Raises:
            ForecastPersistenceError: If the score cannot be stored
        """
        pass

    @abstractmethod
    async def find_latest(self) -> List[RiskScore]:
        """Current score of every population, highest overall score first."""
        pass

    @abstractmethod
    async def find_latest_by_population(
        self, population_id: str
    ) -> Optional[RiskScore]:
        """Current score of one population, if it was ever computed."""
        pass
