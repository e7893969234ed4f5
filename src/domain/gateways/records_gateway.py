"""
Domain Gateway - Husbandry Records

Interface for reading lice counts, water measurements, treatments and
mortality from the record-keeping store. Implementations raise
RecordsUnavailableError when the store cannot be read; callers decide
how to degrade.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from src.domain.entities.observations import (
    CountObservation,
    EnvironmentReading,
    TreatmentEvent,
)
from src.domain.entities.population import Population


class IRecordsGateway(ABC):
    """Interface for husbandry records gateway."""

    @abstractmethod
    async def list_active_populations(self) -> List[Population]:
        """Return every population flagged as active."""
        pass

    @abstractmethod
    async def get_population(self, population_id: str) -> Optional[Population]:
        """Return a single population or None when unknown."""
        pass

    @abstractmethod
    async def get_count_history(
        self, population_id: str, since: date
    ) -> List[CountObservation]:
        """
        Daily weighted lice ratios sampled on or after ``since``.

        Args:
            population_id: Population identifier
            since: First sampling day to include

        Returns:
            Observations in ascending date order, one per sampling day with
            at least one examined fish.
        """
        pass

    @abstractmethod
    async def get_latest_environment_reading(
        self, population_id: str
    ) -> Optional[EnvironmentReading]:
        """Most recent water measurement, or None if none exists."""
        pass

    @abstractmethod
    async def get_completed_treatments(
        self, population_id: str, since: date
    ) -> List[TreatmentEvent]:
        """Completed treatments on or after ``since``, most recent first."""
        pass

    @abstractmethod
    async def get_average_daily_mortality(
        self, population_id: str, since: date
    ) -> Optional[float]:
        """Average of recorded daily mortality counts, or None without records."""
        pass
