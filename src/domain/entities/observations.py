"""Domain entities for raw husbandry observations read by the engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class CountObservation:
    """Weighted lice count per examined fish for one sampling day."""

    population_id: str
    date: date
    value: float


@dataclass(slots=True)
class EnvironmentReading:
    """Most recent water measurement for a population."""

    population_id: str
    timestamp: datetime
    temperature: Optional[float] = None
    oxygen_percent: Optional[float] = None


@dataclass(slots=True)
class TreatmentEvent:
    """A completed delousing treatment.

    ``completed_at`` is the timezone-aware completion instant.
    """

    population_id: str
    completed_at: datetime
    effectiveness_percent: Optional[float] = None
    treatment_type: Optional[str] = None

    @property
    def completed_date(self) -> date:
        return self.completed_at.date()
