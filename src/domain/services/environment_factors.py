"""
Environmental adjustment model.

Pure functions mapping water temperature, calendar month and treatment
recency onto multipliers of the weekly lice growth rate, plus the
month-keyed regulatory limit. The tables are policy constants.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from src.domain.entities.observations import TreatmentEvent

OPTIMAL_TEMPERATURE = 12.0
MIN_TEMPERATURE = 4.0
MAX_TEMPERATURE = 20.0
COLD_FACTOR = 0.3
HEAT_FACTOR = 0.8
TEMPERATURE_FACTOR_FLOOR = 0.5
TEMPERATURE_FACTOR_SLOPE = 0.05

SEASONAL_FACTORS: Dict[int, float] = {
    1: 0.6,
    2: 0.5,
    3: 0.7,
    4: 0.9,
    5: 1.2,
    6: 1.4,
    7: 1.5,
    8: 1.5,
    9: 1.3,
    10: 1.0,
    11: 0.8,
    12: 0.7,
}

ADULT_FEMALE_LIMIT = 0.5
SPRING_LIMIT = 0.2
SPRING_MONTHS = frozenset({4, 5})
WARNING_THRESHOLD = 0.3
CRITICAL_THRESHOLD = 0.7

RECENT_TREATMENT_DAYS = 7
RECOVERY_TREATMENT_DAYS = 14
RECENT_TREATMENT_DAMPING = 0.3
RECOVERY_TREATMENT_DAMPING = 0.6


def temperature_factor(temperature: float) -> float:
    """Triangular response around the optimum, floored at 0.5.

    Below 4 degrees development nearly stalls (0.3); above 20 heat stress
    caps it at 0.8.
    """
    if temperature < MIN_TEMPERATURE:
        return COLD_FACTOR
    if temperature > MAX_TEMPERATURE:
        return HEAT_FACTOR
    deviation = abs(temperature - OPTIMAL_TEMPERATURE)
    return max(TEMPERATURE_FACTOR_FLOOR, 1 - deviation * TEMPERATURE_FACTOR_SLOPE)


def seasonal_factor(month: int) -> float:
    """Seasonal multiplier for a calendar month (1-12)."""
    if month not in SEASONAL_FACTORS:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return SEASONAL_FACTORS[month]


def regulatory_limit(month: int) -> float:
    """Adult female lice limit in force for a calendar month."""
    return SPRING_LIMIT if month in SPRING_MONTHS else ADULT_FEMALE_LIMIT


def days_since(completed_at: datetime, now: datetime) -> int:
    """Whole days elapsed between two aware instants, floored."""
    return math.floor((now - completed_at) / timedelta(days=1))


def treatment_damping(
    treatments: Sequence[TreatmentEvent], now: datetime
) -> float:
    """Growth-rate multiplier for the most recent completed treatment.

    ``treatments`` is ordered most recent first; only the head is considered.
    """
    latest: Optional[TreatmentEvent] = treatments[0] if treatments else None
    if latest is None:
        return 1.0
    elapsed = days_since(latest.completed_at, now)
    if elapsed < RECENT_TREATMENT_DAYS:
        return RECENT_TREATMENT_DAMPING
    if elapsed < RECOVERY_TREATMENT_DAYS:
        return RECOVERY_TREATMENT_DAMPING
    return 1.0
