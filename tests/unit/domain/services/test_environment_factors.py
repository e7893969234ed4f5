from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities.observations import TreatmentEvent
from src.domain.services.environment_factors import (
    days_since,
    regulatory_limit,
    seasonal_factor,
    temperature_factor,
    treatment_damping,
)

NOW = datetime(2025, 7, 14, 8, tzinfo=timezone.utc)


def _treated(days_ago: float) -> TreatmentEvent:
    return TreatmentEvent(
        population_id="merd-1", completed_at=NOW - timedelta(days=days_ago)
    )


def test_temperature_factor_peaks_at_optimum() -> None:
    assert temperature_factor(12) == 1.0


@pytest.mark.parametrize(
    ("temperature", "expected"),
    [(3.9, 0.3), (-2.0, 0.3), (20.5, 0.8), (4.0, 0.6), (16.0, 0.8), (20.0, 0.6)],
)
def test_temperature_factor_bands(temperature: float, expected: float) -> None:
    assert temperature_factor(temperature) == pytest.approx(expected)


def test_temperature_factor_stays_within_bounds() -> None:
    temperatures = [t / 2 for t in range(-20, 70)]
    factors = [temperature_factor(t) for t in temperatures]
    assert all(0.3 <= factor <= 1.0 for factor in factors)


def test_seasonal_table_is_exact() -> None:
    expected = [0.6, 0.5, 0.7, 0.9, 1.2, 1.4, 1.5, 1.5, 1.3, 1.0, 0.8, 0.7]
    assert [seasonal_factor(month) for month in range(1, 13)] == expected


@pytest.mark.parametrize("month", [0, 13])
def test_seasonal_factor_rejects_invalid_month(month: int) -> None:
    with pytest.raises(ValueError):
        seasonal_factor(month)


def test_regulatory_limit_is_lower_in_spring() -> None:
    assert regulatory_limit(4) == 0.2
    assert regulatory_limit(5) == 0.2
    assert regulatory_limit(3) == 0.5
    assert regulatory_limit(7) == 0.5


@pytest.mark.parametrize(
    ("days_ago", "expected"), [(0, 0.3), (3, 0.3), (7, 0.6), (13, 0.6), (14, 1.0)]
)
def test_treatment_damping_by_recency(days_ago: int, expected: float) -> None:
    assert treatment_damping([_treated(days_ago)], NOW) == expected


def test_treatment_damping_without_treatments() -> None:
    assert treatment_damping([], NOW) == 1.0


def test_treatment_damping_only_considers_most_recent_entry() -> None:
    # Callers pass treatments most recent first; the head decides.
    assert treatment_damping([_treated(10), _treated(2)], NOW) == 0.6


def test_days_since_floors_elapsed_time() -> None:
    completed = datetime(2025, 7, 7, 23, tzinfo=timezone.utc)

    assert days_since(completed, NOW) == 6
    assert days_since(completed, completed + timedelta(days=7)) == 7
    assert days_since(completed, completed + timedelta(days=7, seconds=-1)) == 6


def test_treatment_late_in_the_day_is_still_recent_a_week_later() -> None:
    # 6 days and 9 hours ago: still inside the first week.
    completed = datetime(2025, 7, 7, 23, tzinfo=timezone.utc)
    late_evening = TreatmentEvent(population_id="merd-1", completed_at=completed)

    assert treatment_damping([late_evening], NOW) == 0.3


@pytest.mark.parametrize(("days_ago", "expected"), [(6.99, 0.3), (7.0, 0.6)])
def test_treatment_damping_at_one_week_boundary(days_ago: float, expected: float):
    assert treatment_damping([_treated(days_ago)], NOW) == expected
