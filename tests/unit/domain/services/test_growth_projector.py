from __future__ import annotations

import pytest

from src.domain.entities.prediction import ProjectionMode
from src.domain.services.growth_projector import (
    adjusted_growth_rate,
    clamp_prediction,
    project_growth,
)


def test_adjusted_growth_rate_multiplies_factors() -> None:
    assert adjusted_growth_rate(1.5, 1.0) == pytest.approx(0.18)
    assert adjusted_growth_rate(1.5, 1.0, 0.3) == pytest.approx(0.054)


def test_short_history_uses_exponential_fallback() -> None:
    projection = project_growth([0.10, 0.15, 0.22, 0.30], 0.18, 7)

    assert projection.mode == ProjectionMode.EXPONENTIAL
    assert projection.predicted_value == pytest.approx(0.354)
    assert projection.confidence == pytest.approx(0.55)


def test_five_point_linear_history_uses_regression() -> None:
    projection = project_growth([0.10, 0.15, 0.22, 0.30, 0.37], 0.18, 7)

    assert projection.mode == ProjectionMode.REGRESSION
    assert projection.predicted_value == pytest.approx(0.504)
    assert 0.7 <= projection.confidence <= 0.9
    assert projection.confidence == pytest.approx(0.7 + 0.2 * 0.99436, abs=1e-4)


def test_noisy_history_falls_back_despite_enough_points() -> None:
    projection = project_growth([0.2, 0.1, 0.2, 0.1, 0.2], 0.1, 7)

    assert projection.mode == ProjectionMode.EXPONENTIAL
    assert projection.confidence == pytest.approx(0.6)


def test_empty_history_predicts_zero_with_minimum_confidence() -> None:
    projection = project_growth([], 0.18, 14)

    assert projection.predicted_value == 0.0
    assert projection.confidence == 0.5


def test_extreme_growth_is_clamped_to_ceiling() -> None:
    projection = project_growth([1.0], 5.0, 70)

    assert projection.predicted_value == 3.0


def test_falling_trend_is_floored_at_zero() -> None:
    projection = project_growth([1.0, 0.8, 0.6, 0.4, 0.2], 0.1, 28)

    assert projection.mode == ProjectionMode.REGRESSION
    assert projection.predicted_value == 0.0


def test_clamp_prediction_bounds() -> None:
    assert clamp_prediction(-0.4) == 0.0
    assert clamp_prediction(4.2) == 3.0
    assert clamp_prediction(1.1) == 1.1


@pytest.mark.parametrize("horizon", [0, -7])
def test_non_positive_horizon_is_rejected(horizon: int) -> None:
    with pytest.raises(ValueError):
        project_growth([0.1, 0.2], 0.1, horizon)
