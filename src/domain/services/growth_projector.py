"""
Growth projector.

Chooses between extrapolating the fitted trend and a bounded exponential
growth model, and attaches a heuristic confidence to the result.
"""

from __future__ import annotations

from typing import Optional, Sequence

from src.domain.entities.prediction import (
    MAX_PREDICTED_VALUE,
    GrowthProjection,
    ProjectionMode,
    TrendEstimate,
)
from src.domain.services.trend_estimator import estimate_trend

BASE_WEEKLY_GROWTH_RATE = 0.12
MIN_REGRESSION_POINTS = 5
MIN_REGRESSION_R2 = 0.5
FULL_HISTORY_POINTS = 7


def adjusted_growth_rate(
    seasonal: float, temperature: float, damping: float = 1.0
) -> float:
    """Weekly growth rate after seasonal, temperature and treatment factors."""
    return BASE_WEEKLY_GROWTH_RATE * seasonal * temperature * damping


def clamp_prediction(value: float) -> float:
    return min(max(value, 0.0), MAX_PREDICTED_VALUE)


def project_growth(
    history: Sequence[float],
    growth_rate: float,
    horizon_days: int,
    trend: Optional[TrendEstimate] = None,
) -> GrowthProjection:
    """Project the lice ratio ``horizon_days`` ahead.

    Regression mode needs at least five samples and R² above 0.5; it
    extrapolates to index ``len(history) + horizon_days / 7`` assuming weekly
    samples. Otherwise the latest value grows by ``growth_rate`` per week.
    The result is clamped to [0, 3.0].
    """
    if horizon_days <= 0:
        raise ValueError("horizon_days must be positive")

    trend = trend or estimate_trend(history)
    weeks = horizon_days / 7
    current = history[-1] if history else 0.0

    if len(history) >= MIN_REGRESSION_POINTS and trend.r2 > MIN_REGRESSION_R2:
        target_index = len(history) + weeks
        predicted = trend.slope * target_index + trend.intercept
        confidence = 0.7 + trend.r2 * 0.2
        mode = ProjectionMode.REGRESSION
    else:
        predicted = current * (1 + growth_rate) ** weeks
        sparse_penalty = FULL_HISTORY_POINTS - min(len(history), FULL_HISTORY_POINTS)
        confidence = max(0.5, 0.7 - 0.05 * sparse_penalty)
        mode = ProjectionMode.EXPONENTIAL

    return GrowthProjection(
        predicted_value=clamp_prediction(predicted),
        confidence=min(max(confidence, 0.0), 1.0),
        mode=mode,
        adjusted_growth_rate=growth_rate,
    )
