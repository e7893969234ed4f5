"""Ordinary least-squares trend over sample positions."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from src.domain.entities.prediction import TrendEstimate


def estimate_trend(values: Sequence[float]) -> TrendEstimate:
    """Fit ``value = slope * index + intercept`` with closed-form sums.

    The x axis is the sample position, not elapsed days, so irregular
    sampling is treated as evenly spaced. Fewer than two points yield an
    all-zero estimate that must not be read as a meaningful fit.
    """
    n = len(values)
    if n < 2:
        return TrendEstimate(sample_count=n)

    y = np.asarray(values, dtype=float)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_x2 = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    fitted = slope * x + intercept
    ss_res = float(((y - fitted) ** 2).sum())
    ss_tot = float(((y - y.mean()) ** 2).sum())
    r2 = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return TrendEstimate(
        slope=float(slope),
        intercept=float(intercept),
        r2=float(r2),
        sample_count=n,
    )
