"""Half-up rounding used for reported scores and forecast values."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties away from zero for positive values (0.125 -> 0.13)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
