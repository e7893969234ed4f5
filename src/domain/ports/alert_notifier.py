"""Domain port for the downstream alerting hook."""

from __future__ import annotations

from typing import Protocol, Sequence

from src.domain.entities.prediction import Prediction


class ICriticalAlertNotifier(Protocol):
    """Receives the CRITICAL subset of a forecast cycle.

    The engine only classifies; delivery belongs to the implementation.
    """

    async def notify_critical(self, predictions: Sequence[Prediction]) -> None:
        ...
