"""Domain port for executing one full forecast cycle."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from src.domain.entities.forecast_run import ForecastRunSummary


class IForecastCycleRunner(Protocol):
    """Runs generate, persist and alert for every configured horizon."""

    async def execute(
        self, horizons: Optional[Sequence[int]] = None
    ) -> ForecastRunSummary:
        """Run a cycle; failures are reported in the summary, not raised."""
        ...
