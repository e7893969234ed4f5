"""
Forecast Cycle Use Case - Application Layer

One full fleet run as driven by the daily scheduler or a manual trigger:
generate and persist a batch per horizon, hand the critical subset of the
first horizon to the alert hook and refresh composite risk scores.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

import structlog

from src.domain.entities.errors import ForecastPersistenceError
from src.domain.entities.forecast_run import ForecastBatch, ForecastRunSummary
from src.domain.ports.alert_notifier import ICriticalAlertNotifier

from .forecast_use_cases import (
    ForecastError,
    GenerateForecastsUseCase,
    PersistForecastsUseCase,
)
from .risk_score_use_cases import ComputeRiskScoreUseCase

logger = structlog.get_logger(__name__)

DEFAULT_HORIZONS = (7, 14)


class RunForecastCycleUseCase:
    """Runs generate, persist and alert for every configured horizon."""

    def __init__(
        self,
        generate_forecasts: GenerateForecastsUseCase,
        persist_forecasts: PersistForecastsUseCase,
        compute_risk_score: ComputeRiskScoreUseCase,
        alert_notifier: ICriticalAlertNotifier,
        horizons: Sequence[int] = DEFAULT_HORIZONS,
        refresh_risk_scores: bool = True,
    ):
        self.generate_forecasts = generate_forecasts
        self.persist_forecasts = persist_forecasts
        self.compute_risk_score = compute_risk_score
        self.alert_notifier = alert_notifier
        self.horizons: List[int] = list(horizons) or list(DEFAULT_HORIZONS)
        self.refresh_risk_scores = refresh_risk_scores

    async def execute(
        self, horizons: Optional[Sequence[int]] = None
    ) -> ForecastRunSummary:
        """
        Run one cycle.

        Args:
            horizons: Horizons in days, configured horizons when omitted

        Returns:
            Summary of the run; failures are reported, never raised
        """
        horizons = list(horizons) if horizons else self.horizons
        summary = ForecastRunSummary(success=True)
        logger.info("forecast.cycle.started", horizons=horizons)

        try:
            first_batch = await self._run_horizons(horizons, summary)
            if summary.success and first_batch is not None and self.refresh_risk_scores:
                summary.risk_scores_refreshed = await self._refresh_scores(
                    first_batch
                )
        except Exception as exc:
            logger.error("forecast.cycle.crashed", error=str(exc), exc_info=True)
            summary.success = False
            summary.error = str(exc)

        summary.finished_at = datetime.now(timezone.utc)
        log = logger.info if summary.success else logger.error
        log(
            "forecast.cycle.completed",
            success=summary.success,
            prediction_count_by_horizon=summary.prediction_count_by_horizon,
            critical_count=summary.critical_count,
            failed_populations=len(summary.failed_populations),
            risk_scores_refreshed=summary.risk_scores_refreshed,
            error=summary.error,
        )
        return summary

    async def _run_horizons(
        self, horizons: List[int], summary: ForecastRunSummary
    ) -> Optional[ForecastBatch]:
        first_batch: Optional[ForecastBatch] = None

        for index, horizon_days in enumerate(horizons):
            try:
                batch = await self.generate_forecasts.execute(horizon_days)
            except ForecastError as exc:
                summary.success = False
                summary.error = str(exc)
                return first_batch

            for failure in batch.failures:
                summary.failed_populations[failure.population_id] = failure.error

            try:
                stored = await self.persist_forecasts.execute(batch)
            except ForecastPersistenceError as exc:
                summary.success = False
                summary.error = exc.message
                return first_batch

            summary.prediction_count_by_horizon[horizon_days] = stored

            if index == 0:
                first_batch = batch
                await self._alert(batch, summary)

        return first_batch

    async def _alert(self, batch: ForecastBatch, summary: ForecastRunSummary) -> None:
        critical = batch.critical_predictions
        summary.critical_count = len(critical)
        if not critical:
            return

        logger.warning(
            "forecast.cycle.critical_predictions",
            horizon_days=batch.horizon_days,
            count=len(critical),
            populations=[p.population_id for p in critical],
        )
        try:
            await self.alert_notifier.notify_critical(critical)
        except Exception as exc:
            logger.error("forecast.cycle.alert_failed", error=str(exc))

    async def _refresh_scores(self, batch: ForecastBatch) -> int:
        refreshed = 0
        for prediction in batch.predictions:
            try:
                await self.compute_risk_score.score_from_prediction(prediction)
            except Exception as exc:
                logger.warning(
                    "risk_score.refresh_failed",
                    population_id=prediction.population_id,
                    error=str(exc),
                )
                continue
            refreshed += 1
        return refreshed
