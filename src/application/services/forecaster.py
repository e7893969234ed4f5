"""
Application Service - Population Forecaster

Runs the per-population pipeline: read inputs, fit the trend, derive the
environmental factors, project growth and classify the result.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

import structlog

from src.domain.entities.population import Population
from src.domain.entities.prediction import DefaultsUsed, ForecastFactors, Prediction
from src.domain.services import environment_factors as env
from src.domain.services.growth_projector import adjusted_growth_rate, project_growth
from src.domain.services.risk_classifier import (
    classify_risk,
    exceedance_probability,
    recommend_action,
)
from src.domain.services.rounding import round_half_up
from src.domain.services.trend_estimator import estimate_trend
from src.shared.consts import MODEL_VERSION

from .records_reader import HistoricalDataReader

logger = structlog.get_logger(__name__)


def _reference_instant(as_of: Optional[date]) -> datetime:
    """Aware UTC instant a forecast is made at.

    A bare date means the start of that UTC day; a naive datetime is UTC.
    """
    if as_of is None:
        return datetime.now(timezone.utc)
    if isinstance(as_of, datetime):
        if as_of.tzinfo is None:
            return as_of.replace(tzinfo=timezone.utc)
        return as_of.astimezone(timezone.utc)
    return datetime.combine(as_of, time.min, tzinfo=timezone.utc)


class PopulationForecaster:
    """Produces a single Prediction for one population and horizon."""

    def __init__(
        self,
        records_reader: HistoricalDataReader,
        model_version: str = MODEL_VERSION,
    ) -> None:
        self._reader = records_reader
        self._model_version = model_version

    async def forecast(
        self,
        population: Population,
        horizon_days: int,
        as_of: Optional[date] = None,
    ) -> Prediction:
        """
        Forecast the lice ratio of ``population`` ``horizon_days`` ahead.

        Args:
            population: Population to forecast
            horizon_days: Days ahead of ``as_of`` the forecast targets
            as_of: Reference date or instant, now when omitted

        Returns:
            Prediction with rounded reported values; classification is
            computed on the unrounded projection.

        Raises:
            ValueError: If ``horizon_days`` is not positive
        """
        if horizon_days <= 0:
            raise ValueError("horizon_days must be positive")

        now = _reference_instant(as_of)
        today = now.date()
        population_id = population.id

        history_read = await self._reader.read_count_history(population_id, today)
        temperature_read = await self._reader.read_latest_temperature(population_id)
        treatments_read = await self._reader.read_recent_treatments(
            population_id, today
        )

        history = [observation.value for observation in history_read.value]
        temperature = temperature_read.value
        treatments = treatments_read.value
        month = today.month

        trend = estimate_trend(history)
        seasonal = env.seasonal_factor(month)
        temp_factor = env.temperature_factor(temperature)
        damping = env.treatment_damping(treatments, now)
        growth_rate = adjusted_growth_rate(seasonal, temp_factor, damping)

        projection = project_growth(history, growth_rate, horizon_days, trend=trend)

        limit = env.regulatory_limit(month)
        probability = exceedance_probability(projection.predicted_value, limit)
        risk_level = classify_risk(projection.predicted_value, probability, limit)

        defaults_used = DefaultsUsed(
            history=history_read.defaulted,
            temperature=temperature_read.defaulted,
            treatments=treatments_read.defaulted,
        )
        if defaults_used.any:
            logger.debug(
                "forecast.population.defaults_used",
                population_id=population_id,
                history=defaults_used.history,
                temperature=defaults_used.temperature,
                treatments=defaults_used.treatments,
            )

        current = history[-1] if history else 0.0
        return Prediction(
            population_id=population_id,
            horizon_days=horizon_days,
            target_date=today + timedelta(days=horizon_days),
            current_value=round_half_up(current, 2),
            predicted_value=round_half_up(projection.predicted_value, 2),
            confidence=round_half_up(projection.confidence, 2),
            exceedance_probability=probability,
            risk_level=risk_level,
            recommended_action=recommend_action(risk_level),
            projection_mode=projection.mode,
            factors=ForecastFactors(
                seasonal_factor=seasonal,
                temperature_factor=round_half_up(temp_factor, 2),
                temperature=temperature,
                treatment_damping=damping,
                adjusted_growth_rate=round_half_up(growth_rate, 4),
                regression_slope=round_half_up(trend.slope, 3),
                regression_r2=round_half_up(trend.r2, 2),
                sample_count=len(history),
                treatment_count=len(treatments),
            ),
            defaults_used=defaults_used,
            model_version=self._model_version,
            population_name=population.name,
            site_id=population.site_id,
        )
