"""
Logging Alert Notifier - Infrastructure Layer

Default critical-alert hook. Delivery (email, push) belongs to an external
notification service; this implementation only records the alert.
"""

from typing import Sequence

import structlog

from src.domain.entities.prediction import Prediction

logger = structlog.get_logger(__name__)


class LoggingAlertNotifier:
    """Logs one warning per critical prediction."""

    async def notify_critical(self, predictions: Sequence[Prediction]) -> None:
        for prediction in predictions:
            logger.warning(
                "alert.critical_prediction",
                population_id=prediction.population_id,
                population_name=prediction.population_name,
                horizon_days=prediction.horizon_days,
                target_date=prediction.target_date.isoformat(),
                predicted_value=prediction.predicted_value,
                exceedance_probability=prediction.exceedance_probability,
                recommended_action=prediction.recommended_action.value,
            )
