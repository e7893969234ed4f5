"""Infrastructure services package."""

from .alert_notifier import LoggingAlertNotifier
from .forecast_scheduler import DailyForecastScheduler

__all__ = ["DailyForecastScheduler", "LoggingAlertNotifier"]
