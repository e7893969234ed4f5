"""Domain ports package."""

from .alert_notifier import ICriticalAlertNotifier
from .forecast_cycle import IForecastCycleRunner

__all__ = ["ICriticalAlertNotifier", "IForecastCycleRunner"]
