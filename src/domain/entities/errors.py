"""
Domain Errors

Custom error classes for the forecasting domain.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class PopulationNotFoundError(DomainError):
    """Raised when a population cannot be found in the records store."""

    def __init__(self, population_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Population with ID {population_id} not found"
        super().__init__(message, details)


class RecordsUnavailableError(DomainError):
    """Raised by records gateways when the underlying store cannot be read."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ForecastPersistenceError(DomainError):
    """Raised when a forecast batch or risk score cannot be stored."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
