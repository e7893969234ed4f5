"""
Controllers Package - Presentation Layer

This package contains FastAPI controllers (routers) that handle
HTTP requests and responses. Controllers are responsible for
input validation, error handling, and mapping between API DTOs
and application layer use cases.
"""

from .predictions_controller import router as predictions_router
from .risk_scores_controller import router as risk_scores_router
from .scheduler_controller import router as scheduler_router

__all__ = ["predictions_router", "risk_scores_router", "scheduler_router"]
