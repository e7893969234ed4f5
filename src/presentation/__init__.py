"""
Presentation Layer Package

FastAPI routers through which operators trigger forecast runs, read
predictions and risk scores, and control the daily scheduler.
"""

from src.presentation import controllers

__all__ = ["controllers"]
