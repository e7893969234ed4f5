"""
Infrastructure Layer Package

This package contains implementations of interfaces defined in the
domain layer, dealing with external concerns such as databases,
the daily timer and alert delivery.
"""

from src.infrastructure import database, gateways, repositories, services

__all__ = ["database", "gateways", "repositories", "services"]
