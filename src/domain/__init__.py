"""
Domain Layer Package

Entities, pure forecasting services and the interfaces the engine needs
from the outside world. No framework or infrastructure dependencies.
"""

from src.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "repositories", "services", "ports"]
