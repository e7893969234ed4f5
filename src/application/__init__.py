"""
Application Layer Package

This package contains the application-specific business rules
and use cases. It reads husbandry records through the domain gateway,
drives the forecasting services and hands results to the repositories.
"""

# Re-export submodules
from src.application import dtos, services, use_cases

__all__ = ["dtos", "services", "use_cases"]
