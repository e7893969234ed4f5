"""
Shared module - Cross-cutting concerns

Constants, enums and logging helpers used by every layer of the
forecasting engine. Nothing in here may import from Domain, Application,
Infrastructure or Main.
"""

from .consts import MODEL_VERSION, EnumEnvironment, EnumLogLevel
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "EnumEnvironment",
    "EnumLogLevel",
    "MODEL_VERSION",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
