"""
Composition root of the forecast engine.

Settings, the dependency container and the two entry points live here:
``app`` serves the operator HTTP surface and ``worker`` owns the daily
forecast scheduler in a headless process.
"""

from .config import AppSettings, get_settings
from .container import AppContainer, get_container, init_container

__all__ = [
    "AppSettings",
    "AppContainer",
    "get_settings",
    "get_container",
    "init_container",
]
