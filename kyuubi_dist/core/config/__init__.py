"""Configuration management for kyuubi-dist."""

from kyuubi_dist.core.config.loader import ConfigLoader
from kyuubi_dist.core.config.settings import (
    DistSettings,
    LoggingSettings,
    OrchestratorSettings,
    Settings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "DistSettings",
    "LoggingSettings",
    "OrchestratorSettings",
    "Settings",
    "get_settings",
]
