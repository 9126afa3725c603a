"""Core utilities for hostwatch."""

from __future__ import annotations

from .config import (
    APP_NAME,
    HEALTH,
    HISTORY,
    SAMPLING,
    AlertConfig,
    HealthConfig,
    HistoryConfig,
    SamplingConfig,
    ServerConfig,
    Settings,
    StorageConfig,
    load_settings,
)

__all__ = [
    "APP_NAME",
    "HEALTH",
    "HISTORY",
    "SAMPLING",
    "AlertConfig",
    "HealthConfig",
    "HistoryConfig",
    "SamplingConfig",
    "ServerConfig",
    "Settings",
    "StorageConfig",
    "load_settings",
]
