"""hostwatch: host telemetry engine."""

from __future__ import annotations

__all__ = [
    "TelemetryEngine",
    "build_engine",
    "core",
    "data",
    "engine",
    "models",
]

from .app import TelemetryEngine, build_engine  # noqa: E402
