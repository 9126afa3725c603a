"""HTTP access to hostwatch telemetry."""

from __future__ import annotations

__all__ = [
    "TelemetryServer",
    "create_app",
]

from .server import TelemetryServer, create_app  # noqa: E402
