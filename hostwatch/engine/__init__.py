"""Telemetry engine: sampling, rates, health, history and persistence."""

from __future__ import annotations

from .alerts import ThresholdAlertEvaluator
from .broadcast import Broadcaster, Subscription
from .health import HealthScorer
from .history import HistoryBuffer
from .persistence import Persister, RetentionManager
from .rates import RateComputer
from .sampler import Sampler, format_uptime
from .service import TelemetryService
from .store import SnapshotRecord, SqlSnapshotStore

__all__ = [
    "Broadcaster",
    "HealthScorer",
    "HistoryBuffer",
    "Persister",
    "RateComputer",
    "RetentionManager",
    "Sampler",
    "SnapshotRecord",
    "SqlSnapshotStore",
    "Subscription",
    "TelemetryService",
    "ThresholdAlertEvaluator",
    "format_uptime",
]
