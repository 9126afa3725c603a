"""Threshold alerts on live telemetry."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import replace
from typing import Callable, Deque

from hostwatch.core.config import AlertConfig
from hostwatch.models import AlertRecord, SystemStats

logger = logging.getLogger(__name__)


class ThresholdAlertEvaluator:
    """Raise an alert when CPU or RAM usage crosses its threshold.

    The same alert kind is not raised again until ``cooldown_seconds`` have
    passed. ``on_alert`` receives every triggered :class:`AlertRecord`.
    """

    def __init__(
        self,
        config: AlertConfig | None = None,
        *,
        on_alert: Callable[[AlertRecord], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        keep: int = 50,
    ) -> None:
        self._config = config or AlertConfig()
        self._on_alert = on_alert
        self._clock = clock
        self._last_triggered: dict[str, float] = {}
        self._recent: Deque[AlertRecord] = deque(maxlen=keep)
        self._lock = threading.Lock()

    @property
    def thresholds(self) -> AlertConfig:
        return self._config

    def set_thresholds(self, **changes: float) -> None:
        with self._lock:
            self._config = replace(self._config, **changes)

    def check(self, stats: SystemStats) -> list[AlertRecord]:
        config = self._config
        triggered: list[AlertRecord] = []
        if stats.cpu > config.cpu_percent:
            record = self._trigger("CRITICAL_CPU", f"Critical CPU usage: {stats.cpu}%", stats)
            if record:
                triggered.append(record)
        if stats.ram > config.ram_percent:
            message = (
                f"Critical memory usage: {stats.ram}% "
                f"({stats.mem_used_gb} GB / {stats.mem_total_gb} GB)"
            )
            record = self._trigger("CRITICAL_RAM", message, stats)
            if record:
                triggered.append(record)
        return triggered

    def recent_alerts(self) -> list[AlertRecord]:
        with self._lock:
            return list(self._recent)

    def _trigger(self, kind: str, message: str, stats: SystemStats) -> AlertRecord | None:
        now = self._clock()
        with self._lock:
            last = self._last_triggered.get(kind)
            if last is not None and now - last < self._config.cooldown_seconds:
                return None
            self._last_triggered[kind] = now
            record = AlertRecord(
                kind=kind,
                message=message,
                severity="WARNING",
                triggered_at=time.time(),
                context={"timestamp": stats.timestamp},
            )
            self._recent.append(record)
        logger.warning("Alert triggered: %s - %s", kind, message)
        if self._on_alert is not None:
            self._on_alert(record)
        return record
