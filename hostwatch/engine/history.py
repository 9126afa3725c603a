"""Bounded in-memory history of recent telemetry."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque

from hostwatch.core.config import HISTORY
from hostwatch.models import SystemStats


class HistoryBuffer:
    """FIFO ring of the most recent :class:`SystemStats`."""

    def __init__(self, max_history: int = HISTORY.max_history) -> None:
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._items: Deque[SystemStats] = deque(maxlen=max_history)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def push(self, stats: SystemStats) -> None:
        with self._lock:
            self._items.append(stats)

    def snapshot(self) -> list[SystemStats]:
        with self._lock:
            return list(self._items)

    def latest(self) -> SystemStats | None:
        with self._lock:
            return self._items[-1] if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
