"""Background telemetry loop driving history, observers and persistence."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterable

from hostwatch.core.config import SAMPLING
from hostwatch.models import SystemStats

from .history import HistoryBuffer
from .persistence import Persister, RetentionManager
from .sampler import Sampler

logger = logging.getLogger(__name__)

Observer = Callable[[SystemStats], Any]


class TelemetryService:
    """Owns the only sampling loop and everything it mutates.

    One daemon thread ticks every ``interval`` seconds. Each tick is pushed to
    the history buffer and handed to every registered observer. Every
    ``persist_every`` ticks the same stats are written by the persister and
    old rows are pruned, so persistence never takes a competing sample.
    """

    def __init__(
        self,
        sampler: Sampler,
        history: HistoryBuffer | None = None,
        *,
        interval: float = SAMPLING.fast_interval,
        persist_every: int = SAMPLING.persist_every,
        persister: Persister | None = None,
        retention: RetentionManager | None = None,
        observers: Iterable[Observer] = (),
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if persist_every < 1:
            raise ValueError("persist_every must be at least 1")
        self._sampler = sampler
        self._history = history if history is not None else HistoryBuffer()
        self._interval = interval
        self._persist_every = persist_every
        self._persister = persister
        self._retention = retention
        self._observers: list[Observer] = list(observers)
        self._lock = threading.RLock()
        self._thread: threading.Thread | None = None
        self._stop: threading.Event | None = None
        self._latest: SystemStats | None = None
        self._tick_count = 0
        self._diagnostics: dict[str, Any] = {
            "last_run_started": None,
            "last_run_duration": 0.0,
            "last_success_at": None,
            "consecutive_failures": 0,
            "last_error": None,
            "persist_failures": 0,
            "last_persisted_at": None,
        }

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None

    @property
    def history_buffer(self) -> HistoryBuffer:
        return self._history

    @property
    def tick_count(self) -> int:
        with self._lock:
            return self._tick_count

    def subscribe(self, observer: Observer) -> Observer:
        with self._lock:
            self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            stop = threading.Event()
            thread = threading.Thread(target=self._run, args=(stop,), name="TelemetrySampler", daemon=True)
            self._stop = stop
            self._thread = thread
        thread.start()
        logger.info(
            "Telemetry service started (interval=%ss, persist every %d ticks)",
            self._interval,
            self._persist_every,
        )

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread, stop = self._thread, self._stop
            self._thread = None
            self._stop = None
        if thread is None or stop is None:
            return
        stop.set()
        if thread is not threading.current_thread() and thread.is_alive():
            thread.join(timeout=timeout)
        logger.info("Telemetry service stopped")

    def latest(self) -> SystemStats | None:
        with self._lock:
            return self._latest

    def history(self) -> list[SystemStats]:
        return self._history.snapshot()

    def diagnostics(self) -> dict[str, Any]:
        with self._lock:
            data = dict(self._diagnostics)
            data["tick_count"] = self._tick_count
            data["running"] = self._thread is not None
        data.update(self._sampler.diagnostics())
        return data

    def run_once(self) -> SystemStats | None:
        """Run one tick synchronously through the same path as the loop."""

        return self._tick(None)

    def _run(self, stop: threading.Event) -> None:
        while not stop.is_set():
            started = time.perf_counter()
            try:
                self._tick(stop)
            except Exception as exc:  # pragma: no cover - guard for custom collaborators
                logger.exception("Unexpected error during telemetry tick", exc_info=exc)
                self._update_diagnostics(success=False, started=started, error=exc)
            else:
                self._update_diagnostics(success=True, started=started)
            elapsed = time.perf_counter() - started
            stop.wait(max(0.0, self._interval - elapsed))

    def _tick(self, stop: threading.Event | None) -> SystemStats | None:
        stats = self._sampler.tick()
        with self._lock:
            if stop is not None and stop.is_set():
                logger.debug("Discarding tick completed after shutdown")
                return None
            self._history.push(stats)
            self._latest = stats
            self._tick_count += 1
            persist_due = self._tick_count % self._persist_every == 0
            observers = list(self._observers)

        for observer in observers:
            if self._stopped(stop):
                return None
            try:
                observer(stats)
            except Exception as exc:
                logger.exception("Telemetry observer %r failed", observer, exc_info=exc)

        if persist_due:
            if self._stopped(stop):
                return None
            self._persist(stats)
        return stats

    @staticmethod
    def _stopped(stop: threading.Event | None) -> bool:
        if stop is not None and stop.is_set():
            logger.debug("Abandoning tick interrupted by shutdown")
            return True
        return False

    def _persist(self, stats: SystemStats) -> None:
        if self._persister is not None:
            saved = self._persister.save(stats)
            with self._lock:
                if saved:
                    self._diagnostics["last_persisted_at"] = stats.timestamp
                else:
                    self._diagnostics["persist_failures"] += 1
        if self._retention is not None:
            self._retention.prune()

    def _update_diagnostics(self, *, success: bool, started: float, error: Exception | None = None) -> None:
        duration = time.perf_counter() - started
        now = time.time()
        with self._lock:
            self._diagnostics["last_run_started"] = now - duration
            self._diagnostics["last_run_duration"] = duration
            if success:
                self._diagnostics["last_success_at"] = now
                self._diagnostics["consecutive_failures"] = 0
            else:
                self._diagnostics["consecutive_failures"] += 1
                self._diagnostics["last_error"] = {
                    "message": str(error) if error else "unknown",
                    "type": error.__class__.__name__ if error else "UnknownException",
                    "timestamp": now,
                }
