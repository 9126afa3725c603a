"""One sampling tick: read the provider, derive rates and health, build stats."""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Any, Callable

from hostwatch.core.config import GB, SAMPLING
from hostwatch.data.source import MetricsSource
from hostwatch.models import (
    LoadReading,
    MemoryReading,
    RawSample,
    SystemStats,
)

from .health import HealthScorer
from .rates import RateComputer

logger = logging.getLogger(__name__)

# capability -> value substituted when the read fails or times out
_NEUTRAL_DEFAULTS: dict[str, Any] = {
    "load": LoadReading(percent=0.0),
    "memory": MemoryReading(active_bytes=0, total_bytes=0),
    "network": (),
    "disk": None,
    "filesystem": None,
    "uptime": 0,
}


def format_uptime(seconds: float) -> str:
    """Format an uptime as ``"2d 5h 30m"``; the day part is dropped when zero."""

    seconds = max(0, int(seconds))
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    prefix = f"{days}d " if days > 0 else ""
    return f"{prefix}{hours}h {minutes}m"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Sampler:
    """Produces exactly one :class:`SystemStats` per :meth:`tick`.

    The provider's capabilities are read concurrently. A capability that
    raises, or does not answer within ``read_timeout`` seconds, is replaced by
    a neutral default so the tick always yields a data point. Every call
    advances the previous-sample reference held by the rate computer, so two
    back-to-back ticks do not return the same rates.
    """

    def __init__(
        self,
        source: MetricsSource,
        *,
        rates: RateComputer | None = None,
        scorer: HealthScorer | None = None,
        read_timeout: float = SAMPLING.read_timeout,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._source = source
        self._rates = rates or RateComputer()
        self._scorer = scorer or HealthScorer()
        self._read_timeout = read_timeout
        self._clock = clock
        self._now = now
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=len(_NEUTRAL_DEFAULTS), thread_name_prefix="MetricRead")
        self._pending: dict[str, Future[Any]] = {}
        self._failures: defaultdict[str, int] = defaultdict(int)
        self._last_error: dict[str, Any] | None = None

    def tick(self) -> SystemStats:
        with self._lock:
            sample = self._read_sample()
            rates = self._rates.update(sample)
            memory = sample.memory
            total = memory.total_bytes
            active = memory.active_bytes
            health = self._scorer.score(sample.load.percent, active, total)

            return SystemStats(
                cpu=round(sample.load.percent, 1),
                ram=round(active / total * 100, 1) if total > 0 else 0.0,
                mem_used_gb=round(active / GB, 1),
                mem_total_gb=round(total / GB, 1),
                net_in=round(rates.net_in, 2),
                net_out=round(rates.net_out, 2),
                disk_read=round(rates.disk_read, 2),
                disk_write=round(rates.disk_write, 2),
                timestamp=self._now().isoformat(),
                health_score=health,
                uptime=format_uptime(sample.uptime_seconds),
            )

    def diagnostics(self) -> dict[str, Any]:
        with self._lock:
            return {
                "read_failures": dict(self._failures),
                "last_error": self._last_error,
            }

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _read_sample(self) -> RawSample:
        source = self._source
        calls: dict[str, Callable[[], Any]] = {
            "load": source.current_load,
            "memory": source.memory,
            "network": source.network_counters,
            "disk": source.disk_io_counters,
            "filesystem": source.filesystem_counters,
            "uptime": source.uptime_seconds,
        }
        # At most one read per capability is outstanding.
        stalled = {key for key, future in self._pending.items() if not future.done()}
        self._pending = {key: self._pending[key] for key in stalled}
        futures: dict[str, Future[Any]] = {
            key: self._executor.submit(fn) for key, fn in calls.items() if key not in stalled
        }
        wait(futures.values(), timeout=self._read_timeout)
        captured_at = self._clock()

        values: dict[str, Any] = {}
        for key in calls:
            if key in stalled:
                self._record_failure(key, TimeoutError("previous read is still running"))
                values[key] = _NEUTRAL_DEFAULTS[key]
            else:
                values[key] = self._result(key, futures[key])
        return RawSample(
            captured_at=captured_at,
            load=values["load"],
            memory=values["memory"],
            interfaces=tuple(values["network"] or ()),
            disk=values["disk"],
            filesystem=values["filesystem"],
            uptime_seconds=int(values["uptime"] or 0),
        )

    def _result(self, key: str, future: Future[Any]) -> Any:
        if not future.done():
            if not future.cancel():
                self._pending[key] = future
            self._record_failure(key, TimeoutError(f"no answer within {self._read_timeout}s"))
            return _NEUTRAL_DEFAULTS[key]
        exc = future.exception()
        if exc is not None:
            self._record_failure(key, exc)
            return _NEUTRAL_DEFAULTS[key]
        return future.result()

    def _record_failure(self, key: str, exc: BaseException) -> None:
        logger.warning("Metric read '%s' failed, using neutral default: %s", key, exc)
        self._failures[key] += 1
        self._last_error = {
            "provider": key,
            "message": str(exc),
            "type": exc.__class__.__name__,
            "timestamp": time.time(),
        }
