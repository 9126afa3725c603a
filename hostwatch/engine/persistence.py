"""Slow-cadence persistence and retention."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from hostwatch.models import SystemStats

from .store import SnapshotRecord, SnapshotStore, utc_now

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=30)


def _to_naive_utc(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return utc_now()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def record_from_stats(stats: SystemStats) -> SnapshotRecord:
    return SnapshotRecord(
        cpu=stats.cpu,
        ram=stats.ram,
        net_in=stats.net_in,
        net_out=stats.net_out,
        disk_read=stats.disk_read,
        disk_write=stats.disk_write,
        timestamp=_to_naive_utc(stats.timestamp),
    )


class Persister:
    """Write one downsampled row per call; failures are logged and skipped."""

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    def save(self, stats: SystemStats) -> bool:
        try:
            self._store.add(record_from_stats(stats))
        except Exception as exc:
            logger.exception("Failed to persist telemetry snapshot", exc_info=exc)
            return False
        return True


class RetentionManager:
    """Delete persisted rows older than the retention window.

    Rows whose age equals the window exactly are kept.
    """

    def __init__(
        self,
        store: SnapshotStore,
        window: timedelta = DEFAULT_RETENTION,
        *,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._window = window
        self._now = now

    @property
    def window(self) -> timedelta:
        return self._window

    def cutoff(self, now: datetime | None = None) -> datetime:
        return (now or self._now()) - self._window

    def prune(self, now: datetime | None = None) -> int:
        cutoff = self.cutoff(now)
        try:
            deleted = self._store.delete_older_than(cutoff)
        except Exception as exc:
            logger.exception("Failed to prune telemetry older than %s", cutoff, exc_info=exc)
            return 0
        if deleted:
            logger.info("Pruned %d telemetry rows older than %s", deleted, cutoff)
        return deleted
