"""Shared fixtures and fakes for the hostwatch test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any, Callable

import pytest
from sqlalchemy.exc import OperationalError

from hostwatch.core.config import GB
from hostwatch.engine import Sampler, SqlSnapshotStore
from hostwatch.models import (
    DiskIOCounters,
    FilesystemCounters,
    InterfaceCounters,
    LoadReading,
    MemoryReading,
    RawSample,
    SystemStats,
)

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeMetricsSource:
    """Mutable stand-in for the OS provider; any capability can be made to fail."""

    def __init__(self) -> None:
        self.load = 10.0
        self.active_bytes = 4 * GB
        self.total_bytes = 16 * GB
        self.interfaces: list[InterfaceCounters] = [InterfaceCounters("eth0", 0, 0, "up")]
        self.disk: DiskIOCounters = DiskIOCounters(0, 0, 0, 0)
        self.filesystem: FilesystemCounters = FilesystemCounters(0, 0)
        self.uptime = 3600
        self.failures: dict[str, Exception] = {}

    def _maybe_fail(self, key: str) -> None:
        exc = self.failures.get(key)
        if exc is not None:
            raise exc

    def current_load(self) -> LoadReading:
        self._maybe_fail("load")
        return LoadReading(percent=self.load)

    def memory(self) -> MemoryReading:
        self._maybe_fail("memory")
        return MemoryReading(active_bytes=self.active_bytes, total_bytes=self.total_bytes)

    def network_counters(self) -> list[InterfaceCounters]:
        self._maybe_fail("network")
        return list(self.interfaces)

    def disk_io_counters(self) -> DiskIOCounters:
        self._maybe_fail("disk")
        return self.disk

    def filesystem_counters(self) -> FilesystemCounters:
        self._maybe_fail("filesystem")
        return self.filesystem

    def uptime_seconds(self) -> int:
        self._maybe_fail("uptime")
        return self.uptime


class UnreachableStore:
    """Store whose every operation fails like a lost database connection."""

    def __init__(self) -> None:
        self.attempts = 0

    def add(self, record: Any) -> None:
        self.attempts += 1
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    def delete_older_than(self, cutoff: Any) -> int:
        self.attempts += 1
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    def fetch_since(self, since: Any) -> list[Any]:
        raise OperationalError("SELECT", {}, Exception("database is locked"))


def step_clock(start: float = 100.0, step: float = 1.0) -> Callable[[], float]:
    counter = itertools.count(start, step)
    return lambda: next(counter)


def raw_sample(
    captured_at: float,
    *,
    interfaces: tuple[InterfaceCounters, ...] = (),
    disk: tuple[int, int] | None = None,
    filesystem: tuple[int, int] | None = None,
) -> RawSample:
    return RawSample(
        captured_at=captured_at,
        load=LoadReading(0.0),
        memory=MemoryReading(0, 0),
        interfaces=interfaces,
        disk=DiskIOCounters(0, 0, disk[0], disk[1]) if disk else None,
        filesystem=FilesystemCounters(*filesystem) if filesystem else None,
    )


def make_stats(**overrides: Any) -> SystemStats:
    values: dict[str, Any] = {
        "cpu": 12.5,
        "ram": 40.0,
        "mem_used_gb": 6.4,
        "mem_total_gb": 16.0,
        "net_in": 0.5,
        "net_out": 0.25,
        "disk_read": 1.0,
        "disk_write": 2.0,
        "timestamp": FIXED_NOW.isoformat(),
        "health_score": 99,
        "uptime": "1h 0m",
    }
    values.update(overrides)
    return SystemStats(**values)


@pytest.fixture
def fake_source() -> FakeMetricsSource:
    return FakeMetricsSource()


@pytest.fixture
def sampler(fake_source: FakeMetricsSource):
    instance = Sampler(fake_source, clock=step_clock(), now=lambda: FIXED_NOW)
    yield instance
    instance.close()


@pytest.fixture
def store():
    instance = SqlSnapshotStore("sqlite:///:memory:")
    yield instance
    instance.close()
