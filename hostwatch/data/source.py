"""Capabilities the sampler needs from an OS metrics provider.

Each metric group is its own protocol so a provider can be faked one
capability at a time, and a failure in one group never takes the others
down with it.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from hostwatch.models import (
    DiskIOCounters,
    FilesystemCounters,
    InterfaceCounters,
    LoadReading,
    MemoryReading,
)


@runtime_checkable
class LoadSource(Protocol):
    def current_load(self) -> LoadReading: ...


@runtime_checkable
class MemorySource(Protocol):
    def memory(self) -> MemoryReading: ...


@runtime_checkable
class NetworkSource(Protocol):
    def network_counters(self) -> Sequence[InterfaceCounters]: ...


@runtime_checkable
class DiskSource(Protocol):
    def disk_io_counters(self) -> DiskIOCounters: ...

    def filesystem_counters(self) -> FilesystemCounters: ...


@runtime_checkable
class UptimeSource(Protocol):
    def uptime_seconds(self) -> int: ...


@runtime_checkable
class MetricsSource(LoadSource, MemorySource, NetworkSource, DiskSource, UptimeSource, Protocol):
    """Everything :class:`~hostwatch.engine.sampler.Sampler` reads in a tick."""
