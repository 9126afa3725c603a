"""Models exported by hostwatch."""

from .resource_snapshot import (
    AlertRecord,
    DiskIOCounters,
    FilesystemCounters,
    InterfaceCounters,
    LoadReading,
    MemoryReading,
    Rates,
    RawSample,
    SystemStats,
)

__all__ = [
    "AlertRecord",
    "DiskIOCounters",
    "FilesystemCounters",
    "InterfaceCounters",
    "LoadReading",
    "MemoryReading",
    "Rates",
    "RawSample",
    "SystemStats",
]
