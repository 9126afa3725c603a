"""Data provider package."""

from .source import (
    DiskSource,
    LoadSource,
    MemorySource,
    MetricsSource,
    NetworkSource,
    UptimeSource,
)
from .system import PsutilMetricsSource, read_diskstats

__all__ = [
    "DiskSource",
    "LoadSource",
    "MemorySource",
    "MetricsSource",
    "NetworkSource",
    "PsutilMetricsSource",
    "UptimeSource",
    "read_diskstats",
]
