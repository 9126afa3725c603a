"""Dataclasses representing raw counter readings and computed telemetry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class LoadReading:
    percent: float


@dataclass(slots=True, frozen=True)
class MemoryReading:
    active_bytes: int
    total_bytes: int


@dataclass(slots=True, frozen=True)
class InterfaceCounters:
    name: str
    rx_bytes: int
    tx_bytes: int
    oper_state: str = "unknown"

    @property
    def is_up(self) -> bool:
        return self.oper_state == "up"


@dataclass(slots=True, frozen=True)
class DiskIOCounters:
    """Cumulative disk I/O counters summed over every physical device."""

    read_ops: int
    write_ops: int
    read_bytes: int
    write_bytes: int


@dataclass(slots=True, frozen=True)
class FilesystemCounters:
    read_bytes: int
    write_bytes: int


@dataclass(slots=True, frozen=True)
class RawSample:
    """Point-in-time readings collected during one tick.

    ``captured_at`` is a monotonic clock value; only differences between two
    samples are meaningful. ``disk`` and ``filesystem`` are ``None`` when the
    reading was unavailable.
    """

    captured_at: float
    load: LoadReading
    memory: MemoryReading
    interfaces: tuple[InterfaceCounters, ...] = ()
    disk: DiskIOCounters | None = None
    filesystem: FilesystemCounters | None = None
    uptime_seconds: int = 0


@dataclass(slots=True, frozen=True)
class Rates:
    """Throughput in MB/s derived from two consecutive samples."""

    net_in: float = 0.0
    net_out: float = 0.0
    disk_read: float = 0.0
    disk_write: float = 0.0


@dataclass(slots=True, frozen=True)
class SystemStats:
    """One telemetry data point, produced exactly once per tick."""

    cpu: float
    ram: float
    mem_used_gb: float
    mem_total_gb: float
    net_in: float
    net_out: float
    disk_read: float
    disk_write: float
    timestamp: str
    health_score: int
    uptime: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "cpu": self.cpu,
            "ram": self.ram,
            "memUsed": self.mem_used_gb,
            "memTotal": self.mem_total_gb,
            "netIn": self.net_in,
            "netOut": self.net_out,
            "diskRead": self.disk_read,
            "diskWrite": self.disk_write,
            "timestamp": self.timestamp,
            "healthScore": self.health_score,
            "uptime": self.uptime,
        }


@dataclass(slots=True)
class AlertRecord:
    kind: str
    message: str
    severity: str
    triggered_at: float
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity,
            "triggeredAt": self.triggered_at,
            "context": dict(self.context),
        }
