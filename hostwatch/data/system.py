"""psutil-backed metrics provider."""

from __future__ import annotations

import time
from pathlib import Path

import psutil

from hostwatch.models import (
    DiskIOCounters,
    FilesystemCounters,
    InterfaceCounters,
    LoadReading,
    MemoryReading,
)

_DISKSTATS_PATH = Path("/proc/diskstats")
_SYS_BLOCK_PATH = Path("/sys/block")
_SECTOR_SIZE = 512
_VIRTUAL_PREFIXES = ("loop", "ram", "zram", "dm-", "md")


def _is_physical_disk(name: str, sys_block: Path) -> bool:
    if name.startswith(_VIRTUAL_PREFIXES):
        return False
    return (sys_block / name).exists()


def read_diskstats(
    path: Path = _DISKSTATS_PATH, sys_block: Path = _SYS_BLOCK_PATH
) -> FilesystemCounters:
    """Sum sectors read/written across whole disks listed in ``/proc/diskstats``.

    Partitions are skipped so their traffic is not counted twice. Raises
    ``OSError`` where the file does not exist (non-Linux hosts).
    """

    read_sectors = 0
    write_sectors = 0
    for line in path.read_text(encoding="utf-8").splitlines():
        fields = line.split()
        if len(fields) < 10:
            continue
        name = fields[2]
        if not _is_physical_disk(name, sys_block):
            continue
        try:
            read_sectors += int(fields[5])
            write_sectors += int(fields[9])
        except ValueError:
            continue
    return FilesystemCounters(
        read_bytes=read_sectors * _SECTOR_SIZE,
        write_bytes=write_sectors * _SECTOR_SIZE,
    )


class PsutilMetricsSource:
    """Reads the host counters through psutil.

    ``psutil.cpu_percent(interval=None)`` compares against the previous call,
    so the very first load reading after start-up is 0.
    """

    def __init__(self, diskstats_path: Path = _DISKSTATS_PATH) -> None:
        self._diskstats_path = diskstats_path
        psutil.cpu_percent(interval=None)

    def current_load(self) -> LoadReading:
        return LoadReading(percent=float(psutil.cpu_percent(interval=None)))

    def memory(self) -> MemoryReading:
        mem = psutil.virtual_memory()
        # "active" is only reported on Linux, BSD and macOS
        active = getattr(mem, "active", None)
        if active is None:
            active = mem.total - mem.available
        return MemoryReading(active_bytes=int(active), total_bytes=int(mem.total))

    def network_counters(self) -> list[InterfaceCounters]:
        stats = psutil.net_if_stats()
        counters = psutil.net_io_counters(pernic=True)
        interfaces: list[InterfaceCounters] = []
        for name, iface_counters in counters.items():
            iface_stats = stats.get(name)
            is_up = bool(getattr(iface_stats, "isup", False))
            interfaces.append(
                InterfaceCounters(
                    name=name,
                    rx_bytes=int(iface_counters.bytes_recv),
                    tx_bytes=int(iface_counters.bytes_sent),
                    oper_state="up" if is_up else "down",
                )
            )
        return interfaces

    def disk_io_counters(self) -> DiskIOCounters:
        per_device = psutil.disk_io_counters(perdisk=True) or {}
        read_ops = write_ops = read_bytes = write_bytes = 0
        for counters in per_device.values():
            read_ops += counters.read_count
            write_ops += counters.write_count
            read_bytes += counters.read_bytes
            write_bytes += counters.write_bytes
        return DiskIOCounters(
            read_ops=read_ops,
            write_ops=write_ops,
            read_bytes=read_bytes,
            write_bytes=write_bytes,
        )

    def filesystem_counters(self) -> FilesystemCounters:
        return read_diskstats(self._diskstats_path)

    def uptime_seconds(self) -> int:
        return max(0, int(time.time() - psutil.boot_time()))
