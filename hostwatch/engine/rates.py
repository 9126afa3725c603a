"""Turn cumulative counters into MB/s throughput."""

from __future__ import annotations

from typing import Sequence

from hostwatch.core.config import MB
from hostwatch.models import InterfaceCounters, Rates, RawSample


def counter_rate(current: int | None, previous: int | None, elapsed: float) -> float:
    """Return the MB/s rate between two cumulative readings.

    A counter that went backwards (reset, wraparound) yields 0.
    """

    if current is None or previous is None or elapsed <= 0:
        return 0.0
    return max(0.0, (current - previous) / elapsed / MB)


def select_interface(interfaces: Sequence[InterfaceCounters]) -> InterfaceCounters | None:
    """Pick the first interface that is up and has seen traffic, else the first one."""

    for iface in interfaces:
        if iface.is_up and (iface.rx_bytes > 0 or iface.tx_bytes > 0):
            return iface
    return interfaces[0] if interfaces else None


class RateComputer:
    """Holds the previous sample and derives rates against it.

    Not thread-safe: a single sampling path must own an instance.
    """

    def __init__(self) -> None:
        self._previous: RawSample | None = None

    @property
    def previous(self) -> RawSample | None:
        return self._previous

    def reset(self) -> None:
        self._previous = None

    def update(self, sample: RawSample) -> Rates:
        """Compute rates for ``sample`` and make it the new reference point."""

        previous = self._previous
        self._previous = sample
        if previous is None:
            return Rates()

        elapsed = sample.captured_at - previous.captured_at
        net_in, net_out = self._network_rates(sample, previous, elapsed)
        disk_read, disk_write = self._disk_rates(sample, previous, elapsed)
        return Rates(net_in=net_in, net_out=net_out, disk_read=disk_read, disk_write=disk_write)

    @staticmethod
    def _network_rates(sample: RawSample, previous: RawSample, elapsed: float) -> tuple[float, float]:
        active = select_interface(sample.interfaces)
        if active is None:
            return 0.0, 0.0
        last = next((iface for iface in previous.interfaces if iface.name == active.name), None)
        if last is None:
            return 0.0, 0.0
        return (
            counter_rate(active.rx_bytes, last.rx_bytes, elapsed),
            counter_rate(active.tx_bytes, last.tx_bytes, elapsed),
        )

    @staticmethod
    def _disk_rates(sample: RawSample, previous: RawSample, elapsed: float) -> tuple[float, float]:
        disk, last_disk = sample.disk, previous.disk
        fs, last_fs = sample.filesystem, previous.filesystem

        read = counter_rate(
            disk.read_bytes if disk else None,
            last_disk.read_bytes if last_disk else None,
            elapsed,
        )
        if read == 0.0:
            read = counter_rate(
                fs.read_bytes if fs else None,
                last_fs.read_bytes if last_fs else None,
                elapsed,
            )

        write = counter_rate(
            disk.write_bytes if disk else None,
            last_disk.write_bytes if last_disk else None,
            elapsed,
        )
        if write == 0.0:
            write = counter_rate(
                fs.write_bytes if fs else None,
                last_fs.write_bytes if last_fs else None,
                elapsed,
            )
        return read, write
