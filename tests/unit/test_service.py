"""Unit tests for the telemetry service lifecycle and scheduling."""

import threading
import time

import pytest

from hostwatch.engine.history import HistoryBuffer
from hostwatch.engine.persistence import Persister
from hostwatch.engine.service import TelemetryService
from tests.conftest import UnreachableStore, make_stats


class RecordingPersister:
    def __init__(self):
        self.saved = []

    def save(self, stats):
        self.saved.append(stats)
        return True


class RecordingRetention:
    def __init__(self):
        self.calls = 0

    def prune(self, now=None):
        self.calls += 1
        return 0


class BlockingSampler:
    """Sampler whose tick waits until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def tick(self):
        self.entered.set()
        self.release.wait(5)
        return make_stats()

    def diagnostics(self):
        return {}


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def sampler_threads_alive():
    return any(thread.name == "TelemetrySampler" for thread in threading.enumerate())


class TestTick:
    def test_run_once_feeds_history_and_observers(self, sampler):
        received = []
        service = TelemetryService(sampler, HistoryBuffer(5), observers=[received.append])

        stats = service.run_once()

        assert service.history() == [stats]
        assert service.latest() is stats
        assert received == [stats]
        assert service.tick_count == 1

    def test_persists_every_nth_tick_with_the_computed_stats(self, sampler):
        persister = RecordingPersister()
        retention = RecordingRetention()
        service = TelemetryService(
            sampler, HistoryBuffer(10), persist_every=3, persister=persister, retention=retention
        )

        produced = [service.run_once() for _ in range(7)]

        assert persister.saved == [produced[2], produced[5]]
        assert retention.calls == 2

    def test_unreachable_store_does_not_break_schedule(self, sampler):
        store = UnreachableStore()
        service = TelemetryService(sampler, persist_every=2, persister=Persister(store))

        for _ in range(4):
            assert service.run_once() is not None

        assert store.attempts == 2
        assert service.diagnostics()["persist_failures"] == 2

    def test_failing_observer_does_not_block_others(self, sampler):
        received = []

        def broken(stats):
            raise RuntimeError("subscriber gone")

        service = TelemetryService(sampler, observers=[broken, received.append])
        stats = service.run_once()
        assert received == [stats]

    def test_subscribe_and_unsubscribe(self, sampler):
        received = []
        service = TelemetryService(sampler)
        observer = service.subscribe(received.append)
        service.run_once()
        service.unsubscribe(observer)
        service.run_once()
        assert len(received) == 1

    @pytest.mark.parametrize(("interval", "persist_every"), [(0, 1), (-1.0, 1), (1.0, 0)])
    def test_invalid_arguments(self, sampler, interval, persist_every):
        with pytest.raises(ValueError):
            TelemetryService(sampler, interval=interval, persist_every=persist_every)


class TestLifecycle:
    def test_start_is_idempotent_and_stop_halts_ticks(self, sampler):
        service = TelemetryService(sampler, interval=0.02)
        service.start()
        service.start()
        try:
            assert service.is_running
            assert wait_for(lambda: service.tick_count >= 3)
            assert sum(1 for t in threading.enumerate() if t.name == "TelemetrySampler") == 1
        finally:
            service.stop()

        assert not service.is_running
        count = service.tick_count
        time.sleep(0.1)
        assert service.tick_count == count

    def test_stop_without_start(self, sampler):
        service = TelemetryService(sampler)
        service.stop()
        assert not service.is_running

    def test_restart(self, sampler):
        service = TelemetryService(sampler, interval=0.02)
        service.start()
        assert wait_for(lambda: service.tick_count >= 1)
        service.stop()
        first = service.tick_count
        service.start()
        try:
            assert wait_for(lambda: service.tick_count > first)
        finally:
            service.stop()

    def test_tick_in_flight_at_stop_is_discarded(self):
        blocking = BlockingSampler()
        received = []
        persister = RecordingPersister()
        service = TelemetryService(
            blocking, interval=0.01, persist_every=1, persister=persister, observers=[received.append]
        )
        service.start()
        assert blocking.entered.wait(2)

        service.stop(timeout=0.01)
        blocking.release.set()
        assert wait_for(lambda: not sampler_threads_alive())

        assert service.history() == []
        assert service.latest() is None
        assert received == []
        assert persister.saved == []

    def test_blocked_observer_at_stop_does_not_persist(self, sampler):
        entered = threading.Event()
        release = threading.Event()
        later = []
        persister = RecordingPersister()
        retention = RecordingRetention()

        def slow_observer(stats):
            entered.set()
            release.wait(5)

        service = TelemetryService(
            sampler,
            interval=0.01,
            persist_every=1,
            persister=persister,
            retention=retention,
            observers=[slow_observer, later.append],
        )
        service.start()
        assert entered.wait(2)

        service.stop(timeout=0.05)
        release.set()
        assert wait_for(lambda: not sampler_threads_alive())

        assert persister.saved == []
        assert retention.calls == 0
        assert later == []
