"""Unit tests for the live subscriber hub."""

import threading

from hostwatch.engine.broadcast import Broadcaster
from tests.conftest import make_stats


class TestBroadcaster:
    def test_publish_without_subscribers(self):
        Broadcaster().publish(make_stats())

    def test_every_subscriber_receives_each_stats_once(self):
        hub = Broadcaster()
        first, second = hub.subscribe(), hub.subscribe()
        stats = make_stats()

        hub.publish(stats)

        assert first.get(timeout=0.1) is stats
        assert second.drain() == [stats]
        assert first.get(timeout=0.01) is None

    def test_full_queue_drops_oldest(self):
        hub = Broadcaster()
        subscription = hub.subscribe(maxsize=2)
        items = [make_stats(cpu=float(i)) for i in range(5)]
        for item in items:
            hub.publish(item)
        assert subscription.drain() == items[-2:]
        assert subscription.dropped == 3

    def test_concurrent_publishers_account_for_every_drop(self):
        hub = Broadcaster()
        subscription = hub.subscribe(maxsize=10)
        stats = make_stats()

        def publish_many():
            for _ in range(500):
                hub.publish(stats)

        publishers = [threading.Thread(target=publish_many) for _ in range(4)]
        for thread in publishers:
            thread.start()
        for thread in publishers:
            thread.join()

        assert len(subscription.drain()) == 10
        assert subscription.dropped == 1990

    def test_close_unsubscribes(self):
        hub = Broadcaster()
        subscription = hub.subscribe()
        assert hub.subscriber_count == 1
        subscription.close()
        assert hub.subscriber_count == 0
        hub.publish(make_stats())
        assert subscription.drain() == []
