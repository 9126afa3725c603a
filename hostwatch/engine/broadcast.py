"""In-process fan-out of telemetry to live subscribers."""

from __future__ import annotations

import logging
import queue
import threading

from hostwatch.models import SystemStats

logger = logging.getLogger(__name__)


class Subscription:
    """A bounded queue of stats for one consumer; the oldest entry is dropped when full."""

    def __init__(self, hub: "Broadcaster", maxsize: int) -> None:
        self._hub = hub
        self._queue: queue.Queue[SystemStats] = queue.Queue(maxsize=maxsize)
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def offer(self, stats: SystemStats) -> None:
        with self._lock:
            while True:
                try:
                    self._queue.put_nowait(stats)
                    return
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                        self._dropped += 1
                    except queue.Empty:
                        pass

    def get(self, timeout: float | None = None) -> SystemStats | None:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[SystemStats]:
        items: list[SystemStats] = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def close(self) -> None:
        self._hub.unsubscribe(self)


class Broadcaster:
    """Push each published :class:`SystemStats` to every subscriber, at most once."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, maxsize: int = 60) -> Subscription:
        subscription = Subscription(self, maxsize=maxsize)
        with self._lock:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, stats: SystemStats) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for subscription in subscribers:
            subscription.offer(stats)
