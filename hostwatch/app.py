"""Composition root: build the telemetry engine from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from hostwatch.core.config import Settings, load_settings
from hostwatch.data import MetricsSource, PsutilMetricsSource
from hostwatch.engine import (
    Broadcaster,
    HealthScorer,
    HistoryBuffer,
    Persister,
    RetentionManager,
    Sampler,
    SqlSnapshotStore,
    TelemetryService,
    ThresholdAlertEvaluator,
)

logger = logging.getLogger(__name__)


@dataclass
class TelemetryEngine:
    """Every long-lived component, wired together."""

    settings: Settings
    sampler: Sampler
    service: TelemetryService
    store: SqlSnapshotStore
    broadcaster: Broadcaster
    alerts: ThresholdAlertEvaluator

    def start(self) -> None:
        self.service.start()

    def shutdown(self, timeout: float | None = 5.0) -> None:
        self.service.stop(timeout=timeout)
        self.sampler.close()
        self.store.close()


def build_engine(
    settings: Settings | None = None,
    *,
    source: MetricsSource | None = None,
    store: SqlSnapshotStore | None = None,
) -> TelemetryEngine:
    settings = settings or load_settings()
    sampling = settings.sampling

    sampler = Sampler(
        source or PsutilMetricsSource(),
        scorer=HealthScorer(settings.health),
        read_timeout=sampling.read_timeout,
    )
    store = store or SqlSnapshotStore(settings.storage.database_url)
    broadcaster = Broadcaster()
    alerts = ThresholdAlertEvaluator(settings.alerts)

    service = TelemetryService(
        sampler,
        HistoryBuffer(settings.history.max_history),
        interval=sampling.fast_interval,
        persist_every=sampling.persist_every,
        persister=Persister(store),
        retention=RetentionManager(store, timedelta(days=settings.storage.retention_days)),
        observers=(broadcaster.publish, alerts.check),
    )
    logger.debug("Telemetry engine built with %s", settings)
    return TelemetryEngine(
        settings=settings,
        sampler=sampler,
        service=service,
        store=store,
        broadcaster=broadcaster,
        alerts=alerts,
    )
