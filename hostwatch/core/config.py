"""Global configuration values for the hostwatch telemetry engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True)
class SamplingConfig:
    """Cadences (in seconds) for the sampling loop."""

    fast_interval: float = 1.0  # history, broadcast, alerts
    slow_interval: float = 300.0  # persistence and retention
    read_timeout: float = 2.0  # per-tick budget for the metric reads

    @property
    def persist_every(self) -> int:
        """Number of fast ticks between two persistence runs."""

        return max(1, round(self.slow_interval / self.fast_interval))


@dataclass(frozen=True)
class HistoryConfig:
    """Size of the in-memory ring used by live charts."""

    max_history: int = 30


@dataclass(frozen=True)
class HealthConfig:
    """Penalties applied by the health score heuristic."""

    cpu_high_percent: float = 80.0
    cpu_high_penalty: float = 20.0
    memory_high_ratio: float = 0.9
    memory_high_penalty: float = 20.0
    load_divisor: float = 10.0


@dataclass(frozen=True)
class StorageConfig:
    """Long-term snapshot storage."""

    database_url: str = field(
        default_factory=lambda: f"sqlite:///{Path.home() / '.hostwatch' / 'analytics.db'}"
    )
    retention_days: int = 30


@dataclass(frozen=True)
class AlertConfig:
    """Thresholds (percent) for the default alert evaluator."""

    cpu_percent: float = 90.0
    ram_percent: float = 95.0
    cooldown_seconds: float = 600.0


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class Settings:
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


ENV_PREFIX = "HOSTWATCH_"

# env suffix -> (section, attribute, converter)
_ENV_OVERRIDES = {
    "FAST_INTERVAL": ("sampling", "fast_interval", float),
    "SLOW_INTERVAL": ("sampling", "slow_interval", float),
    "READ_TIMEOUT": ("sampling", "read_timeout", float),
    "MAX_HISTORY": ("history", "max_history", int),
    "DATABASE_URL": ("storage", "database_url", str),
    "RETENTION_DAYS": ("storage", "retention_days", int),
    "ALERT_CPU_PERCENT": ("alerts", "cpu_percent", float),
    "ALERT_RAM_PERCENT": ("alerts", "ram_percent", float),
    "ALERT_COOLDOWN": ("alerts", "cooldown_seconds", float),
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from the defaults plus ``HOSTWATCH_*`` variables."""

    env = os.environ if environ is None else environ
    settings = Settings()
    for suffix, (section, attribute, convert) in _ENV_OVERRIDES.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {ENV_PREFIX}{suffix}: {raw!r}") from exc
        current = getattr(settings, section)
        settings = replace(settings, **{section: replace(current, **{attribute: value})})
    return settings


APP_NAME = "hostwatch"
MB = 1024 * 1024
GB = 1024 * 1024 * 1024
SAMPLING = SamplingConfig()
HISTORY = HistoryConfig()
HEALTH = HealthConfig()
