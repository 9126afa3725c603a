"""Health score heuristic."""

from __future__ import annotations

import math

from hostwatch.core.config import HEALTH, HealthConfig


class HealthScorer:
    """Derive a 0-100 score from CPU load and memory pressure.

    Starts at 100, loses a fixed penalty above the high-load CPU threshold,
    another above the memory-pressure threshold, and ``load / 10`` on top.
    The result is clamped and rounded half up.
    """

    def __init__(self, config: HealthConfig = HEALTH) -> None:
        self._config = config

    def score(self, cpu_load_percent: float, mem_active_bytes: int, mem_total_bytes: int) -> int:
        cfg = self._config
        load = max(0.0, float(cpu_load_percent))
        memory_ratio = mem_active_bytes / mem_total_bytes if mem_total_bytes > 0 else 0.0

        value = 100.0
        if load > cfg.cpu_high_percent:
            value -= cfg.cpu_high_penalty
        if memory_ratio > cfg.memory_high_ratio:
            value -= cfg.memory_high_penalty
        value -= load / cfg.load_divisor

        value = max(0.0, min(100.0, value))
        return int(math.floor(value + 0.5))
