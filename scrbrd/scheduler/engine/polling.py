"""
Refresh interval policy for the scrbrd scheduler.
Computes how long to wait before the next scoreboard fetch given recent failures.
"""
from __future__ import annotations

import random
from typing import Callable

from shared.config import Settings, get_settings
from shared.utils.logging import get_logger
from shared.utils.metrics import SCHEDULER_INTERVAL

logger = get_logger(__name__)

# Consecutive transport failures at which the scheduler is considered in backoff
BACKOFF_AFTER_FAILURES = 2


class BackoffPolicy:
    """
    Exponential backoff on consecutive transport failures.

    The interval formula:

        failures < 2:  interval = base
        failures >= 2: interval = min(base * 2 ** (failures - 1), ceiling)
                       interval = min(interval + jitter(0 .. interval * jitter_factor), ceiling)

    Jitter is never negative, so two failures always wait at least 2x base.
    """

    def __init__(
        self,
        base_s: float,
        ceiling_s: float,
        jitter_factor: float = 0.0,
        rand: Callable[[float, float], float] = random.uniform,
    ) -> None:
        if base_s <= 0:
            raise ValueError("base_s must be positive")
        if ceiling_s < base_s:
            raise ValueError("ceiling_s must be >= base_s")
        self.base_s = base_s
        self.ceiling_s = ceiling_s
        self.jitter_factor = max(0.0, jitter_factor)
        self._rand = rand

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BackoffPolicy":
        settings = settings or get_settings()
        return cls(
            base_s=settings.refresh_interval_s,
            ceiling_s=settings.backoff_ceiling_s,
            jitter_factor=settings.backoff_jitter_factor,
        )

    @staticmethod
    def in_backoff(consecutive_failures: int) -> bool:
        return consecutive_failures >= BACKOFF_AFTER_FAILURES

    def interval(self, consecutive_failures: int) -> float:
        """Seconds to wait before the next scheduled fetch."""
        if not self.in_backoff(consecutive_failures):
            SCHEDULER_INTERVAL.labels(state="idle").observe(self.base_s)
            return self.base_s

        exponent = min(consecutive_failures - 1, 32)
        interval = min(self.base_s * 2 ** exponent, self.ceiling_s)
        if self.jitter_factor:
            interval = min(interval + self._rand(0.0, interval * self.jitter_factor), self.ceiling_s)

        SCHEDULER_INTERVAL.labels(state="backoff").observe(interval)
        logger.debug(
            "backoff_interval_computed",
            failures=consecutive_failures,
            base=self.base_s,
            final_interval=round(interval, 2),
        )
        return interval
