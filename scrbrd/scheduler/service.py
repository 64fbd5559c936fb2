"""
Refresh scheduler for scrbrd.
Drives scoreboard fetches on a fixed interval or on user request, never more
than one at a time, and backs off while the provider is unreachable.

States:
  IDLE: waiting for the interval timer or a manual trigger
  FETCHING: one fetch in flight; manual triggers are coalesced
  BACKOFF: idle after repeated transport failures; the wait doubles
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.errors import PayloadError, RefreshError, TransportError
from shared.models.domain import Snapshot, utcnow
from shared.models.enums import SchedulerState
from shared.store import LiveStateStore, RefreshResult
from shared.utils.logging import get_logger
from shared.utils.metrics import CONSECUTIVE_FAILURES, REFRESH_CYCLES

from ingest.registry import NormalizationRegistry
from scheduler.engine.polling import BackoffPolicy

logger = get_logger(__name__)


class RefreshScheduler:
    """
    Owns the refresh cycle: fetch → normalize → commit to the store.

    Triggers arrive through an asyncio.Event, so the render loop only ever
    sets a flag and never waits on the network.
    """

    def __init__(
        self,
        registry: NormalizationRegistry,
        store: LiveStateStore,
        policy: BackoffPolicy | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._registry = registry
        self._store = store
        self._settings = settings or get_settings()
        self._policy = policy or BackoffPolicy.from_settings(self._settings)
        self._clock = clock
        self._trigger = asyncio.Event()
        self._fetching = False
        self._follow_up = False
        self._stopped = False
        self._failures = 0

    @property
    def state(self) -> SchedulerState:
        if self._fetching:
            return SchedulerState.FETCHING
        if self._policy.in_backoff(self._failures):
            return SchedulerState.BACKOFF
        return SchedulerState.IDLE

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    def current_interval(self) -> float:
        return self._policy.interval(self._failures)

    # ── Triggers ────────────────────────────────────────────────────────

    def request_refresh(self) -> bool:
        """Manual refresh. A no-op while a fetch is in flight."""
        if self._stopped:
            return False
        if self._fetching:
            logger.debug("manual_refresh_coalesced")
            return False
        self._trigger.set()
        return True

    def request_filter_refresh(self) -> None:
        """Refresh after a filter change; runs right after any in-flight fetch."""
        if self._stopped:
            return
        if self._fetching:
            self._follow_up = True
        else:
            self._trigger.set()

    def stop(self) -> None:
        """Stop accepting triggers and let ``run`` exit."""
        self._stopped = True
        self._trigger.set()

    # ── Refresh cycle ───────────────────────────────────────────────────

    async def refresh_once(self) -> bool:
        """
        Run one fetch/commit cycle.

        Returns:
            False if nothing ran because a fetch was already in flight or
            the scheduler is stopped.
        """
        if self._stopped or self._fetching:
            return False
        token = self._store.begin_refresh()
        if token is None:
            return False

        self._fetching = True
        try:
            view = self._store.read().view
            result: RefreshResult
            try:
                result = await self._registry.fetch_and_normalize(view.league, view.team_filter)
            except RefreshError as exc:
                result = exc
            except Exception as exc:
                logger.error("refresh_unexpected_error", error=str(exc), exc_info=True)
                result = PayloadError(f"unexpected error: {exc}")

            if self._stopped:
                return False
            committed = self._store.commit_snapshot(result, generation=token)
            self._record_outcome(view.league.value, result, committed)
            return True
        finally:
            self._fetching = False
            self._store.end_refresh()

    def _record_outcome(self, league: str, result: RefreshResult, committed: bool) -> None:
        # only committed results move the failure counter
        if committed:
            self._failures = self._failures + 1 if isinstance(result, TransportError) else 0
        outcome = "ok" if isinstance(result, Snapshot) else result.kind.value
        REFRESH_CYCLES.labels(league=league, outcome=outcome).inc()
        CONSECUTIVE_FAILURES.set(self._failures)
        logger.info(
            "refresh_cycle_completed",
            league=league,
            outcome=outcome,
            committed=committed,
            failures=self._failures,
            state=self.state.value,
        )

    # ── Main loop ───────────────────────────────────────────────────────

    async def run(self) -> None:
        """
        Fetch immediately, then on every interval tick or trigger until stopped.
        """
        logger.info("refresh_scheduler_started", interval_s=self._policy.base_s)
        while not self._stopped:
            await self.refresh_once()
            if self._follow_up:
                self._follow_up = False
                continue
            if self._stopped:
                break

            wait = self.current_interval()
            self._store.set_next_refresh(self._clock() + timedelta(seconds=wait))
            try:
                await asyncio.wait_for(self._trigger.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass
            self._trigger.clear()

        self._store.set_next_refresh(None)
        logger.info("refresh_scheduler_stopped")

    def next_refresh_in(self, now: Optional[datetime] = None) -> Optional[float]:
        at = self._store.read().view.next_refresh_at
        if at is None:
            return None
        now = now or self._clock()
        return max(0.0, (at - now).total_seconds())
