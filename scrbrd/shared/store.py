"""
Live state store for scrbrd.

Holds the current Snapshot and the ViewState. Both are immutable values that
are swapped under a lock, so ``read()`` always returns a pair taken from one
consistent moment: never half of one refresh and half of another.
"""
from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, NamedTuple, Optional, Union

from shared.errors import RefreshError
from shared.models.domain import Snapshot, ViewState, utcnow
from shared.models.enums import League
from shared.utils.logging import get_logger
from shared.utils.metrics import GAMES_ON_BOARD

logger = get_logger(__name__)

RefreshResult = Union[Snapshot, RefreshError]


class StoreView(NamedTuple):
    """Read-only pair handed to the renderer."""
    snapshot: Optional[Snapshot]
    view: ViewState

    @property
    def game_count(self) -> int:
        return len(self.snapshot.games) if self.snapshot else 0


def clamp_offset(offset: int, game_count: int, viewport_height: int) -> int:
    """Clamp a scroll offset to [0, max(0, game_count - viewport_height)]."""
    upper = max(0, game_count - max(0, viewport_height))
    return max(0, min(offset, upper))


class LiveStateStore:
    """
    Single shared mutable resource between the refresh cycle and the input loop.

    Writers:
    - refresh cycle: begin_refresh / commit_snapshot / end_refresh
    - input loop: scroll / set_filter
    Readers take ``read()`` and never touch internals.
    """

    def __init__(
        self,
        league: League,
        team_filter: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._snapshot: Optional[Snapshot] = None
        self._view = ViewState(league=league, team_filter=_clean(team_filter))
        self._generation = 0
        self._in_flight = False
        self._viewport_height = 0
        self._closed = False

    # ── Reads ───────────────────────────────────────────────────────────

    def read(self) -> StoreView:
        with self._lock:
            return StoreView(self._snapshot, self._view)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    # ── Refresh cycle ───────────────────────────────────────────────────

    def begin_refresh(self) -> Optional[int]:
        """
        Mark a fetch as in flight.

        Returns:
            The filter generation the fetch belongs to, or None if another
            fetch is already in flight (or the store is closed).
        """
        with self._lock:
            if self._in_flight or self._closed:
                return None
            self._in_flight = True
            self._view = self._view.model_copy(update={"refreshing": True})
            return self._generation

    def end_refresh(self) -> None:
        with self._lock:
            self._in_flight = False
            self._view = self._view.model_copy(update={"refreshing": False})

    def commit_snapshot(self, result: RefreshResult, generation: Optional[int] = None) -> bool:
        """
        Apply the outcome of one refresh cycle.

        A Snapshot replaces the current one wholesale and clears the error.
        A RefreshError keeps the previous good snapshot and records the error.

        Returns:
            False if the result was discarded (store closed, or it was fetched
            for a filter that has since changed).
        """
        with self._lock:
            if self._closed:
                logger.debug("refresh_result_discarded", reason="closed")
                return False
            if generation is not None and generation != self._generation:
                logger.debug(
                    "refresh_result_discarded",
                    reason="stale_generation",
                    generation=generation,
                    current=self._generation,
                )
                return False

            if isinstance(result, Snapshot):
                self._snapshot = result
                count = len(result.games)
                self._view = self._view.model_copy(update={
                    "last_error": None,
                    "error_message": None,
                    "last_refresh_at": result.fetched_at,
                    "scroll_offset": clamp_offset(
                        self._view.scroll_offset, count, self._viewport_height
                    ),
                })
                GAMES_ON_BOARD.labels(league=result.league.value).set(count)
            else:
                self._view = self._view.model_copy(update={
                    "last_error": result.kind,
                    "error_message": result.message,
                })
                logger.warning(
                    "refresh_failed_keeping_snapshot",
                    kind=result.kind.value,
                    error=result.message,
                    games_kept=len(self._snapshot.games) if self._snapshot else 0,
                )
            return True

    def set_next_refresh(self, at: Optional[datetime]) -> None:
        with self._lock:
            self._view = self._view.model_copy(update={"next_refresh_at": at})

    # ── Input loop ──────────────────────────────────────────────────────

    def scroll(self, delta: int, viewport_height: int) -> int:
        """Move the scroll offset by ``delta`` rows, clamped. Returns the new offset."""
        with self._lock:
            self._viewport_height = max(0, viewport_height)
            count = len(self._snapshot.games) if self._snapshot else 0
            offset = clamp_offset(self._view.scroll_offset + delta, count, viewport_height)
            if offset != self._view.scroll_offset:
                self._view = self._view.model_copy(update={"scroll_offset": offset})
            return offset

    def set_filter(self, league: League, team: Optional[str]) -> int:
        """
        Switch league/team. Resets scrolling and flags a refresh as pending;
        the caller must trigger that refresh immediately.

        Returns:
            The new filter generation.
        """
        with self._lock:
            team = _clean(team)
            if league != self._view.league:
                self._snapshot = None
            self._generation += 1
            self._view = self._view.model_copy(update={
                "league": league,
                "team_filter": team,
                "scroll_offset": 0,
                "refreshing": True,
                "last_error": None,
                "error_message": None,
            })
            logger.info("filter_changed", league=league.value, team=team, generation=self._generation)
            return self._generation

    def close(self) -> None:
        """Stop accepting refresh results (quit in progress)."""
        with self._lock:
            self._closed = True


def _clean(team: Optional[str]) -> Optional[str]:
    if team is None:
        return None
    team = team.strip()
    return team or None
