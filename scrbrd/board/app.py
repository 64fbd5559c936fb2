"""
Scoreboard application loop.

One coroutine owns the screen: it waits for a key or the render tick,
applies the key to the store, and redraws from ``store.read()``. The
refresh scheduler runs as a sibling task and only ever writes to the store.
"""
from __future__ import annotations

import asyncio
from datetime import tzinfo
from typing import Optional

from rich.console import Console
from rich.live import Live

from shared.config import Settings, get_settings
from shared.models.domain import utcnow
from shared.models.enums import League
from shared.store import LiveStateStore
from shared.utils.logging import get_logger

from board.keys import Key, TerminalKeyListener
from board.render import build_screen, viewport_games
from scheduler.service import RefreshScheduler

logger = get_logger(__name__)


class ScoreboardApp:
    def __init__(
        self,
        store: LiveStateStore,
        scheduler: RefreshScheduler,
        settings: Settings | None = None,
        console: Console | None = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._tz = tz
        self._quit = False

    @property
    def quitting(self) -> bool:
        return self._quit

    def request_quit(self) -> None:
        self._quit = True

    def viewport_height(self) -> int:
        return viewport_games(self._console.size.height)

    # ── Input ───────────────────────────────────────────────────────────

    def handle_key(self, key: Key) -> None:
        """Apply one key press. Never waits on the network."""
        if key == Key.QUIT:
            self._quit = True
        elif key == Key.UP:
            self._store.scroll(-1, self.viewport_height())
        elif key == Key.DOWN:
            self._store.scroll(1, self.viewport_height())
        elif key == Key.REFRESH:
            self._scheduler.request_refresh()
        elif key in (Key.LEFT, Key.RIGHT):
            self._cycle_league(-1 if key == Key.LEFT else 1)
        elif key == Key.CLEAR_TEAM:
            view = self._store.read().view
            if view.team_filter:
                self._store.set_filter(view.league, None)
                self._scheduler.request_filter_refresh()

    def _cycle_league(self, step: int) -> None:
        leagues = list(League)
        current = self._store.read().view.league
        league = leagues[(leagues.index(current) + step) % len(leagues)]
        # a team belongs to one league, so switching leagues drops the filter
        self._store.set_filter(league, None)
        self._scheduler.request_filter_refresh()

    # ── Loop ────────────────────────────────────────────────────────────

    def render(self):
        return build_screen(
            self._store.read(),
            self._console.size.height,
            now=utcnow(),
            tz=self._tz,
        )

    async def run(self) -> int:
        """Run until the user quits. Returns the process exit status."""
        loop = asyncio.get_running_loop()
        keys: asyncio.Queue[Key] = asyncio.Queue()
        listener = TerminalKeyListener(loop, keys)
        listener.start()

        scheduler_task = asyncio.create_task(self._scheduler.run(), name="refresh-scheduler")
        logger.info("scoreboard_started", league=self._store.read().view.league.value)
        tick = self._settings.render_tick_s
        try:
            with Live(
                self.render(),
                console=self._console,
                screen=True,
                auto_refresh=False,
            ) as live:
                while not self._quit:
                    try:
                        key = await asyncio.wait_for(keys.get(), timeout=tick)
                    except asyncio.TimeoutError:
                        key = None
                    if key is not None:
                        self.handle_key(key)
                        while not keys.empty() and not self._quit:
                            self.handle_key(keys.get_nowait())
                    if scheduler_task.done() and not scheduler_task.cancelled():
                        exc = scheduler_task.exception()
                        if exc is not None:
                            raise exc
                    live.update(self.render(), refresh=True)
        finally:
            listener.stop()
            self.shutdown(scheduler_task)
        logger.info("scoreboard_stopped")
        return 0

    def shutdown(self, scheduler_task: Optional[asyncio.Task] = None) -> None:
        """Stop refreshing and drop any result still in flight."""
        self._scheduler.stop()
        self._store.close()
        if scheduler_task is not None and not scheduler_task.done():
            scheduler_task.cancel()
