"""
Normalization registry.
Routes a league request through transport, the matching league adapter and the
normalization pipeline, and turns every failure into a typed RefreshError.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

import httpx

from shared.config import Settings, get_settings
from shared.errors import NoSuchTeam, PayloadError, TransportError
from shared.models.domain import Snapshot, utcnow
from shared.models.enums import League
from shared.utils.logging import get_logger

from ingest.adapters import (
    BaseballAdapter,
    BasketballAdapter,
    FootballAdapter,
    HockeyAdapter,
    LeagueAdapter,
    SoccerAdapter,
)
from ingest.normalization.normalizer import dedupe_games, filter_by_team, sort_games

logger = get_logger(__name__)


class ScoreboardFetcher(Protocol):
    async def fetch_scoreboard(self, league: League) -> Any: ...


ADAPTER_CLASSES: dict[League, type[LeagueAdapter]] = {
    League.MLB: BaseballAdapter,
    League.NBA: BasketballAdapter,
    League.WNBA: BasketballAdapter,
    League.NFL: FootballAdapter,
    League.NHL: HockeyAdapter,
    League.MLS: SoccerAdapter,
    League.NWSL: SoccerAdapter,
    League.PREM: SoccerAdapter,
}

_unmapped = set(League) - set(ADAPTER_CLASSES)
if _unmapped:
    raise RuntimeError(f"leagues without an adapter: {sorted(league.value for league in _unmapped)}")


def build_adapters() -> dict[League, LeagueAdapter]:
    """One adapter instance per league."""
    return {league: cls(league) for league, cls in ADAPTER_CLASSES.items()}


class NormalizationRegistry:
    """
    Produces Snapshots for a league and optional team filter.

    Pipeline:
    1. Fetch the raw scoreboard, bounded by ``fetch_timeout_s``
    2. Parse it with the league's adapter (bad games are skipped there)
    3. Deduplicate by id, apply the team filter, sort for display
    """

    def __init__(
        self,
        fetcher: ScoreboardFetcher,
        settings: Settings | None = None,
        adapters: dict[League, LeagueAdapter] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._settings = settings or get_settings()
        self._adapters = adapters or build_adapters()
        self._clock = clock

    def adapter_for(self, league: League) -> LeagueAdapter:
        return self._adapters[league]

    async def fetch_and_normalize(
        self, league: League, team_filter: Optional[str] = None
    ) -> Snapshot:
        """
        Fetch and normalize one league's scoreboard.

        Raises:
            TransportError: Network failure, HTTP error or timeout.
            PayloadError: Response is not a usable scoreboard.
            NoSuchTeam: ``team_filter`` matched none of the league's games.
        """
        raw = await self._fetch(league)
        fetched_at = self._clock()

        result = self.adapter_for(league).parse(raw, fetched_at=fetched_at)
        games = dedupe_games(result.games)

        team = team_filter.strip() if team_filter and team_filter.strip() else None
        if team:
            matched = filter_by_team(games, team)
            if games and not matched:
                logger.info("team_filter_unmatched", league=league.value, team=team, games=len(games))
                raise NoSuchTeam(team)
            games = matched

        snapshot = Snapshot(
            league=league,
            team_filter=team,
            games=tuple(sort_games(games)),
            fetched_at=fetched_at,
            skipped=len(result.skipped),
        )
        logger.info(
            "snapshot_normalized",
            league=league.value,
            team=team,
            games=len(snapshot.games),
            skipped=snapshot.skipped,
        )
        return snapshot

    async def _fetch(self, league: League) -> Any:
        try:
            return await asyncio.wait_for(
                self._fetcher.fetch_scoreboard(league),
                timeout=self._settings.fetch_timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("scoreboard_fetch_timeout", league=league.value)
            raise TransportError(
                f"{league.value}: timed out after {self._settings.fetch_timeout_s:.0f}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{league.value}: ESPN returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{league.value}: {type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise PayloadError(f"{league.value}: response is not JSON") from exc
