"""
League adapter interface.
Every adapter converts one league's raw ESPN scoreboard payload into canonical Games.

Extraction that is identical across ESPN scoreboards (ids, competitors, teams,
records, broadcasts, pre/post status) lives here; each subclass only decides
what an in-progress game looks like for its sport.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import ValidationError

from shared.errors import MissingField, ParseError, PayloadError
from shared.models.domain import (
    Final,
    Game,
    GameStatus,
    InProgress,
    Postponed,
    Scheduled,
    TeamLine,
    utcnow,
)
from shared.models.enums import League, Sport, StatusKind
from shared.utils.logging import get_logger
from shared.utils.metrics import GAMES_SKIPPED

logger = get_logger(__name__)

POSTPONED_STATUS_NAMES = frozenset({
    "STATUS_POSTPONED",
    "STATUS_CANCELED",
    "STATUS_CANCELLED",
    "STATUS_SUSPENDED",
    "STATUS_FORFEIT",
    "STATUS_ABANDONED",
})
DELAYED_STATUS_NAMES = frozenset({"STATUS_DELAYED", "STATUS_RAIN_DELAY"})
PLAIN_FINAL_DETAILS = frozenset({"final", "ft", "full time", "full-time"})


@dataclass(frozen=True)
class AdapterResult:
    """Games an adapter produced plus the ones it had to drop."""
    games: list[Game]
    skipped: list[ParseError] = field(default_factory=list)


# ── Small parsing helpers ───────────────────────────────────────────────

def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def overtime_label(period: int, regulation: int) -> Optional[str]:
    """'OT', '2OT', ... for periods past regulation; None inside regulation."""
    if period <= regulation:
        return None
    extra = period - regulation
    return "OT" if extra == 1 else f"{extra}OT"


def safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        value = value.get("value", value.get("displayValue"))
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return None


def parse_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def text_of(mapping: dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    return value.strip() if isinstance(value, str) else ""


class LeagueAdapter(abc.ABC):
    """
    Base class for league adapters.

    Subclasses set ``sport`` and implement ``live_status``. ``parse`` never
    fails because of a single game: bad games are logged, counted and skipped.
    """

    sport: ClassVar[Sport]

    def __init__(self, league: League) -> None:
        if league.sport != self.sport:
            raise ValueError(f"{type(self).__name__} cannot handle {league.value}")
        self.league = league

    # ── Public API ──────────────────────────────────────────────────────

    def parse(self, raw: Any, fetched_at: datetime | None = None) -> AdapterResult:
        """
        Convert a raw scoreboard payload into canonical games.

        Raises:
            PayloadError: If the payload as a whole is not a scoreboard.
        """
        if not isinstance(raw, dict):
            raise PayloadError(f"{self.league.value}: scoreboard payload is not an object")
        events = raw.get("events")
        if not isinstance(events, list):
            raise PayloadError(f"{self.league.value}: scoreboard payload has no events list")

        fetched_at = fetched_at or utcnow()
        games: list[Game] = []
        skipped: list[ParseError] = []
        for event in events:
            try:
                games.append(self.parse_event(event, fetched_at))
            except ParseError as exc:
                skipped.append(exc)
                GAMES_SKIPPED.labels(league=self.league.value, field=exc.field).inc()
                logger.warning(
                    "game_skipped",
                    league=self.league.value,
                    game_id=exc.game_id,
                    field=exc.field,
                    reason=exc.reason,
                )
        return AdapterResult(games=games, skipped=skipped)

    def parse_event(self, event: Any, fetched_at: datetime) -> Game:
        """Build one Game or raise ParseError."""
        if not isinstance(event, dict):
            raise MissingField(None, "event")
        game_id = str(event.get("id") or "").strip()
        if not game_id:
            raise MissingField(None, "id")

        competitions = event.get("competitions")
        comp = competitions[0] if isinstance(competitions, list) and competitions else None
        if not isinstance(comp, dict):
            raise MissingField(game_id, "competitions")

        competitors = comp.get("competitors")
        if not isinstance(competitors, list):
            raise MissingField(game_id, "competitors")
        home_raw = self._side(competitors, "home")
        away_raw = self._side(competitors, "away")
        if home_raw is None:
            raise MissingField(game_id, "home")
        if away_raw is None:
            raise MissingField(game_id, "away")

        start_time = parse_time(event.get("date")) or parse_time(comp.get("date"))
        status = self._status(game_id, comp, event, start_time)
        needs_score = status.kind in (StatusKind.IN_PROGRESS, StatusKind.FINAL)

        try:
            return Game(
                id=game_id,
                league=self.league,
                home=self._team(game_id, home_raw, "home", needs_score),
                away=self._team(game_id, away_raw, "away", needs_score),
                status=status,
                start_time=start_time,
                broadcasts=self._broadcasts(comp),
                last_updated=fetched_at,
            )
        except ValidationError as exc:
            first = exc.errors()[0] if exc.errors() else {}
            raise ParseError(game_id, "game", str(first.get("msg", exc))) from exc

    # ── League-specific hook ────────────────────────────────────────────

    @abc.abstractmethod
    def live_status(
        self,
        game_id: str,
        status: dict[str, Any],
        status_type: dict[str, Any],
        competition: dict[str, Any],
    ) -> InProgress:
        """Describe an in-progress game for this sport."""
        ...

    # ── Shared extraction ───────────────────────────────────────────────

    @staticmethod
    def _side(competitors: list[Any], home_away: str) -> Optional[dict[str, Any]]:
        return next(
            (c for c in competitors if isinstance(c, dict) and c.get("homeAway") == home_away),
            None,
        )

    def _status(
        self,
        game_id: str,
        comp: dict[str, Any],
        event: dict[str, Any],
        start_time: Optional[datetime],
    ) -> GameStatus:
        status = comp.get("status") or event.get("status")
        status_type = status.get("type") if isinstance(status, dict) else None
        if not isinstance(status_type, dict):
            raise MissingField(game_id, "status")

        name = text_of(status_type, "name").upper()
        state = text_of(status_type, "state").lower()
        short_detail = text_of(status_type, "shortDetail") or text_of(status_type, "detail")

        if name in POSTPONED_STATUS_NAMES:
            return Postponed(detail=short_detail or None)
        if state == "pre":
            return Scheduled(start_time=start_time)
        if state == "in":
            if name in DELAYED_STATUS_NAMES:
                return InProgress(period_label=short_detail or "Delayed")
            return self.live_status(game_id, status, status_type, comp)
        if state == "post":
            if status_type.get("completed") is False:
                return Postponed(detail=short_detail or None)
            detail = short_detail if short_detail.lower() not in PLAIN_FINAL_DETAILS else ""
            return Final(detail=detail or None)
        raise MissingField(game_id, "status.type.state")

    @staticmethod
    def _team(
        game_id: str, raw: dict[str, Any], side: str, needs_score: bool
    ) -> TeamLine:
        team = raw.get("team")
        if not isinstance(team, dict):
            raise MissingField(game_id, f"{side}.team")
        name = text_of(team, "displayName") or text_of(team, "name")
        abbreviation = text_of(team, "abbreviation")
        if not name:
            raise MissingField(game_id, f"{side}.team.displayName")
        if not abbreviation:
            raise MissingField(game_id, f"{side}.team.abbreviation")

        score: Optional[int] = None
        if needs_score:
            score = safe_int(raw.get("score"))
            if score is None:
                raise MissingField(game_id, f"{side}.score")

        return TeamLine(
            name=name,
            abbreviation=abbreviation,
            short_name=text_of(team, "shortDisplayName") or None,
            record=LeagueAdapter._record(raw),
            score=score,
        )

    @staticmethod
    def _record(raw: dict[str, Any]) -> Optional[str]:
        """Overall record summary; None whenever it is missing or malformed."""
        records = raw.get("records")
        if not isinstance(records, list):
            return None
        entries = [r for r in records if isinstance(r, dict)]
        preferred = next(
            (r for r in entries if str(r.get("type", r.get("name", ""))).lower() in ("total", "overall")),
            entries[0] if entries else None,
        )
        if preferred is None:
            return None
        summary = preferred.get("summary")
        return summary.strip() if isinstance(summary, str) and summary.strip() else None

    @staticmethod
    def _broadcasts(comp: dict[str, Any]) -> tuple[str, ...]:
        names: list[str] = []
        broadcasts = comp.get("broadcasts")
        if not isinstance(broadcasts, list):
            return ()
        for broadcast in broadcasts:
            if not isinstance(broadcast, dict) or not isinstance(broadcast.get("names"), list):
                continue
            for name in broadcast["names"]:
                if isinstance(name, str) and name and name not in names:
                    names.append(name)
        return tuple(names)

    @staticmethod
    def period_of(status: dict[str, Any]) -> Optional[int]:
        period = safe_int(status.get("period"))
        return period if period and period > 0 else None

    @staticmethod
    def clock_of(status: dict[str, Any]) -> Optional[str]:
        clock = text_of(status, "displayClock")
        return clock or None
