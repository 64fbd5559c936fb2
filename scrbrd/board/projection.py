"""
Render projection for the scoreboard.

Pure functions from (Snapshot, ViewState) to display text. Nothing here
touches the terminal, the network or the clock: ``now`` and ``tz`` are
always passed in, so every function is testable on plain values.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional

from shared.models.domain import Final, Game, InProgress, Postponed, Scheduled, Snapshot, ViewState
from shared.models.enums import ErrorKind
from shared.store import clamp_offset

from ingest.normalization.normalizer import filter_by_team

REFRESH_INDICATOR = " ↻"
NO_GAMES_TEXT = "no games found"


class RowKind(str, Enum):
    LIVE = "live"
    UPCOMING = "upcoming"
    FINAL = "final"
    POSTPONED = "postponed"


@dataclass(frozen=True)
class DisplayRow:
    """One game as the board shows it."""
    game_id: str
    kind: RowKind
    matchup: str
    status: str
    records: Optional[str] = None
    broadcasts: Optional[str] = None


# ── Games ───────────────────────────────────────────────────────────────

def project(
    snapshot: Optional[Snapshot],
    view: ViewState,
    viewport_height: int,
    tz: Optional[tzinfo] = None,
) -> list[DisplayRow]:
    """
    Rows visible in the viewport for the given view.

    The team filter is applied again on this side so a filter edit narrows
    the board immediately, before the follow-up fetch lands.
    """
    if snapshot is None or snapshot.league != view.league:
        return []
    games = filter_by_team(snapshot.games, view.team_filter)
    offset = clamp_offset(view.scroll_offset, len(games), viewport_height)
    visible = games[offset:offset + max(0, viewport_height)]
    return [format_row(game, tz) for game in visible]


def format_row(game: Game, tz: Optional[tzinfo] = None) -> DisplayRow:
    return DisplayRow(
        game_id=game.id,
        kind=row_kind(game),
        matchup=matchup_text(game),
        status=status_text(game, tz),
        records=records_text(game),
        broadcasts=", ".join(game.broadcasts) or None,
    )


def row_kind(game: Game) -> RowKind:
    status = game.status
    if isinstance(status, InProgress):
        return RowKind.LIVE
    if isinstance(status, Final):
        return RowKind.FINAL
    if isinstance(status, Postponed):
        return RowKind.POSTPONED
    return RowKind.UPCOMING


def matchup_text(game: Game) -> str:
    """``"CLE 3 - 2 DET"`` once scores exist, ``"CLE @ DET"`` before."""
    away, home = game.away, game.home
    if away.score is None or home.score is None:
        return f"{away.abbreviation} @ {home.abbreviation}"
    return f"{away.abbreviation} {away.score} - {home.score} {home.abbreviation}"


def status_text(game: Game, tz: Optional[tzinfo] = None) -> str:
    status = game.status
    if isinstance(status, InProgress):
        label = status.period_label
        if status.clock_or_count:
            label = f"{label} {status.clock_or_count}"
        return f"live - {label}"
    if isinstance(status, Final):
        return final_text(status.detail)
    if isinstance(status, Postponed):
        detail = (status.detail or "").strip()
        if not detail or detail.lower() in ("postponed", "ppd"):
            return "postponed"
        return detail.lower()
    if isinstance(status, Scheduled):
        start = status.start_time or game.start_time
        return clock_time(start, tz) if start else "scheduled"
    return ""


def final_text(detail: Optional[str]) -> str:
    """``"final"``, or ``"final (OT)"`` for details like ``"Final/OT"``."""
    if not detail:
        return "final"
    extra = detail.strip()
    if extra.lower().startswith("final"):
        extra = extra[len("final"):].strip(" /-")
    return f"final ({extra})" if extra else "final"


def records_text(game: Game) -> Optional[str]:
    away, home = game.away.record, game.home.record
    if not away and not home:
        return None
    return f"({away or ''}) vs ({home or ''})"


def clock_time(at: datetime, tz: Optional[tzinfo] = None) -> str:
    """12-hour local time without a leading zero, e.g. ``"7:05 PM"``."""
    return at.astimezone(tz).strftime("%I:%M %p").lstrip("0")


# ── Chrome ──────────────────────────────────────────────────────────────

def header_text(view: ViewState) -> str:
    """``"MLB - GUARDIANS ↻"`` with a team filter, ``"mlb scrbrd"`` without."""
    if view.team_filter:
        title = f"{view.league.value.upper()} - {view.team_filter.upper()}"
    else:
        title = f"{view.league.value.lower()} scrbrd"
    return title + (REFRESH_INDICATOR if view.refreshing else "")


def board_title(view: ViewState, game_count: int, viewport_height: int) -> str:
    """Panel title; shows the window position once the list overflows."""
    if game_count <= viewport_height or viewport_height <= 0:
        return " games "
    offset = clamp_offset(view.scroll_offset, game_count, viewport_height)
    last = min(game_count, offset + viewport_height)
    return f" games ({offset + 1}-{last}/{game_count}) "


def placeholder_text(snapshot: Optional[Snapshot], view: ViewState) -> Optional[str]:
    """Body text when there are no rows to draw, or None when there are."""
    if snapshot is None or snapshot.league != view.league:
        if view.last_error == ErrorKind.NO_SUCH_TEAM:
            return NO_GAMES_TEXT
        if view.last_error is not None:
            return f"error: {view.error_message}"
        return "loading..."
    if not filter_by_team(snapshot.games, view.team_filter):
        return NO_GAMES_TEXT
    return None


def error_text(view: ViewState, tz: Optional[tzinfo] = None) -> Optional[str]:
    if view.last_error is None:
        return None
    if view.last_error == ErrorKind.NO_SUCH_TEAM:
        return view.error_message or f"no results for filter '{view.team_filter}'"
    if view.last_refresh_at is not None:
        return f"stale since {view.last_refresh_at.astimezone(tz).strftime('%H:%M:%S')}"
    return f"refresh failed: {view.error_message}"


def key_help(view: ViewState, game_count: int, viewport_height: Optional[int] = None) -> str:
    keys = ["q - quit", "r - refresh"]
    if viewport_height is None or game_count > viewport_height:
        keys.append("↑/↓ - scroll")
    keys.append("←/→ - league")
    if view.team_filter:
        keys.append("c - clear team")
    return " | ".join(keys)


def countdown_text(view: ViewState, now: datetime) -> str:
    if view.refreshing:
        return "next: ..."
    if view.next_refresh_at is None:
        return "next: --"
    remaining = max(0, int((view.next_refresh_at - now).total_seconds()))
    return f"next: {remaining}s"


def status_line(
    view: ViewState,
    game_count: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
    viewport_height: Optional[int] = None,
) -> str:
    """Footer: error indicator (if any), key help and the refresh countdown."""
    parts = []
    error = error_text(view, tz)
    if error:
        parts.append(error)
    parts.append(key_help(view, game_count, viewport_height))
    parts.append(countdown_text(view, now))
    return " | ".join(parts)
