"""
Pydantic v2 domain models for scrbrd.
These are the canonical, league-agnostic representations every adapter produces.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.models.enums import ErrorKind, League, StatusKind


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ── Teams ───────────────────────────────────────────────────────────────
class TeamLine(DomainModel):
    """One side of a matchup as of a snapshot."""
    name: str
    abbreviation: str
    short_name: Optional[str] = None
    record: Optional[str] = None
    score: Optional[int] = None

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on name, short name or abbreviation."""
        needle = needle.strip().lower()
        if not needle:
            return False
        candidates = (self.name, self.short_name or "", self.abbreviation)
        return any(needle in c.lower() for c in candidates if c)


# ── Status ──────────────────────────────────────────────────────────────
class Scheduled(DomainModel):
    kind: Literal[StatusKind.SCHEDULED] = StatusKind.SCHEDULED
    start_time: Optional[datetime] = None


class InProgress(DomainModel):
    kind: Literal[StatusKind.IN_PROGRESS] = StatusKind.IN_PROGRESS
    period_label: str
    clock_or_count: Optional[str] = None


class Final(DomainModel):
    kind: Literal[StatusKind.FINAL] = StatusKind.FINAL
    detail: Optional[str] = None


class Postponed(DomainModel):
    kind: Literal[StatusKind.POSTPONED] = StatusKind.POSTPONED
    detail: Optional[str] = None


GameStatus = Annotated[
    Union[Scheduled, InProgress, Final, Postponed],
    Field(discriminator="kind"),
]


# ── Game ────────────────────────────────────────────────────────────────
class Game(DomainModel):
    """Canonical game state, immutable for the snapshot that produced it."""
    id: str
    league: League
    home: TeamLine
    away: TeamLine
    status: GameStatus
    start_time: Optional[datetime] = None
    broadcasts: tuple[str, ...] = ()
    last_updated: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_invariants(self) -> "Game":
        if (
            self.home.abbreviation.lower() == self.away.abbreviation.lower()
            or self.home.name.strip().lower() == self.away.name.strip().lower()
        ):
            raise ValueError("home and away must be different teams")
        if self.status.kind in (StatusKind.IN_PROGRESS, StatusKind.FINAL):
            if self.home.score is None or self.away.score is None:
                raise ValueError(f"score required when status is {self.status.kind.value}")
        return self

    @property
    def sort_key(self) -> tuple[int, int, float, str]:
        """in-progress > scheduled > final > postponed, then start time, then id."""
        if self.start_time is None:
            return (self.status.kind.sort_priority, 1, 0.0, self.id)
        return (self.status.kind.sort_priority, 0, self.start_time.timestamp(), self.id)

    @property
    def completeness(self) -> int:
        """How many optional score/record fields are populated (dedupe preference)."""
        fields = (self.home.score, self.away.score, self.home.record, self.away.record)
        return sum(1 for f in fields if f is not None)

    def involves(self, team: str) -> bool:
        return self.home.matches(team) or self.away.matches(team)


# ── Snapshot ────────────────────────────────────────────────────────────
class Snapshot(DomainModel):
    """One complete, internally consistent set of games as of one fetch."""
    league: League
    team_filter: Optional[str] = None
    games: tuple[Game, ...] = ()
    fetched_at: datetime = Field(default_factory=utcnow)
    skipped: int = 0


# ── View state ──────────────────────────────────────────────────────────
class ViewState(DomainModel):
    """What the user is looking at. Owned by the LiveStateStore."""
    league: League
    team_filter: Optional[str] = None
    scroll_offset: int = Field(default=0, ge=0)
    last_error: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    last_refresh_at: Optional[datetime] = None
    refreshing: bool = False
    next_refresh_at: Optional[datetime] = None
