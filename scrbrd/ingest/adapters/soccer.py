"""
Soccer (MLS, NWSL, Premier League) adapter.

The live label is the match minute with stoppage time ("45'+2", "67'");
the half goes in clock_or_count.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from shared.errors import MissingField
from shared.models.domain import InProgress
from shared.models.enums import Sport

from ingest.adapters.base import LeagueAdapter, text_of

_MINUTE_RE = re.compile(r"^\s*(\d{1,3})\s*'?\s*(?:\+\s*(\d{1,2})\s*'?)?")

_HALF_BY_PERIOD: dict[int, str] = {1: "1H", 2: "2H", 3: "ET", 4: "ET", 5: "PK"}


def parse_minute(clock: str) -> Optional[tuple[int, Optional[int]]]:
    """Parse a soccer clock such as "45'+2'" into (45, 2). None if unparseable."""
    if not clock:
        return None
    m = _MINUTE_RE.match(clock)
    if not m:
        return None
    stoppage = int(m.group(2)) if m.group(2) else None
    return int(m.group(1)), stoppage


def minute_label(minute: int, stoppage: Optional[int]) -> str:
    return f"{minute}'+{stoppage}" if stoppage else f"{minute}'"


def half_for(period: Optional[int], minute: Optional[int]) -> Optional[str]:
    if period is not None:
        return _HALF_BY_PERIOD.get(period, "ET")
    # Infer from the clock only when the period is missing
    if minute is None:
        return None
    if minute > 90:
        return "ET"
    if minute > 45:
        return "2H"
    return "1H"


class SoccerAdapter(LeagueAdapter):
    sport = Sport.SOCCER

    def live_status(
        self,
        game_id: str,
        status: dict[str, Any],
        status_type: dict[str, Any],
        competition: dict[str, Any],
    ) -> InProgress:
        name = text_of(status_type, "name").upper()
        detail = text_of(status_type, "detail").lower()
        if name == "STATUS_HALFTIME":
            return InProgress(period_label="HT")
        if name == "STATUS_SHOOTOUT" or "penalt" in detail or "shootout" in detail:
            return InProgress(period_label="Penalties", clock_or_count="PK")

        period = self.period_of(status)
        parsed = parse_minute(self.clock_of(status) or "")
        if parsed is None:
            parsed = parse_minute(text_of(status_type, "shortDetail"))
        if parsed is None:
            if period is None:
                raise MissingField(game_id, "status.displayClock")
            return InProgress(period_label=_HALF_BY_PERIOD.get(period, "ET"))

        minute, stoppage = parsed
        return InProgress(
            period_label=minute_label(minute, stoppage),
            clock_or_count=half_for(period, minute),
        )
