"""Domain enumerations for scrbrd."""
from __future__ import annotations

from enum import Enum


class Sport(str, Enum):
    BASEBALL = "baseball"
    BASKETBALL = "basketball"
    FOOTBALL = "football"
    HOCKEY = "hockey"
    SOCCER = "soccer"


class League(str, Enum):
    MLB = "mlb"
    NBA = "nba"
    WNBA = "wnba"
    NFL = "nfl"
    NHL = "nhl"
    MLS = "mls"
    NWSL = "nwsl"
    PREM = "prem"

    @property
    def sport(self) -> Sport:
        return _LEAGUE_SPORT[self]

    @property
    def espn_path(self) -> str:
        return _LEAGUE_ESPN_PATHS[self]

    @property
    def display_name(self) -> str:
        return _LEAGUE_DISPLAY[self]

    @classmethod
    def parse(cls, text: str) -> "League":
        """
        Resolve a user-supplied league code.

        Raises:
            ValueError: If the code is not a known league or alias.
        """
        key = text.strip().lower()
        key = LEAGUE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = "|".join(league.value for league in cls)
            raise ValueError(f"unknown league '{text}' (choose {choices})") from None


LEAGUE_ALIASES: dict[str, str] = {
    "premier": "prem",
    "epl": "prem",
    "premier-league": "prem",
}

_LEAGUE_SPORT: dict[League, Sport] = {
    League.MLB: Sport.BASEBALL,
    League.NBA: Sport.BASKETBALL,
    League.WNBA: Sport.BASKETBALL,
    League.NFL: Sport.FOOTBALL,
    League.NHL: Sport.HOCKEY,
    League.MLS: Sport.SOCCER,
    League.NWSL: Sport.SOCCER,
    League.PREM: Sport.SOCCER,
}

_LEAGUE_ESPN_PATHS: dict[League, str] = {
    League.MLB: "baseball/mlb",
    League.NBA: "basketball/nba",
    League.WNBA: "basketball/wnba",
    League.NFL: "football/nfl",
    League.NHL: "hockey/nhl",
    League.MLS: "soccer/usa.1",
    League.NWSL: "soccer/usa.nwsl",
    League.PREM: "soccer/eng.1",
}

_LEAGUE_DISPLAY: dict[League, str] = {
    League.MLB: "MLB",
    League.NBA: "NBA",
    League.WNBA: "WNBA",
    League.NFL: "NFL",
    League.NHL: "NHL",
    League.MLS: "MLS",
    League.NWSL: "NWSL",
    League.PREM: "Premier League",
}


class StatusKind(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"
    POSTPONED = "postponed"

    @property
    def sort_priority(self) -> int:
        """Board order: live games first, then upcoming, then finished."""
        return _STATUS_PRIORITY[self]


_STATUS_PRIORITY: dict[StatusKind, int] = {
    StatusKind.IN_PROGRESS: 0,
    StatusKind.SCHEDULED: 1,
    StatusKind.FINAL: 2,
    StatusKind.POSTPONED: 3,
}


class ErrorKind(str, Enum):
    """Per-refresh failure categories surfaced on the status line."""
    TRANSPORT = "transport"
    PARSE = "parse"
    NO_SUCH_TEAM = "no_such_team"


class SchedulerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    BACKOFF = "backoff"
