"""American football (NFL) adapter: quarters, overtime, down-and-distance when ESPN sends it."""
from __future__ import annotations

from typing import Any, Optional

from shared.errors import MissingField
from shared.models.domain import InProgress
from shared.models.enums import Sport

from ingest.adapters.base import LeagueAdapter, overtime_label, text_of

REGULATION_QUARTERS = 4


def quarter_label(period: int) -> str:
    return overtime_label(period, REGULATION_QUARTERS) or f"Q{period}"


def down_distance(situation: Any) -> Optional[str]:
    if not isinstance(situation, dict):
        return None
    text = text_of(situation, "shortDownDistanceText")
    return text or None


class FootballAdapter(LeagueAdapter):
    sport = Sport.FOOTBALL

    def live_status(
        self,
        game_id: str,
        status: dict[str, Any],
        status_type: dict[str, Any],
        competition: dict[str, Any],
    ) -> InProgress:
        name = text_of(status_type, "name").upper()
        if name == "STATUS_HALFTIME":
            return InProgress(period_label="Halftime")

        period = self.period_of(status)
        if period is None:
            raise MissingField(game_id, "status.period")
        if name == "STATUS_END_PERIOD":
            return InProgress(period_label=f"End {quarter_label(period)}")

        clock = self.clock_of(status)
        situation = down_distance(competition.get("situation"))
        if clock and situation:
            clock = f"{clock} {situation}"
        return InProgress(period_label=quarter_label(period), clock_or_count=clock or situation)
