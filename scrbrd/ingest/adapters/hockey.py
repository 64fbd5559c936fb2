"""Ice hockey (NHL) adapter: three periods, overtime(s), shootout."""
from __future__ import annotations

from typing import Any

from shared.errors import MissingField
from shared.models.domain import InProgress
from shared.models.enums import Sport

from ingest.adapters.base import LeagueAdapter, ordinal, overtime_label, text_of

REGULATION_PERIODS = 3


def period_label(period: int) -> str:
    return overtime_label(period, REGULATION_PERIODS) or f"{ordinal(period)} Period"


class HockeyAdapter(LeagueAdapter):
    sport = Sport.HOCKEY

    def live_status(
        self,
        game_id: str,
        status: dict[str, Any],
        status_type: dict[str, Any],
        competition: dict[str, Any],
    ) -> InProgress:
        detail = " ".join(
            text_of(status_type, key) for key in ("shortDetail", "detail")
        ).lower()
        if "shootout" in detail or text_of(status_type, "name").upper() == "STATUS_SHOOTOUT":
            return InProgress(period_label="SO")

        period = self.period_of(status)
        if period is None:
            raise MissingField(game_id, "status.period")
        if text_of(status_type, "name").upper() == "STATUS_END_PERIOD":
            short = overtime_label(period, REGULATION_PERIODS) or ordinal(period)
            return InProgress(period_label=f"End {short}")
        return InProgress(period_label=period_label(period), clock_or_count=self.clock_of(status))
