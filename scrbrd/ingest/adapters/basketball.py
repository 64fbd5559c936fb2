"""Basketball (NBA, WNBA) adapter: four quarters, numbered overtimes."""
from __future__ import annotations

from typing import Any

from shared.errors import MissingField
from shared.models.domain import InProgress
from shared.models.enums import Sport

from ingest.adapters.base import LeagueAdapter, overtime_label, text_of

REGULATION_QUARTERS = 4


def quarter_label(period: int) -> str:
    return overtime_label(period, REGULATION_QUARTERS) or f"Q{period}"


class BasketballAdapter(LeagueAdapter):
    sport = Sport.BASKETBALL

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
        return InProgress(period_label=quarter_label(period), clock_or_count=self.clock_of(status))
