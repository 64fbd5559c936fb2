"""
Baseball (MLB) adapter.

ESPN reports the half inning only as text ("Top 7th", "Bottom of the 3rd",
"Middle 5th", "End 8th"), so the label is recovered from the status detail
fields. The between-innings markers (Mid/End) are first-class: a game sitting
at "End 5th" must not be reported as the top or bottom of the inning.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from shared.errors import MissingField
from shared.models.domain import InProgress
from shared.models.enums import Sport

from ingest.adapters.base import LeagueAdapter, ordinal, safe_int, text_of

_HALF_RE = re.compile(
    r"\b(top|bot|bottom|mid|middle|end)\b\.?\s+(?:of\s+(?:the\s+)?)?(\d{1,2})(?:st|nd|rd|th)?\b",
    re.IGNORECASE,
)

_HALF_LABELS: dict[str, str] = {
    "top": "Top",
    "bot": "Bot",
    "bottom": "Bot",
    "mid": "Mid",
    "middle": "Mid",
    "end": "End",
}


def parse_half_inning(text: str) -> Optional[tuple[str, int]]:
    """Return (half, inning) from text like 'Bottom of the 10th'; None if absent."""
    m = _HALF_RE.search(text)
    if not m:
        return None
    return _HALF_LABELS[m.group(1).lower()], int(m.group(2))


def format_count(situation: Any) -> Optional[str]:
    """'2-1, 1 out' from an ESPN situation block; None when nothing usable."""
    if not isinstance(situation, dict):
        return None
    balls = safe_int(situation.get("balls"))
    strikes = safe_int(situation.get("strikes"))
    outs = safe_int(situation.get("outs"))
    parts: list[str] = []
    if balls is not None and strikes is not None:
        parts.append(f"{balls}-{strikes}")
    if outs is not None:
        parts.append(f"{outs} out" if outs == 1 else f"{outs} outs")
    return ", ".join(parts) or None


class BaseballAdapter(LeagueAdapter):
    sport = Sport.BASEBALL

    def live_status(
        self,
        game_id: str,
        status: dict[str, Any],
        status_type: dict[str, Any],
        competition: dict[str, Any],
    ) -> InProgress:
        for key in ("shortDetail", "detail", "description"):
            parsed = parse_half_inning(text_of(status_type, key))
            if parsed:
                half, inning = parsed
                break
        else:
            parsed = parse_half_inning(text_of(status, "displayClock"))
            if parsed:
                half, inning = parsed
            else:
                period = self.period_of(status)
                if period is None:
                    raise MissingField(game_id, "status.period")
                return InProgress(
                    period_label=ordinal(period),
                    clock_or_count=format_count(competition.get("situation")),
                )

        count = None
        if half in ("Top", "Bot"):
            count = format_count(competition.get("situation"))
        return InProgress(period_label=f"{half} {ordinal(inning)}", clock_or_count=count)
