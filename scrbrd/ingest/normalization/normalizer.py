"""
Normalization layer for the ingest path.
Pure functions applied to adapter output before a Snapshot is built:
deduplication by provider id, team filtering and board ordering.
"""
from __future__ import annotations

from typing import Iterable, Optional

from shared.models.domain import Game


def dedupe_games(games: Iterable[Game]) -> list[Game]:
    """
    Collapse entries sharing an id, keeping the most complete one.

    Completeness counts populated score and record fields. On a tie the
    first occurrence wins, and the survivor keeps the first occurrence's slot.
    """
    best: dict[str, Game] = {}
    for game in games:
        current = best.get(game.id)
        if current is None or game.completeness > current.completeness:
            best[game.id] = game
    return list(best.values())


def filter_by_team(games: Iterable[Game], team: Optional[str]) -> list[Game]:
    """Games where either side matches ``team`` (case-insensitive substring)."""
    if not team or not team.strip():
        return list(games)
    return [g for g in games if g.involves(team)]


def sort_games(games: Iterable[Game]) -> list[Game]:
    """Stable board order: in-progress, scheduled, final, postponed; then start time; then id."""
    return sorted(games, key=lambda g: g.sort_key)
