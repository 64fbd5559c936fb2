"""Rich renderables for the scoreboard screen."""
from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from rich import box
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.store import StoreView

from board.projection import (
    DisplayRow,
    RowKind,
    board_title,
    header_text,
    placeholder_text,
    project,
    status_line,
)

# Rows per game: matchup, status, records/broadcasts, spacer
LINES_PER_GAME = 4
# Header and footer panels, each one line plus borders
CHROME_LINES = 6

ROW_STYLES: dict[RowKind, str] = {
    RowKind.LIVE: "bold red",
    RowKind.FINAL: "green",
    RowKind.UPCOMING: "white",
    RowKind.POSTPONED: "dim",
}


def viewport_games(terminal_height: int) -> int:
    """How many games fit between header and footer."""
    body = terminal_height - CHROME_LINES - 2
    return max(1, body // LINES_PER_GAME)


def game_block(row: DisplayRow) -> RenderableType:
    style = ROW_STYLES[row.kind]
    lines = [
        Text(row.matchup, style="bold"),
        Text(row.status, style=style),
    ]
    extra = "   ".join(part for part in (row.records, row.broadcasts) if part)
    lines.append(Text(extra, style="grey62"))
    table = Table.grid(expand=True)
    table.add_column(justify="center")
    for line in lines:
        table.add_row(line)
    table.add_row("")
    return table


def build_screen(
    store_view: StoreView,
    terminal_height: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Layout:
    snapshot, view = store_view
    height = viewport_games(terminal_height)
    rows = project(snapshot, view, height, tz=tz)
    game_count = _visible_count(store_view)

    header = Panel(
        Text(header_text(view), justify="center"),
        box=box.ROUNDED,
        style="bold yellow",
    )

    if rows:
        body_content: RenderableType = Group(*(game_block(row) for row in rows))
    else:
        message = placeholder_text(snapshot, view) or ""
        style = "red" if message.startswith("error") else "grey62"
        body_content = Text(message, style=style, justify="center")
    body = Panel(
        body_content,
        title=board_title(view, game_count, height),
        box=box.ROUNDED,
    )

    footer_style = "yellow" if view.last_error else "grey62"
    footer = Panel(
        Text(status_line(view, game_count, now, tz=tz, viewport_height=height), justify="center"),
        box=box.ROUNDED,
        style=footer_style,
    )

    layout = Layout()
    layout.split_column(
        Layout(header, name="header", size=3),
        Layout(body, name="body"),
        Layout(footer, name="footer", size=3),
    )
    return layout


def _visible_count(store_view: StoreView) -> int:
    snapshot, view = store_view
    if snapshot is None or snapshot.league != view.league:
        return 0
    if not view.team_filter:
        return len(snapshot.games)
    return sum(1 for g in snapshot.games if g.involves(view.team_filter))
