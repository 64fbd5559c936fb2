"""
scrbrd command-line entrypoint.

    scrbrd -l mlb -t guardians

Parses arguments, checks the terminal, wires transport, registry, store and
scheduler together, and runs the board until the user quits.
"""
from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Optional, Sequence

from rich.console import Console

from shared.config import Settings, get_settings
from shared.errors import TerminalUnavailable
from shared.models.enums import League
from shared.store import LiveStateStore
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server

from board.app import ScoreboardApp
from ingest.providers.espn import ESPNScoreboardClient
from ingest.registry import NormalizationRegistry
from scheduler.service import RefreshScheduler

logger = get_logger(__name__)

PROG = "scrbrd"


def _version() -> str:
    try:
        return version(PROG)
    except PackageNotFoundError:
        return "0.1.0"


def _league_arg(text: str) -> League:
    try:
        return League.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Live sports scoreboard in your terminal",
    )
    parser.add_argument(
        "--league",
        "-l",
        type=_league_arg,
        required=True,
        help="League to show: " + ", ".join(league.value for league in League),
    )
    parser.add_argument(
        "--team",
        "-t",
        help="Only show games whose team name or abbreviation contains this text",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def check_terminal(console: Console) -> None:
    """
    Raises:
        TerminalUnavailable: If stdout/stdin cannot host the live board.
    """
    if not console.is_terminal or not sys.stdin.isatty():
        raise TerminalUnavailable("scrbrd needs an interactive terminal (stdout is not a TTY)")
    if console.is_dumb_terminal:
        raise TerminalUnavailable("TERM=dumb cannot host the live board")


async def run_board(
    league: League,
    team: Optional[str],
    settings: Settings,
    console: Console,
) -> int:
    store = LiveStateStore(league, team)
    async with ESPNScoreboardClient(settings) as client:
        registry = NormalizationRegistry(client, settings=settings)
        scheduler = RefreshScheduler(registry, store, settings=settings)
        app = ScoreboardApp(store, scheduler, settings=settings, console=console)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, app.request_quit)
            except (ValueError, OSError, RuntimeError, NotImplementedError) as exc:
                logger.warning("signal_handler_unavailable", signal=sig, error=str(exc))

        return await app.run()


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging("board")
    start_metrics_server()

    console = Console()
    try:
        check_terminal(console)
    except TerminalUnavailable as exc:
        logger.error("terminal_unavailable", error=str(exc))
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1

    logger.info("board_starting", league=args.league.value, team=args.team)
    return asyncio.run(run_board(args.league, args.team, settings, console))


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
