"""Tests for argument parsing and startup failure handling."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from shared.errors import TerminalUnavailable
from shared.models.enums import League
from board import service
from board.service import build_parser, check_terminal, main


def test_league_and_team_arguments() -> None:
    args = build_parser().parse_args(["-l", "mlb", "-t", "guardians"])
    assert args.league == League.MLB
    assert args.team == "guardians"


@pytest.mark.parametrize("code,league", [("epl", League.PREM), ("Premier", League.PREM), ("NHL", League.NHL)])
def test_league_aliases_and_case(code: str, league: League) -> None:
    assert build_parser().parse_args(["--league", code]).league == league


def test_invalid_league_exits_with_usage_error(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["-l", "xfl"])
    assert exc_info.value.code == 2
    assert "unknown league 'xfl'" in capsys.readouterr().err


def test_missing_league_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_version_flag(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("scrbrd ")


def test_invalid_league_fails_before_terminal_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    check = MagicMock()
    monkeypatch.setattr(service, "check_terminal", check)
    with pytest.raises(SystemExit):
        main(["-l", "cricket"])
    check.assert_not_called()


def test_check_terminal_rejects_non_tty() -> None:
    console = MagicMock(is_terminal=False, is_dumb_terminal=False)
    with pytest.raises(TerminalUnavailable):
        check_terminal(console)


def test_main_returns_one_without_a_terminal(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture,
) -> None:
    monkeypatch.setattr(service, "setup_logging", MagicMock())
    monkeypatch.setattr(service, "start_metrics_server", MagicMock())

    def no_terminal(console) -> None:
        raise TerminalUnavailable("stdout is not a TTY")

    monkeypatch.setattr(service, "check_terminal", no_terminal)
    run_board = MagicMock()
    monkeypatch.setattr(service, "run_board", run_board)

    assert main(["-l", "nba"]) == 1
    assert "stdout is not a TTY" in capsys.readouterr().err
    run_board.assert_not_called()
