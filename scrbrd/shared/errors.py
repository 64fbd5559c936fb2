"""
Error taxonomy for scrbrd.

ParseError: one game could not be built; the adapter skips it.
RefreshError: one refresh cycle failed; the last good snapshot stays on screen.
Startup errors: fatal, raised before the board is drawn.
"""
from __future__ import annotations

from typing import Optional

from shared.models.enums import ErrorKind


class ParseError(Exception):
    """A single game in a provider payload could not be normalized."""

    def __init__(self, game_id: Optional[str], field: str, reason: str) -> None:
        self.game_id = game_id
        self.field = field
        self.reason = reason
        super().__init__(f"game={game_id or '?'} field={field}: {reason}")


class MissingField(ParseError):
    """An essential field (teams, status, live score) is absent or unusable."""

    def __init__(self, game_id: Optional[str], field: str) -> None:
        super().__init__(game_id, field, "missing or malformed")


class RefreshError(Exception):
    """Base class for recoverable failures of one refresh cycle."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TransportError(RefreshError):
    """Network failure, HTTP error status or timeout."""

    kind = ErrorKind.TRANSPORT


class PayloadError(RefreshError):
    """The provider response violates the scoreboard schema as a whole."""

    kind = ErrorKind.PARSE


class NoSuchTeam(RefreshError):
    """The team filter matched none of the league's games."""

    kind = ErrorKind.NO_SUCH_TEAM

    def __init__(self, team: str) -> None:
        self.team = team
        super().__init__(f"no results for filter '{team}'")


class TerminalUnavailable(Exception):
    """The terminal cannot host the live board (not a TTY, too small, ...)."""
