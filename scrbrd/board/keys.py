"""
Keyboard input for the scoreboard.

A daemon thread puts the terminal in cbreak mode, reads stdin with
``select`` and hands decoded keys to the asyncio loop. Decoding is a pure
function so escape-sequence handling can be tested without a terminal.
"""
from __future__ import annotations

import asyncio
import os
import select
import sys
import threading
from enum import Enum
from typing import Optional

try:
    import termios
    import tty
except ImportError:  # Windows
    termios = None
    tty = None

from shared.utils.logging import get_logger

logger = get_logger(__name__)


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    REFRESH = "refresh"
    QUIT = "quit"
    CLEAR_TEAM = "clear_team"


_ESCAPES: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
}

_CHARS: dict[str, Key] = {
    "k": Key.UP,
    "j": Key.DOWN,
    "h": Key.LEFT,
    "l": Key.RIGHT,
    "r": Key.REFRESH,
    "q": Key.QUIT,
    "c": Key.CLEAR_TEAM,
    "\x03": Key.QUIT,  # ctrl-c in cbreak mode
}


def decode_keys(buffer: str) -> tuple[list[Key], str]:
    """
    Decode as many keys as possible from ``buffer``.

    Returns:
        (keys, rest) where ``rest`` is an incomplete escape sequence to be
        prefixed to the next read. Unknown input is dropped.
    """
    keys: list[Key] = []
    i = 0
    while i < len(buffer):
        ch = buffer[i]
        if ch == "\x1b":
            seq = buffer[i:i + 3]
            if len(seq) < 3 and seq in ("\x1b", "\x1b[", "\x1bO"):
                return keys, buffer[i:]
            key = _ESCAPES.get(seq)
            if key is not None:
                keys.append(key)
                i += 3
            else:
                i += 1
            continue
        key = _CHARS.get(ch.lower())
        if key is not None:
            keys.append(key)
        i += 1
    return keys, ""


class TerminalKeyListener:
    """Reads keys on a daemon thread and feeds them to an asyncio.Queue."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: "asyncio.Queue[Key]") -> None:
        self._loop = loop
        self._queue = queue
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @staticmethod
    def available() -> bool:
        return termios is not None and tty is not None and sys.stdin.isatty()

    def start(self) -> bool:
        """Start listening. Returns False when stdin is not a terminal."""
        if not self.available():
            logger.warning("key_listener_unavailable")
            return False
        fd = sys.stdin.fileno()
        old = termios.tcgetattr(fd)
        tty.setcbreak(fd)

        def run() -> None:
            pending = ""
            try:
                while not self._stop.is_set():
                    r, _, _ = select.select([fd], [], [], 0.1)
                    if not r:
                        if pending:
                            # a lone ESC with nothing following
                            pending = ""
                        continue
                    data = os.read(fd, 32).decode("utf-8", errors="ignore")
                    keys, pending = decode_keys(pending + data)
                    for key in keys:
                        self._loop.call_soon_threadsafe(self._queue.put_nowait, key)
            except (OSError, RuntimeError) as exc:
                # RuntimeError: the loop closed under us during shutdown
                logger.debug("key_listener_stopped", error=str(exc))
            finally:
                termios.tcsetattr(fd, termios.TCSADRAIN, old)

        self._thread = threading.Thread(target=run, name="scrbrd-keys", daemon=True)
        self._thread.start()
        return True

    def stop(self, timeout: float = 0.5) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
