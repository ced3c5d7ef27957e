"""Keyboard input for the interactive session.

Keys are plain strings: printable characters stand for themselves and
special keys use the names in :class:`Key`. Because ``Key`` is a string
enum, ``key == Key.ENTER`` and ``key == "q"`` both work on the same value.
"""

import os
import select
import sys
import termios
import tty
from enum import Enum
from types import TracebackType
from typing import TextIO


class Key(str, Enum):
    """Named special keys."""

    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    ESCAPE = "escape"
    SPACE = "space"
    CTRL_C = "ctrl+c"


# Escape sequences emitted by common terminals for the arrow keys
_SEQUENCES: dict[str, str] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
}

_SINGLE: dict[str, str] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    " ": Key.SPACE,
    "\x03": Key.CTRL_C,
}


def parse_keys(data: str) -> list[str]:
    """Split raw terminal input into keys.

    Unknown escape sequences (e.g. left/right arrows, function keys) are
    dropped. A lone ESC byte is the Escape key.

    Args:
        data: Characters read from the terminal in one go.

    Returns:
        Keys in the order they were typed.
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        char = data[i]
        if char == "\x1b":
            sequence = data[i : i + 3]
            if sequence in _SEQUENCES:
                keys.append(_SEQUENCES[sequence])
                i += 3
                continue
            if len(sequence) > 1 and sequence[1] in "[O":
                # Skip an unsupported CSI/SS3 sequence up to its final byte
                j = i + 2
                while j < len(data) and not ("@" <= data[j] <= "~"):
                    j += 1
                i = j + 1
                continue
            keys.append(Key.ESCAPE)
            i += 1
            continue
        if char in _SINGLE:
            keys.append(_SINGLE[char])
        elif char.isprintable():
            keys.append(char)
        i += 1
    return keys


class KeyReader:
    """Non-blocking key reader for a POSIX terminal.

    Puts the terminal in cbreak mode for the lifetime of the context so
    keys arrive without Enter; Ctrl+C still raises KeyboardInterrupt.

    Args:
        stream: Terminal input stream. Defaults to sys.stdin.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin
        self._fd = self._stream.fileno()
        self._saved: list | None = None  # type: ignore[type-arg]

    def __enter__(self) -> "KeyReader":
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def read(self, timeout: float) -> list[str]:
        """Wait up to ``timeout`` seconds and return the keys typed meanwhile."""
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return []
        data = os.read(self._fd, 1024)
        return parse_keys(data.decode(errors="ignore"))
