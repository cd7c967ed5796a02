"""Key bindings and non-blocking terminal key input."""

from __future__ import annotations

import os
import select
import sys
from typing import Callable

KEY_CTRL_C = "\x03"
KEY_CTRL_R = "\x12"

KEY_NAMES = {
    KEY_CTRL_C: "Ctrl+C",
    KEY_CTRL_R: "Ctrl+R",
}


class QuitRequested(Exception):
    """Raised by a key handler to end the event loop cleanly."""


class KeyBindings:
    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], None]] = {}

    def bind(self, key: str, handler: Callable[[], None]) -> None:
        if len(key) != 1:
            raise ValueError(f"key binding must be a single character: {key!r}")
        if key in self._handlers:
            raise ValueError(f"key already bound: {describe_key(key)}")
        self._handlers[key] = handler

    def keys(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, key: str) -> bool:
        handler = self._handlers.get(key)
        if handler is None:
            return False
        handler()
        return True


def describe_key(key: str) -> str:
    return KEY_NAMES.get(key, key)


class TerminalInput:
    """Puts stdin in non-canonical, no-echo mode for the lifetime of the context.

    Uses termios flags (ICANON/ECHO off, VMIN=0/VTIME=0) rather than raw mode
    so Rich Live's alternate screen keeps rendering correctly. Raises
    ``RuntimeError`` when stdin is not a terminal.
    """

    def __init__(self, stream=None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._fd: int | None = None
        self._old_settings = None

    def __enter__(self) -> "TerminalInput":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> None:
        try:
            import termios
        except ImportError as exc:
            raise RuntimeError("terminal input requires termios") from exc

        if not self._stream.isatty():
            raise RuntimeError("stdin is not a terminal")
        fd = self._stream.fileno()
        try:
            old_settings = termios.tcgetattr(fd)
            new = termios.tcgetattr(fd)
            new[3] &= ~(termios.ICANON | termios.ECHO)
            new[6][termios.VMIN] = 0
            new[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSADRAIN, new)
        except termios.error as exc:
            raise RuntimeError(f"cannot configure terminal: {exc}") from exc
        self._fd = fd
        self._old_settings = old_settings

    def close(self) -> None:
        if self._fd is None:
            return
        import termios

        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
        self._fd = None

    def poll_key(self, timeout: float = 0.0) -> str | None:
        """Single-char read, waiting at most ``timeout`` seconds."""
        if self._fd is None:
            return None
        r, _, _ = select.select([self._fd], [], [], timeout)
        if not r:
            return None
        try:
            data = os.read(self._fd, 1)
        except OSError:
            return None
        return data.decode("utf-8", errors="ignore") or None
