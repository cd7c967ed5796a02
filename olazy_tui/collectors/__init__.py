"""Collector helpers and package exports."""

from __future__ import annotations

import os
import threading
import time

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_TIMEOUT_SECONDS = 5.0


class FetchError(Exception):
    """Base class for failures at the fetch boundary."""


class TransportError(FetchError):
    """Connection, DNS or timeout failure."""


class BackendError(FetchError):
    """Backend answered with a non-200 status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FetchError):
    """Backend body is not the expected JSON shape."""


class Deadline:
    """Cancellable wall-clock bound shared by the calls of one refresh.

    A deadline created with ``seconds <= 0`` never expires on its own but can
    still be cancelled.
    """

    def __init__(self, expires_at: float | None) -> None:
        self._expires_at = expires_at
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        if seconds <= 0:
            return cls(None)
        return cls(time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        if self.cancelled:
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())


def normalize_base_url(value: str | None) -> str:
    text = (value or "").strip()
    if not text:
        return DEFAULT_BASE_URL
    if "://" not in text:
        text = f"http://{text}"
    return text.rstrip("/")


def env_base_url() -> str:
    return normalize_base_url(os.environ.get("OLLAMA_HOST"))
