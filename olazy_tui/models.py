"""Shared model contracts for dashboard state and fetch results."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any

STATUS_CAPACITY = 5
STATUS_SEPARATOR = " | "


@dataclass(frozen=True)
class Model:
    name: str
    digest: str = ""
    size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "digest": self.digest,
            "size": self.size,
        }


class StatusLog:
    """Rolling history of the most recent status messages."""

    def __init__(self, capacity: int = STATUS_CAPACITY) -> None:
        self._lines: deque[str] = deque(maxlen=capacity)

    def append(self, message: str) -> None:
        self._lines.append(message)

    def lines(self) -> list[str]:
        return list(self._lines)

    def joined(self) -> str:
        return STATUS_SEPARATOR.join(self._lines)


@dataclass
class DashboardState:
    installed: tuple[Model, ...] = ()
    running: tuple[Model, ...] = ()
    status: StatusLog = field(default_factory=StatusLog)
    installed_failed: bool = False
    running_failed: bool = False


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one refresh: each list is set only when its fetch succeeded."""

    installed: tuple[Model, ...] | None = None
    installed_error: Exception | None = None
    running: tuple[Model, ...] | None = None
    running_error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.installed_error is None and self.running_error is None
