"""Settings resolution from command-line flags and environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass

from olazy_tui.collectors import DEFAULT_TIMEOUT_SECONDS, env_base_url, normalize_base_url

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    base_url: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_file: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL


def parse_timeout(value: str | float | None) -> float:
    if value is None or value == "":
        return DEFAULT_TIMEOUT_SECONDS
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid timeout: {value!r}") from exc
    if not math.isfinite(seconds):
        raise ValueError(f"invalid timeout: {value!r}")
    return seconds


def parse_log_level(value: str | None) -> str:
    level = (value or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"unknown log level: {value}")
    return level


def resolve_settings(
    host: str | None = None,
    timeout: str | float | None = None,
    log_file: str | None = None,
    log_level: str | None = None,
) -> Settings:
    """Flags win over environment variables, which win over defaults."""
    base_url = normalize_base_url(host) if host else env_base_url()
    if timeout is None:
        timeout = os.environ.get("OLAZY_TUI_TIMEOUT")
    return Settings(
        base_url=base_url,
        timeout=parse_timeout(timeout),
        log_file=log_file or os.environ.get("OLAZY_TUI_LOG_FILE") or None,
        log_level=parse_log_level(log_level or os.environ.get("OLAZY_TUI_LOG_LEVEL")),
    )
