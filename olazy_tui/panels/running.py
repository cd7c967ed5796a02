"""Running models panel renderer."""

from __future__ import annotations

from rich.panel import Panel

from olazy_tui.panels import panel_from_lines

TITLE = "Running (ollama ps)"


def render(lines: list[str], status: str = "ok") -> Panel:
    return panel_from_lines(TITLE, status, lines)
