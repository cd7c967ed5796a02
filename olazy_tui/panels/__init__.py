"""Panel rendering helpers."""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

STATUS_BORDER = {
    "ok": "cyan",
    "error": "red",
}


def border_for(status: str) -> str:
    return STATUS_BORDER.get(status, "cyan")


def panel_from_lines(title: str, status: str, lines: list[str]) -> Panel:
    text = Text("\n".join(lines), no_wrap=True, overflow="ellipsis")
    return Panel(text, title=f"[bold]{title}[/bold]", title_align="left", border_style=border_for(status))
