"""Status strip renderer: a titled rule over a single line of text."""

from __future__ import annotations

from rich.console import Group
from rich.rule import Rule
from rich.text import Text

TITLE = "Status"


def render(line: str) -> Group:
    return Group(
        Rule(f"[bold]{TITLE}[/bold]", align="left", style="cyan"),
        Text(line, no_wrap=True, overflow="ellipsis"),
    )
