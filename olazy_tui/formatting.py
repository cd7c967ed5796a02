"""Shared text formatting helpers for human-facing panels."""

from __future__ import annotations

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024

NAME_COLUMN_WIDTH = 40


def format_size(n: int) -> str:
    if n >= GIB:
        return f"{n / GIB:.2f} GiB"
    if n >= MIB:
        return f"{n / MIB:.2f} MiB"
    if n >= KIB:
        return f"{n / KIB:.2f} KiB"
    if n > 0:
        return f"{n} B"
    return "-"


def model_line(name: str, size: int) -> str:
    if size <= 0:
        return name
    return f"{name:<{NAME_COLUMN_WIDTH}}  {format_size(size)}"
