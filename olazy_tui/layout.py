"""Terminal layout: model panes side by side, status strip pinned to the bottom."""

from __future__ import annotations

from dataclasses import dataclass

STATUS_HEIGHT = 2
MIN_BODY_HEIGHT = 3


@dataclass(frozen=True)
class LayoutPlan:
    width: int
    height: int
    split_x: int
    body_height: int

    @property
    def status_height(self) -> int:
        return self.height - self.body_height

    @property
    def show_status(self) -> bool:
        return self.status_height > 0


def compute_layout(width: int, height: int) -> LayoutPlan:
    width = max(0, width)
    height = max(0, height)
    body_height = height - STATUS_HEIGHT
    if body_height < MIN_BODY_HEIGHT:
        body_height = height
    return LayoutPlan(width=width, height=height, split_x=width // 2, body_height=body_height)
