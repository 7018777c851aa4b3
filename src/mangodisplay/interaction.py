"""Pointer interaction on the arrangement canvas: selection, drag, hover.

The controller never mutates outputs. Each pointer event returns a list of
effects for the owning session to apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .geometry import round_half_away
from .layout import Projection, hit_test
from .models import Output
from .snap import snap_position


# ── States ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    index: int
    start_pointer: tuple[float, float]
    start_position: tuple[int, int]


State = Union[Idle, Dragging]


# ── Effects ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SelectionChanged:
    index: int


@dataclass(frozen=True)
class OutputMoved:
    index: int
    x: int
    y: int


@dataclass(frozen=True)
class HoverChanged:
    index: int | None


Effect = Union[SelectionChanged, OutputMoved, HoverChanged]


# ── Controller ───────────────────────────────────────────────────────────

class CanvasController:
    """Tracks drag and hover state across discrete pointer events."""

    def __init__(self) -> None:
        self.state: State = Idle()
        self.hovered: int | None = None

    @property
    def dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def press(self, outputs: list[Output], projection: Projection,
              x: float, y: float) -> list[Effect]:
        idx = hit_test(outputs, projection, x, y)
        if idx is None:
            self.state = Idle()
            return []
        out = outputs[idx]
        self.state = Dragging(idx, (x, y), (out.x, out.y))
        return [SelectionChanged(idx)]

    def move(self, outputs: list[Output], projection: Projection,
             x: float, y: float) -> list[Effect]:
        if isinstance(self.state, Dragging):
            return self._drag(outputs, projection, x, y)
        return self._hover(outputs, projection, x, y)

    def release(self) -> list[Effect]:
        self.state = Idle()
        return []

    def _drag(self, outputs: list[Output], projection: Projection,
              x: float, y: float) -> list[Effect]:
        drag = self.state
        if not 0 <= drag.index < len(outputs):
            # Outputs were re-enumerated under the drag
            self.state = Idle()
            return []

        start_x, start_y = drag.start_pointer
        dx, dy = projection.to_logical_delta(x - start_x, y - start_y)
        new_x = max(drag.start_position[0] + round_half_away(dx), 0)
        new_y = max(drag.start_position[1] + round_half_away(dy), 0)

        sx, sy = snap_position(outputs, drag.index, new_x, new_y)
        return [OutputMoved(drag.index, sx, sy)]

    def _hover(self, outputs: list[Output], projection: Projection,
               x: float, y: float) -> list[Effect]:
        new_hovered = hit_test(outputs, projection, x, y)
        if new_hovered == self.hovered:
            return []
        self.hovered = new_hovered
        return [HoverChanged(new_hovered)]
