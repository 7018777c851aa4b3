"""Logical geometry: output sizes after scale and transform, and rectangles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Output


def round_half_away(value: float) -> int:
    """Round to the nearest int, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def logical_size(output: Output) -> tuple[int, int]:
    """Return (width, height) of *output* in logical pixels.

    The current mode is divided by the output scale (truncated), then
    swapped for the 90°/270° transforms.
    """
    mode = output.current_mode
    w = int(mode.width / output.scale)
    h = int(mode.height / output.scale)
    if output.transform.is_rotated:
        return h, w
    return w, h


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        """Half-open containment: the left/top edges are inside, right/bottom are not."""
        return self.x <= px < self.right and self.y <= py < self.bottom
