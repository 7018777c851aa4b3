"""Projection of the logical arrangement onto the canvas drawing surface."""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import Rect
from .models import Output


# World span never shrinks below this, so small layouts leave room to drag.
MIN_SPAN_X = 4000.0
MIN_SPAN_Y = 3000.0
SPAN_X_FACTOR = 1.5
SPAN_Y_FACTOR = 2.5

DEFAULT_HEIGHT = 1080
DEFAULT_FIRST_WIDTH = 1920


@dataclass(frozen=True)
class Projection:
    scale_factor: float
    offset_x: float
    offset_y: float

    def to_surface(self, lx: float, ly: float) -> tuple[float, float]:
        """Convert logical coordinates to surface coordinates."""
        return lx * self.scale_factor + self.offset_x, ly * self.scale_factor + self.offset_y

    def to_logical(self, sx: float, sy: float) -> tuple[float, float]:
        """Convert surface coordinates to logical coordinates."""
        return (sx - self.offset_x) / self.scale_factor, (sy - self.offset_y) / self.scale_factor

    def to_logical_delta(self, dx: float, dy: float) -> tuple[float, float]:
        return dx / self.scale_factor, dy / self.scale_factor


def project(outputs: list[Output], surface_width: float, surface_height: float) -> Projection:
    """Fit the whole arrangement into a surface of the given pixel size.

    The scale is uniform and sized against an over-provisioned world span,
    so outputs never touch the surface edge. The first output is centred
    horizontally and the tallest extent vertically.
    """
    surface_width = max(float(surface_width), 1.0)
    surface_height = max(float(surface_height), 1.0)

    total_w = 0
    max_h = DEFAULT_HEIGHT
    for out in outputs:
        w, h = out.logical_size
        total_w += w
        max_h = max(max_h, h)

    span_x = max(total_w * SPAN_X_FACTOR, MIN_SPAN_X)
    span_y = max(max_h * SPAN_Y_FACTOR, MIN_SPAN_Y)
    scale = min(surface_width / span_x, surface_height / span_y)

    first_w = outputs[0].logical_width if outputs else DEFAULT_FIRST_WIDTH

    offset_x = surface_width / 2 - (first_w / 2) * scale
    offset_y = surface_height / 2 - (max_h / 2) * scale
    return Projection(scale, offset_x, offset_y)


def projected_rect(output: Output, projection: Projection) -> Rect:
    """Return the surface-space rectangle of *output*."""
    w, h = output.logical_size
    x, y = projection.to_surface(output.x, output.y)
    return Rect(x, y, w * projection.scale_factor, h * projection.scale_factor)


def hit_test(outputs: list[Output], projection: Projection, sx: float, sy: float) -> int | None:
    """Return the index of the output under a surface point, or None.

    Every output is tested in list order and the last match is kept, which
    is the rectangle painted on top.
    """
    hit = None
    for i, out in enumerate(outputs):
        if projected_rect(out, projection).contains(sx, sy):
            hit = i
    return hit
