"""Edge snapping for a dragged output."""

from __future__ import annotations

from .geometry import round_half_away
from .models import Output


# Snap distance in logical pixels
SNAP_THRESHOLD = 40
# Fallback grid in logical pixels
GRID_STEP = 10


def snap_to_grid(value: int, step: int = GRID_STEP) -> int:
    return round_half_away(value / step) * step


def snap_position(
    outputs: list[Output],
    idx: int,
    new_x: int,
    new_y: int,
    threshold: int = SNAP_THRESHOLD,
    grid: int = GRID_STEP,
) -> tuple[int, int]:
    """Snap output *idx* at (new_x, new_y) to the edges of the other outputs.

    Each axis is solved independently. An output only offers X edges when
    the two Y extents overlap within *threshold* (and vice versa), so
    outputs that are not side by side never pull on each other. Per axis
    the offers are: my near edge to its far edge, my far edge to its near
    edge, and my near edge to its near edge. The closest offer under the
    threshold wins. An axis that found nothing falls back to the grid.
    """
    snapped_x = new_x
    snapped_y = new_y

    if 0 <= idx < len(outputs):
        w, h = outputs[idx].logical_size
        min_dist_x = threshold
        min_dist_y = threshold

        my_left = new_x
        my_right = new_x + w
        my_top = new_y
        my_bottom = new_y + h

        for i, other in enumerate(outputs):
            if i == idx:
                continue
            other_w, other_h = other.logical_size

            other_left = other.x
            other_right = other.x + other_w
            other_top = other.y
            other_bottom = other.y + other_h

            x_overlap = (my_left < other_right + threshold
                         and my_right > other_left - threshold)
            y_overlap = (my_top < other_bottom + threshold
                         and my_bottom > other_top - threshold)

            if y_overlap:
                for dist, target in (
                    (abs(my_left - other_right), other_right),
                    (abs(my_right - other_left), other_left - w),
                    (abs(my_left - other_left), other_left),
                ):
                    if dist < min_dist_x:
                        min_dist_x = dist
                        snapped_x = target

            if x_overlap:
                for dist, target in (
                    (abs(my_top - other_bottom), other_bottom),
                    (abs(my_bottom - other_top), other_top - h),
                    (abs(my_top - other_top), other_top),
                ):
                    if dist < min_dist_y:
                        min_dist_y = dist
                        snapped_y = target

    if snapped_x == new_x:
        snapped_x = snap_to_grid(snapped_x, grid)
    if snapped_y == new_y:
        snapped_y = snap_to_grid(snapped_y, grid)

    return max(snapped_x, 0), max(snapped_y, 0)
