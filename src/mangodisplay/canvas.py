"""Monitor arrangement canvas using Gtk.DrawingArea + Cairo.

The widget holds no layout state of its own: pointer events are forwarded
to the Session and every paint reads the projected rectangles back.
"""

from __future__ import annotations

import math

import gi
gi.require_version("Gtk", "4.0")
from gi.repository import Gtk, GObject

from .geometry import Rect
from .models import Output
from .session import Session


# Colors
COLOR_BG = (0.06, 0.06, 0.06)
COLOR_MONITOR = (0.14, 0.14, 0.14)
COLOR_MONITOR_BORDER = (0.08, 0.08, 0.08)
COLOR_HOVER = (0.24, 0.24, 0.24)
COLOR_HOVER_BORDER = (0.59, 0.59, 0.59)
COLOR_SELECTED_FILL = (0.86, 0.86, 0.86)
COLOR_SELECTED = (1.0, 1.0, 1.0)
COLOR_DISABLED = (0.5, 0.2, 0.2)
COLOR_TEXT = (0.9, 0.9, 0.9)
COLOR_TEXT_DIM = (0.63, 0.63, 0.63)
COLOR_TEXT_SELECTED = (0.0, 0.0, 0.0)
COLOR_TEXT_SELECTED_DIM = (0.16, 0.16, 0.16)


class MonitorCanvas(Gtk.DrawingArea):
    """Canvas widget for arranging monitors with drag-and-drop."""

    __gtype_name__ = "MonitorCanvas"

    __gsignals__ = {
        "monitor-selected": (GObject.SignalFlags.RUN_FIRST, None, (int,)),
        "monitor-moved": (GObject.SignalFlags.RUN_FIRST, None, (int,)),
    }

    def __init__(self, session: Session) -> None:
        super().__init__()
        self._session = session
        self._drag_origin: tuple[float, float] = (0.0, 0.0)

        self.set_draw_func(self._draw)
        self.set_hexpand(True)
        self.set_vexpand(True)
        self.connect("resize", self._on_resize)
        session.cache.connect(self.queue_draw)

        # Drag gesture for selecting and moving monitors
        drag = Gtk.GestureDrag()
        drag.set_button(1)
        drag.connect("drag-begin", self._on_drag_begin)
        drag.connect("drag-update", self._on_drag_update)
        drag.connect("drag-end", self._on_drag_end)
        self.add_controller(drag)

        # Pointer motion for hover feedback
        motion = Gtk.EventControllerMotion()
        motion.connect("motion", self._on_motion)
        self.add_controller(motion)

    # ── Event handlers ───────────────────────────────────────────────

    def _on_resize(self, area: Gtk.DrawingArea, width: int, height: int) -> None:
        self._session.set_surface_size(width, height)

    def _on_drag_begin(self, gesture: Gtk.GestureDrag, x: float, y: float) -> None:
        before = self._session.selected_index
        self._drag_origin = (x, y)
        self._session.press(x, y)
        after = self._session.selected_index
        if self._session.controller.dragging and after is not None and after != before:
            self.emit("monitor-selected", after)

    def _on_drag_update(self, gesture: Gtk.GestureDrag, offset_x: float, offset_y: float) -> None:
        idx = self._session.selected_index
        if not self._session.controller.dragging or idx is None:
            return
        before = self._session.outputs[idx].position
        ox, oy = self._drag_origin
        self._session.move(ox + offset_x, oy + offset_y)
        if self._session.outputs[idx].position != before:
            self.emit("monitor-moved", idx)

    def _on_drag_end(self, gesture: Gtk.GestureDrag, offset_x: float, offset_y: float) -> None:
        self._session.release()

    def _on_motion(self, controller: Gtk.EventControllerMotion, x: float, y: float) -> None:
        # Drag updates arrive through the gesture
        if not self._session.controller.dragging:
            self._session.move(x, y)

    # ── Drawing ──────────────────────────────────────────────────────

    def _draw(self, area: Gtk.DrawingArea, cr, width: int, height: int) -> None:
        cr.set_source_rgb(*COLOR_BG)
        cr.paint()

        session = self._session
        scale = session.projection().scale_factor
        selected = session.selected_index
        hovered = session.hovered_index
        for i, (m, rect) in enumerate(zip(session.outputs, session.projected_rects())):
            self._draw_monitor(cr, m, rect, scale, i == selected, i == hovered)
        session.cache.mark_drawn()

    def _draw_monitor(self, cr, m: Output, rect: Rect, scale: float,
                      selected: bool, hovered: bool) -> None:
        if selected:
            fill, stroke, width = COLOR_SELECTED_FILL, COLOR_SELECTED, 3.0
        elif hovered:
            fill, stroke, width = COLOR_HOVER, COLOR_HOVER_BORDER, 2.0
        else:
            fill, stroke, width = COLOR_MONITOR, COLOR_MONITOR_BORDER, 2.0
        if not m.enabled and not selected:
            fill = COLOR_DISABLED

        cr.set_source_rgb(*fill)
        _rounded_rect(cr, rect.x, rect.y, rect.width, rect.height, 4)
        cr.fill()

        cr.set_source_rgb(*stroke)
        cr.set_line_width(width)
        _rounded_rect(cr, rect.x, rect.y, rect.width, rect.height, 4)
        cr.stroke()

        self._draw_monitor_text(cr, m, rect, scale, selected)

    def _draw_monitor_text(self, cr, m: Output, rect: Rect, scale: float, selected: bool) -> None:
        font_scale = min(max(scale, 0.5), 2.0)
        tx = rect.x + 16
        ty = rect.y + 16 + 48 * font_scale

        cr.set_source_rgb(*(COLOR_TEXT_SELECTED if selected else COLOR_TEXT))
        cr.set_font_size(48 * font_scale)
        cr.move_to(tx, ty)
        cr.show_text(m.name or "?")

        size = 18 * font_scale
        cr.set_source_rgb(*(COLOR_TEXT_SELECTED_DIM if selected else COLOR_TEXT_DIM))
        cr.set_font_size(size)
        max_chars = int(max((rect.width - 32) / (size * 0.6), 10))
        for line in wrap_words(m.description, max_chars):
            ty += size * 1.3
            if ty > rect.bottom:
                break
            cr.move_to(tx, ty)
            cr.show_text(line)


def wrap_words(text: str, max_chars: int) -> list[str]:
    """Greedy word wrap; a single word longer than max_chars gets its own line."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        if current and len(current) + len(word) + 1 > max_chars:
            lines.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        lines.append(current)
    return lines


def _rounded_rect(cr, x: float, y: float, w: float, h: float, r: float) -> None:
    """Draw a rounded rectangle path."""
    cr.new_sub_path()
    cr.arc(x + w - r, y + r, r, -math.pi / 2, 0)
    cr.arc(x + w - r, y + h - r, r, 0, math.pi / 2)
    cr.arc(x + r, y + h - r, r, math.pi / 2, math.pi)
    cr.arc(x + r, y + r, r, math.pi, 3 * math.pi / 2)
    cr.close_path()
