"""Editing session: owns the arrangement and applies every user command to it.

All mutation goes through Session methods. The renderer only reads
``session.arrangement`` and the projected geometry during a paint.
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Callable, Protocol

from .errors import BackendError
from .geometry import Rect
from .interaction import (
    CanvasController, Effect, HoverChanged, OutputMoved, SelectionChanged,
)
from .layout import Projection, project, projected_rect
from .models import MIN_SCALE, Arrangement, Output, OutputMode, Transform, normalize_positions
from .settings import AppSettings

log = logging.getLogger(__name__)

POSITION_STEP = 1
SCALE_STEP = 0.05


class Backend(Protocol):
    def enumerate_outputs(self) -> list[Output]: ...

    def apply(self, outputs: list[Output]) -> None: ...

    def save(self, outputs: list[Output], settings: AppSettings) -> object: ...


class CanvasCache:
    """Validity flag for the rendered canvas.

    Listeners (the widget's queue_draw) fire only when a painted canvas goes
    stale, so any number of edits between two paints request one redraw.
    """

    def __init__(self) -> None:
        self.valid = False
        self._listeners: list[Callable[[], None]] = []

    def connect(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def clear(self) -> None:
        if not self.valid:
            return
        self.valid = False
        for cb in self._listeners:
            cb()

    def mark_drawn(self) -> None:
        self.valid = True


class Session:
    """One interactive editing session over one arrangement."""

    def __init__(
        self,
        backend: Backend,
        settings: AppSettings | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._backend = backend
        self.settings = settings or AppSettings()
        self._notify = notify
        self.arrangement = Arrangement()
        self.controller = CanvasController()
        self.cache = CanvasCache()
        self.surface_size: tuple[float, float] = (800.0, 600.0)

        # Text field buffers for the selected output
        self.x_text = ""
        self.y_text = ""
        self.scale_text = ""

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        """Enumerate outputs and select the first one."""
        outputs = self._backend.enumerate_outputs()
        self.arrangement = Arrangement(outputs, 0 if outputs else None)
        self.controller = CanvasController()
        self._update_inputs_for_selection()
        self.cache.clear()

    def reload(self) -> None:
        """Discard edits and re-enumerate outputs from the display server."""
        log.info("Reloading outputs")
        self.start()

    def snapshot(self) -> Arrangement:
        return self.arrangement.copy()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def outputs(self) -> list[Output]:
        return self.arrangement.outputs

    @property
    def selected_index(self) -> int | None:
        return self.arrangement.selected_index

    @property
    def selected_output(self) -> Output | None:
        return self.arrangement.selected_output

    @property
    def hovered_index(self) -> int | None:
        idx = self.controller.hovered
        return idx if self.arrangement.get(idx) is not None else None

    def set_surface_size(self, width: float, height: float) -> None:
        if (width, height) != self.surface_size:
            self.surface_size = (width, height)
            self.cache.clear()

    def projection(self) -> Projection:
        return project(self.outputs, *self.surface_size)

    def projected_rects(self) -> list[Rect]:
        proj = self.projection()
        return [projected_rect(o, proj) for o in self.outputs]

    def refresh_variants(self) -> list[OutputMode]:
        """Modes of the selected output sharing its current resolution."""
        out = self.selected_output
        if out is None:
            return []
        return [out.modes[i] for i in out.refresh_variants()]

    # ── Pointer events ───────────────────────────────────────────────

    def press(self, x: float, y: float) -> None:
        self._apply_effects(self.controller.press(self.outputs, self.projection(), x, y))

    def move(self, x: float, y: float) -> None:
        self._apply_effects(self.controller.move(self.outputs, self.projection(), x, y))

    def release(self) -> None:
        self._apply_effects(self.controller.release())

    def _apply_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, SelectionChanged):
                self.select(effect.index)
            elif isinstance(effect, OutputMoved):
                self.move_output(effect.index, effect.x, effect.y)
            elif isinstance(effect, HoverChanged):
                self.cache.clear()

    # ── Commands ─────────────────────────────────────────────────────

    def select(self, index: int) -> None:
        if self.arrangement.get(index) is None:
            return
        changed = index != self.arrangement.selected_index
        self.arrangement.selected = index
        self._update_inputs_for_selection()
        if changed:
            self.cache.clear()

    def move_output(self, index: int, x: int, y: int) -> None:
        out = self.arrangement.get(index)
        if out is None or out.position == (x, y):
            return
        out.position = (x, y)
        if index == self.selected_index:
            self._update_inputs_for_selection()
        self.cache.clear()

    def set_x_text(self, text: str) -> None:
        self.x_text = text
        self._set_coordinate(text, "x")

    def set_y_text(self, text: str) -> None:
        self.y_text = text
        self._set_coordinate(text, "y")

    def _set_coordinate(self, text: str, axis: str) -> None:
        out = self.selected_output
        if out is None:
            return
        try:
            value = int(text.strip())
        except ValueError:
            return
        if value < 0 or getattr(out, axis) == value:
            return
        setattr(out, axis, value)
        self.cache.clear()

    def nudge_x(self, delta: int = POSITION_STEP) -> None:
        self._nudge("x", delta)

    def nudge_y(self, delta: int = POSITION_STEP) -> None:
        self._nudge("y", delta)

    def _nudge(self, axis: str, delta: int) -> None:
        out = self.selected_output
        if out is None:
            return
        value = getattr(out, axis) + delta
        if value < 0:
            return
        setattr(out, axis, value)
        self._update_inputs_for_selection()
        self.cache.clear()

    def set_scale_text(self, text: str) -> None:
        self.scale_text = text
        out = self.selected_output
        if out is None:
            return
        try:
            value = float(text.strip())
        except ValueError:
            return
        if not math.isfinite(value) or value <= MIN_SCALE or value == out.scale:
            return
        out.scale = value
        self.cache.clear()

    def nudge_scale(self, delta: float = SCALE_STEP) -> None:
        out = self.selected_output
        if out is None:
            return
        value = round(out.scale + delta, 2)
        if value <= MIN_SCALE:
            return
        out.scale = value
        self._update_inputs_for_selection()
        self.cache.clear()

    def set_enabled(self, enabled: bool) -> None:
        out = self.selected_output
        if out is None or out.enabled == enabled:
            return
        out.enabled = enabled
        self.cache.clear()

    def select_mode(self, index: int) -> None:
        out = self.selected_output
        if out is None or index == out.current_mode_index:
            return
        if out.select_mode(index):
            self.cache.clear()

    def select_refresh_rate(self, variant: int) -> None:
        """Pick the *variant*-th mode among those sharing the current resolution."""
        out = self.selected_output
        if out is None:
            return
        variants = out.refresh_variants()
        if 0 <= variant < len(variants):
            self.select_mode(variants[variant])

    def set_transform(self, transform: Transform | str) -> None:
        out = self.selected_output
        if out is None:
            return
        if not isinstance(transform, Transform):
            try:
                transform = Transform(transform)
            except ValueError:
                return
        if out.transform == transform:
            return
        out.transform = transform
        self.cache.clear()

    # ── Apply / Save ─────────────────────────────────────────────────

    def apply(self) -> bool:
        """Normalize and push the arrangement to the display server."""
        staged = self._staged_outputs()
        if not staged:
            log.info("No outputs to apply")
            return False
        try:
            self._backend.apply(staged)
        except BackendError as e:
            log.error("Apply failed: %s", e)
            self._emit(f"Apply failed: {e}")
            return False
        self._commit_positions(staged)
        self._emit("Configuration applied")
        return True

    def save(self) -> bool:
        """Normalize and persist the arrangement to settings.monitors_conf_path."""
        staged = self._staged_outputs()
        try:
            self._backend.save(staged, self.settings)
        except BackendError as e:
            log.error("Save failed: %s", e)
            self._emit(f"Save failed: {e}")
            return False
        self._commit_positions(staged)
        self._emit(f"Saved to {self.settings.monitors_conf_path}")
        return True

    def _staged_outputs(self) -> list[Output]:
        staged = copy.deepcopy(self.outputs)
        normalize_positions(staged)
        return staged

    def _commit_positions(self, staged: list[Output]) -> None:
        changed = False
        for out, new in zip(self.outputs, staged):
            if out.position != new.position:
                out.position = new.position
                changed = True
        if changed:
            self._update_inputs_for_selection()
            self.cache.clear()

    # ── Helpers ──────────────────────────────────────────────────────

    def _update_inputs_for_selection(self) -> None:
        out = self.selected_output
        if out is None:
            return
        self.x_text = str(out.x)
        self.y_text = str(out.y)
        self.scale_text = f"{out.scale:.2f}"

    def _emit(self, message: str) -> None:
        if self._notify is not None:
            self._notify(message)
