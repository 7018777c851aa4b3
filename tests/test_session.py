"""Tests for the editing session."""

import random

import pytest

from mangodisplay.models import Transform
from mangodisplay.session import Session
from mangodisplay.settings import AppSettings

from conftest import FakeBackend, build_output


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def session(backend, messages) -> Session:
    s = Session(backend, AppSettings(monitors_conf_path="/tmp/monitors.sh"), notify=messages.append)
    s.start()
    return s


def _center(session: Session, index: int) -> tuple[float, float]:
    r = session.projected_rects()[index]
    return r.x + r.width / 2, r.y + r.height / 2


# ===================================================================
# Lifecycle
# ===================================================================

def test_start_selects_first_output(session) -> None:
    assert session.selected_index == 0
    assert session.x_text == "0"
    assert session.y_text == "0"
    assert session.scale_text == "1.00"


def test_start_with_no_outputs() -> None:
    s = Session(FakeBackend([]))
    s.start()
    assert s.selected_index is None
    assert s.selected_output is None
    # Commands on an empty session are no-ops
    s.set_x_text("10")
    s.nudge_scale()
    s.select(0)
    assert s.outputs == []


def test_snapshot_is_independent(session) -> None:
    snap = session.snapshot()
    session.move_output(0, 100, 100)
    assert snap.outputs[0].position == (0, 0)
    assert snap.selected == 0


def test_reload_resets_edits(backend, session) -> None:
    session.select(1)
    backend.outputs = [build_output("eDP-1")]
    session.reload()
    assert [o.name for o in session.outputs] == ["eDP-1"]
    assert session.selected_index == 0


# ===================================================================
# Selection and hover
# ===================================================================

def test_select_stale_index_is_ignored(session) -> None:
    session.select(5)
    assert session.selected_index == 0


def test_select_updates_text_fields(session) -> None:
    session.select(1)
    assert session.x_text == "1920"


def test_press_selects_and_drags(session) -> None:
    x, y = _center(session, 1)
    session.press(x, y)
    assert session.selected_index == 1
    scale = session.projection().scale_factor
    session.move(x + 1000 * scale, y)
    session.release()
    assert session.outputs[1].position == (2920, 0)
    assert session.x_text == "2920"


def test_drag_mutates_with_snapped_position(session) -> None:
    x, y = _center(session, 1)
    scale = session.projection().scale_factor
    session.press(x, y)
    # 23 logical pixels right of A's right edge: snaps flush
    session.move(x + 23 * scale, y + 7 * scale)
    assert session.outputs[1].position == (1920, 0)


def test_drag_clamps_to_zero(session) -> None:
    x, y = _center(session, 0)
    session.press(x, y)
    session.move(x - 500, y - 500)
    assert session.outputs[0].position == (0, 0)
    assert min(session.outputs[0].position) >= 0


def test_press_outside_keeps_selection(session) -> None:
    session.select(1)
    session.press(1, 1)
    assert session.selected_index == 1
    assert not session.controller.dragging


def test_hover_does_not_change_selection(session) -> None:
    x, y = _center(session, 1)
    session.move(x, y)
    assert session.hovered_index == 1
    assert session.selected_index == 0


def test_selection_does_not_change_hover(session) -> None:
    x, y = _center(session, 1)
    session.move(x, y)
    session.select(0)
    assert session.hovered_index == 1


# ===================================================================
# Render cache
# ===================================================================

def test_cache_cleared_by_model_changes(session) -> None:
    for change in (
        lambda: session.move_output(0, 10, 10),
        lambda: session.nudge_scale(0.05),
        lambda: session.set_transform(Transform.ROTATE_90),
        lambda: session.set_enabled(False),
        lambda: session.select(1),
        lambda: session.select_refresh_rate(1),
    ):
        session.cache.mark_drawn()
        change()
        assert not session.cache.valid


def test_cache_cleared_by_hover(session) -> None:
    session.cache.mark_drawn()
    session.move(*_center(session, 1))
    assert not session.cache.valid


def test_cache_survives_rejected_edits(session) -> None:
    session.cache.mark_drawn()
    session.set_x_text("12a")
    session.set_y_text("-5")
    session.set_scale_text("0.05")
    session.set_transform("sideways")
    session.select(9)
    session.select_mode(9)
    assert session.cache.valid


def test_surface_size_drives_projection(session) -> None:
    session.cache.mark_drawn()
    session.set_surface_size(1152, 600)
    assert not session.cache.valid
    # total width 3840 * 1.5 dominates the 4000 floor
    assert session.projection().scale_factor == pytest.approx(1152 / 5760)

    session.cache.mark_drawn()
    session.set_surface_size(1152, 600)
    assert session.cache.valid


def test_cache_listener_called_once_per_paint(session) -> None:
    calls = []
    session.cache.connect(lambda: calls.append(1))
    session.cache.mark_drawn()
    session.nudge_x()
    session.nudge_y()
    session.nudge_scale(0.05)
    assert calls == [1]

    session.cache.mark_drawn()
    session.nudge_x()
    assert calls == [1, 1]


def test_cache_listener_silent_before_first_paint(session) -> None:
    calls = []
    session.cache.connect(lambda: calls.append(1))
    session.nudge_x()
    assert calls == []
    assert not session.cache.valid


# ===================================================================
# Text fields
# ===================================================================

def test_set_x_text(session) -> None:
    session.set_x_text("250")
    assert session.outputs[0].x == 250


def test_invalid_text_is_kept_and_ignored(session) -> None:
    session.set_x_text("25x")
    assert session.x_text == "25x"
    assert session.outputs[0].x == 0


def test_negative_position_text_is_ignored(session) -> None:
    session.set_y_text("-40")
    assert session.y_text == "-40"
    assert session.outputs[0].y == 0


def test_scale_text(session) -> None:
    session.set_scale_text("1.5")
    assert session.outputs[0].scale == 1.5
    assert session.outputs[0].logical_size == (1280, 720)


@pytest.mark.parametrize("text", ["0.1", "0", "-1", "abc", "", "inf", "nan"])
def test_scale_text_rejected(session, text) -> None:
    session.set_scale_text(text)
    assert session.scale_text == text
    assert session.outputs[0].scale == 1.0


# ===================================================================
# Nudges
# ===================================================================

def test_nudge_position(session) -> None:
    session.nudge_x(1)
    session.nudge_y(1)
    assert session.outputs[0].position == (1, 1)
    assert (session.x_text, session.y_text) == ("1", "1")


def test_nudge_position_never_negative(session) -> None:
    session.nudge_x(-1)
    session.nudge_y(-1)
    assert session.outputs[0].position == (0, 0)


def test_nudge_scale(session) -> None:
    session.nudge_scale(0.05)
    assert session.outputs[0].scale == 1.05
    assert session.scale_text == "1.05"


def test_nudge_scale_keeps_above_minimum(session) -> None:
    session.set_scale_text("0.15")
    session.nudge_scale(-0.05)
    assert session.outputs[0].scale == 0.15
    assert session.outputs[0].scale > 0.1


# ===================================================================
# Modes, transform, enabled
# ===================================================================

def test_refresh_variants(session) -> None:
    session.select(1)
    assert [m.refresh_rate for m in session.refresh_variants()] == [60.0, 144.0]
    session.select_refresh_rate(1)
    assert session.outputs[1].current_mode.refresh_rate == 144.0


def test_refresh_variant_out_of_range(session) -> None:
    session.select(1)
    session.select_refresh_rate(4)
    assert session.outputs[1].current_mode.refresh_rate == 60.0


def test_set_transform_from_string(session) -> None:
    session.set_transform("270")
    assert session.outputs[0].transform is Transform.ROTATE_270
    assert session.outputs[0].logical_size == (1080, 1920)


def test_set_enabled(session) -> None:
    session.set_enabled(False)
    assert not session.outputs[0].enabled
    assert len(session.outputs) == 2


def test_exactly_one_current_mode_after_mutations(session) -> None:
    rng = random.Random(1234)
    ops = [
        lambda: session.select(rng.randrange(-1, 4)),
        lambda: session.select_mode(rng.randrange(-2, 5)),
        lambda: session.select_refresh_rate(rng.randrange(-2, 5)),
        lambda: session.set_transform(rng.choice(list(Transform))),
        lambda: session.nudge_scale(rng.choice([-0.05, 0.05])),
        lambda: session.move_output(rng.randrange(0, 3), rng.randrange(-100, 4000), rng.randrange(0, 3000)),
    ]
    for _ in range(300):
        rng.choice(ops)()
        for out in session.outputs:
            assert sum(1 for m in out.modes if m.current) == 1


# ===================================================================
# Apply / Save
# ===================================================================

def test_apply_normalizes_and_commits(backend, session, messages) -> None:
    session.move_output(0, 0, 0)
    session.outputs[0].x = -1920
    session.outputs[1].y = -100
    assert session.apply()
    applied = backend.applied[0]
    assert [o.position for o in applied] == [(0, 100), (3840, 0)]
    assert [o.position for o in session.outputs] == [(0, 100), (3840, 0)]
    assert session.y_text == "100"
    assert backend.saved == []
    assert messages == ["Configuration applied"]


def test_apply_keeps_non_negative_layout() -> None:
    backend = FakeBackend([build_output("DP-1", 500, 0)])
    s = Session(backend)
    s.start()
    assert s.apply()
    assert [o.position for o in backend.applied[0]] == [(500, 0)]
    assert s.outputs[0].position == (500, 0)


def test_save_keeps_non_negative_layout() -> None:
    backend = FakeBackend([build_output("A", 100, 50), build_output("B", 2020, 50)])
    s = Session(backend)
    s.start()
    assert s.save()
    outputs, _ = backend.saved[0]
    assert [o.position for o in outputs] == [(100, 50), (2020, 50)]


def test_apply_empty_arrangement_is_silent(messages) -> None:
    backend = FakeBackend([])
    s = Session(backend, notify=messages.append)
    s.start()
    assert not s.apply()
    assert backend.applied == []
    assert messages == []


def test_apply_failure_leaves_arrangement(backend, session, messages) -> None:
    session.outputs[0].x = -50
    before = session.snapshot()
    backend.fail = True
    assert not session.apply()
    assert session.snapshot() == before
    assert messages == ["Apply failed: display server unreachable"]


def test_save_does_not_apply(backend, session, messages) -> None:
    assert session.save()
    assert backend.applied == []
    outputs, settings = backend.saved[0]
    assert settings.monitors_conf_path == "/tmp/monitors.sh"
    assert [o.name for o in outputs] == ["DP-1", "HDMI-A-1"]
    assert messages == ["Saved to /tmp/monitors.sh"]


def test_save_failure_leaves_arrangement(backend, session, messages) -> None:
    session.outputs[1].y = -10
    backend.fail = True
    assert not session.save()
    assert session.outputs[1].y == -10
    assert messages[0].startswith("Save failed")
