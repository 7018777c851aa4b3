"""Properties panel for the selected output using Adw.PreferencesPage."""

from __future__ import annotations

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Adw, GObject

from .models import Transform
from .session import Session


class PropertiesPanel(Adw.PreferencesPage):
    """Side panel editing the selected output through the session."""

    __gtype_name__ = "PropertiesPanel"

    __gsignals__ = {
        "property-changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, session: Session) -> None:
        super().__init__()
        self._session = session
        self._building = False

        self._build_ui()

    def _build_ui(self) -> None:
        # ── Monitor Info ─────────────────────────────────────────────
        grp_info = Adw.PreferencesGroup(title="Monitor")
        self.add(grp_info)

        self._row_desc = Adw.ActionRow(title="Description", icon_name="text-x-generic-symbolic")
        self._lbl_desc = Gtk.Label(label="-", xalign=1, wrap=True, max_width_chars=24)
        self._lbl_desc.add_css_class("dim-label")
        self._row_desc.add_suffix(self._lbl_desc)
        grp_info.add(self._row_desc)

        self._row_phys = Adw.ActionRow(title="Physical Size", icon_name="video-display-symbolic")
        self._lbl_phys = Gtk.Label(label="-", xalign=1)
        self._lbl_phys.add_css_class("dim-label")
        self._row_phys.add_suffix(self._lbl_phys)
        grp_info.add(self._row_phys)

        self._sw_enabled = Adw.SwitchRow(title="Enabled", icon_name="system-shutdown-symbolic")
        self._sw_enabled.connect("notify::active", self._on_enabled_changed)
        grp_info.add(self._sw_enabled)

        # ── Mode ─────────────────────────────────────────────────────
        grp_mode = Adw.PreferencesGroup(title="Mode")
        self.add(grp_mode)

        self._row_size = Adw.ActionRow(title="Size", icon_name="preferences-desktop-display-symbolic")
        self._lbl_size = Gtk.Label(label="-", xalign=1)
        self._lbl_size.add_css_class("dim-label")
        self._row_size.add_suffix(self._lbl_size)
        grp_mode.add(self._row_size)

        self._combo_refresh = Adw.ComboRow(title="Refresh Rate")
        self._combo_refresh.connect("notify::selected", self._on_refresh_changed)
        grp_mode.add(self._combo_refresh)

        # ── Position ─────────────────────────────────────────────────
        grp_pos = Adw.PreferencesGroup(title="Position")
        self.add(grp_pos)

        self._entry_x = self._entry_row(grp_pos, "X", self._session.set_x_text, self._session.nudge_x, 1)
        self._entry_y = self._entry_row(grp_pos, "Y", self._session.set_y_text, self._session.nudge_y, 1)

        # ── Scale & Transform ────────────────────────────────────────
        grp_scale = Adw.PreferencesGroup(title="Scale &amp; Transform")
        self.add(grp_scale)

        self._entry_scale = self._entry_row(
            grp_scale, "DPI Scale", self._session.set_scale_text, self._session.nudge_scale, 0.05,
        )

        self._combo_transform = Adw.ComboRow(title="Transform", icon_name="object-rotate-right-symbolic")
        self._combo_transform.set_model(Gtk.StringList.new([t.label for t in Transform]))
        self._combo_transform.connect("notify::selected", self._on_transform_changed)
        grp_scale.add(self._combo_transform)

    def _entry_row(self, group: Adw.PreferencesGroup, title: str, on_text, on_nudge, step) -> Adw.EntryRow:
        """An entry row with − / + suffix buttons."""
        row = Adw.EntryRow(title=title)
        row.connect("changed", lambda r: self._on_text_changed(on_text, r.get_text()))

        btn_dec = Gtk.Button(label="−", valign=Gtk.Align.CENTER)
        btn_dec.connect("clicked", lambda _b: self._on_nudge(on_nudge, -step))
        row.add_suffix(btn_dec)

        btn_inc = Gtk.Button(label="+", valign=Gtk.Align.CENTER)
        btn_inc.connect("clicked", lambda _b: self._on_nudge(on_nudge, step))
        row.add_suffix(btn_inc)

        group.add(row)
        return row

    def update_from_session(self) -> None:
        """Reload every widget from the selected output."""
        out = self._session.selected_output
        self.set_sensitive(out is not None)
        if out is None:
            return

        self._building = True
        self._lbl_desc.set_label(out.description or "-")
        self._lbl_phys.set_label(out.physical_size or "Unknown")
        self._sw_enabled.set_active(out.enabled)
        # Disabling the only output would leave nothing to apply
        self._sw_enabled.set_visible(len(self._session.outputs) > 1)

        mode = out.current_mode
        self._lbl_size.set_label(f"{mode.width} × {mode.height}")
        variants = self._session.refresh_variants()
        self._combo_refresh.set_model(
            Gtk.StringList.new([f"{m.refresh_rate:.3f} Hz" for m in variants])
        )
        self._combo_refresh.set_selected(variants.index(mode))

        self._sync_entries()
        self._combo_transform.set_selected(list(Transform).index(out.transform))
        self._building = False

    def _sync_entries(self) -> None:
        for row, text in (
            (self._entry_x, self._session.x_text),
            (self._entry_y, self._session.y_text),
            (self._entry_scale, self._session.scale_text),
        ):
            if row.get_text() != text:
                row.set_text(text)

    # ── Handlers ─────────────────────────────────────────────────────

    def _on_text_changed(self, setter, text: str) -> None:
        if self._building:
            return
        setter(text)
        self.emit("property-changed")

    def _on_nudge(self, nudge, step) -> None:
        nudge(step)
        self._building = True
        self._sync_entries()
        self._building = False
        self.emit("property-changed")

    def _on_enabled_changed(self, *args) -> None:
        if self._building:
            return
        self._session.set_enabled(self._sw_enabled.get_active())
        self.emit("property-changed")

    def _on_refresh_changed(self, *args) -> None:
        if self._building:
            return
        sel = self._combo_refresh.get_selected()
        if sel != Gtk.INVALID_LIST_POSITION:
            self._session.select_refresh_rate(sel)
            self.emit("property-changed")

    def _on_transform_changed(self, *args) -> None:
        if self._building:
            return
        sel = self._combo_transform.get_selected()
        if sel != Gtk.INVALID_LIST_POSITION:
            self._session.set_transform(list(Transform)[sel])
            self.emit("property-changed")
