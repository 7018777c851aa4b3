"""Main application window."""

from __future__ import annotations

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Adw, Gio

from .canvas import MonitorCanvas
from .properties_panel import PropertiesPanel
from .session import Session
from .settings import AppSettings
from .wlr_randr import WlrRandr

TOAST_TIMEOUT = 3


class MangoDisplayWindow(Adw.ApplicationWindow):
    """Arrangement canvas on the left, output properties in a sidebar."""

    __gtype_name__ = "MangoDisplayWindow"

    def __init__(self, app: Adw.Application) -> None:
        super().__init__(application=app, title="Mango Display", default_width=1200, default_height=720)
        self._session = Session(WlrRandr(), AppSettings.load(), notify=self._toast)

        self._build_ui()
        self._setup_actions()
        self._load_current_state()

    # ── UI Construction ──────────────────────────────────────────────

    def _build_ui(self) -> None:
        self._canvas = MonitorCanvas(self._session)
        self._canvas.connect("monitor-selected", self._on_monitor_selected)
        self._canvas.connect("monitor-moved", self._on_monitor_moved)

        self._props = PropertiesPanel(self._session)
        self._props.connect("property-changed", self._on_property_changed)

        sidebar = Gtk.ScrolledWindow(hscrollbar_policy=Gtk.PolicyType.NEVER, child=self._props)

        split = Adw.OverlaySplitView(
            content=self._canvas,
            sidebar=sidebar,
            sidebar_position=Gtk.PackType.END,
            min_sidebar_width=300,
            max_sidebar_width=400,
            collapsed=False,
        )
        self._toast_overlay = Adw.ToastOverlay(child=split, vexpand=True)

        self._status = Gtk.Label(label="Starting", xalign=0, margin_start=12, margin_end=12,
                                 margin_top=4, margin_bottom=4)
        self._status.add_css_class("dim-label")

        layout = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        layout.append(self._build_header())
        layout.append(self._toast_overlay)
        layout.append(self._status)
        self.set_content(layout)

    def _build_header(self) -> Adw.HeaderBar:
        bar = Adw.HeaderBar(title_widget=Adw.WindowTitle(title="Mango Display", subtitle="Monitor Configuration"))

        save = Gtk.Button(icon_name="document-save-symbolic", tooltip_text="Save to startup script (Ctrl+S)",
                          action_name="win.save")
        bar.pack_start(save)

        apply = Gtk.Button(label="Apply", tooltip_text="Apply to running outputs (Ctrl+Return)",
                           action_name="win.apply")
        apply.add_css_class("suggested-action")
        bar.pack_end(apply)

        detect = Gtk.Button(icon_name="view-refresh-symbolic", tooltip_text="Re-detect outputs (Ctrl+R)",
                            action_name="win.detect")
        bar.pack_end(detect)
        return bar

    def _setup_actions(self) -> None:
        """Window actions shared by header buttons and shortcuts."""
        app = self.get_application()
        for name, accel, handler in (
            ("save", "<Control>s", self._on_save),
            ("apply", "<Control>Return", self._on_apply),
            ("detect", "<Control>r", self._on_detect),
        ):
            action = Gio.SimpleAction(name=name)
            action.connect("activate", handler)
            self.add_action(action)
            app.set_accels_for_action(f"win.{name}", [accel])

    # ── State ────────────────────────────────────────────────────────

    def _load_current_state(self) -> None:
        """Query the compositor for the current outputs."""
        self._session.start()
        self._props.update_from_session()
        outputs = self._session.outputs
        if not outputs:
            self._set_status("No outputs detected")
            self._toast("Cannot query outputs (is wlr-randr installed?)")
            return
        disabled = sum(1 for o in outputs if not o.enabled)
        summary = f"{len(outputs)} output(s)"
        if disabled:
            summary += f", {disabled} disabled"
        self._set_status(summary)

    # ── Handlers ─────────────────────────────────────────────────────

    def _on_detect(self, action: Gio.SimpleAction, param) -> None:
        self._load_current_state()

    def _on_apply(self, action: Gio.SimpleAction, param) -> None:
        if self._session.apply():
            self._set_status("Applied")
            self._props.update_from_session()

    def _on_save(self, action: Gio.SimpleAction, param) -> None:
        if self._session.save():
            self._set_status(f"Saved {self._session.settings.monitors_conf_path}")
            self._props.update_from_session()

    def _on_monitor_selected(self, canvas: MonitorCanvas, index: int) -> None:
        self._props.update_from_session()

    def _on_monitor_moved(self, canvas: MonitorCanvas, index: int) -> None:
        out = self._session.outputs[index]
        self._set_status(f"{out.name}: {out.x},{out.y}")
        self._props.update_from_session()

    def _on_property_changed(self, panel: PropertiesPanel) -> None:
        self._set_status("Unsaved changes")

    def _set_status(self, text: str) -> None:
        self._status.set_label(text)

    def _toast(self, message: str) -> None:
        self._toast_overlay.add_toast(Adw.Toast(title=message, timeout=TOAST_TIMEOUT))
