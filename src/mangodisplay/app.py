"""Application entry point."""

from __future__ import annotations

import logging
import os
import sys

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Adw, Gio

from .utils import APP_ID

log = logging.getLogger(__name__)


class MangoDisplayApp(Adw.Application):
    """Single-instance application; a second launch raises the open window."""

    def __init__(self) -> None:
        super().__init__(application_id=APP_ID, flags=Gio.ApplicationFlags.DEFAULT_FLAGS)

    def do_startup(self) -> None:
        Adw.Application.do_startup(self)
        quit_action = Gio.SimpleAction(name="quit")
        quit_action.connect("activate", lambda *_: self.quit())
        self.add_action(quit_action)
        self.set_accels_for_action("app.quit", ["<Control>q"])

    def do_activate(self) -> None:
        window = self.get_active_window()
        if window is None:
            from .window import MangoDisplayWindow
            window = MangoDisplayWindow(self)
        window.present()


def main() -> None:
    level = logging.DEBUG if os.environ.get("MANGODISPLAY_DEBUG") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [mangodisplay] %(levelname)s %(name)s: %(message)s",
    )
    log.debug("Starting %s", APP_ID)
    sys.exit(MangoDisplayApp().run(sys.argv))
