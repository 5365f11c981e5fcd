import asyncio
import contextlib
import logging

import gi

from fitness_map.config import APP_DIR, APP_ID, load_settings
from fitness_map.controller import AppController
from fitness_map.database import open_storage
from fitness_map.ports import Position
from fitness_map.ui_form import WorkoutFormUI
from fitness_map.ui_map import ShumateMapPort
from fitness_map.ui_workouts import WorkoutListUI

gi.require_versions({"Gtk": "4.0", "Adw": "1"})

from gi.repository import Adw, Gdk, Gtk  # noqa: E402

logger = logging.getLogger(__name__)

Adw.init()

_PROV = Gtk.CssProvider()
_PROV.load_from_data(b"""
.popup { padding: 4px 10px; border-radius: 6px; background-color: rgba(45,52,57,0.95); color: white; }
.popup.running      { border-left: 5px solid #00c46a; }
.popup.cycling      { border-left: 5px solid #ffb545; }
row.workout-running { border-left: 5px solid #00c46a; }
row.workout-cycling { border-left: 5px solid #ffb545; }
""")
Gtk.StyleContext.add_provider_for_display(
    Gdk.Display.get_default(), _PROV, Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
)


class FitnessMapUI(Adw.Application):
    def __init__(self, test_mode: bool = False):
        super().__init__(application_id=APP_ID)
        self.test_mode = test_mode

        self.window = None
        self.toast_overlay = None
        self.controller: AppController | None = None
        self._start_task: asyncio.Task | None = None

        # Set up application directory
        app_dir = APP_DIR.expanduser()
        app_dir.mkdir(parents=True, exist_ok=True)
        self.database = app_dir / "fitness_map.db"
        self.config_file = app_dir / "config.ini"

        self.settings = load_settings(
            self.config_file, default_database_url=f"sqlite:///{self.database}"
        )
        self.storage, self._storage_warning = open_storage(self.settings.database_url)

    def show_toast(self, message: str) -> None:
        logger.info(message)
        toast = Adw.Toast.new(message)
        self.toast_overlay.add_toast(toast)

    def do_activate(self):
        if not self.window:
            self._build_ui()
            if self._storage_warning:
                self.show_toast(self._storage_warning)
                self._storage_warning = None
            loop = asyncio.get_event_loop_policy().get_event_loop()
            self._start_task = loop.create_task(self.controller.start())

        self.window.present()

    def _build_ui(self):
        self.window = Adw.ApplicationWindow(application=self)
        self.window.connect("close-request", lambda *a: (self.quit(), False)[1])
        self.window.set_title("Fitness Map")
        self.window.set_default_size(1280, 800)
        self.window.set_resizable(True)
        self.toast_overlay = Adw.ToastOverlay()
        self.window.set_content(self.toast_overlay)

        toolbar_view = Adw.ToolbarView()
        self.toast_overlay.set_child(toolbar_view)

        header_bar = Adw.HeaderBar()
        header_bar.set_show_title(True)
        reset_button = Gtk.Button(label="Reset")
        reset_button.get_style_context().add_class("destructive-action")
        reset_button.set_tooltip_text("Delete all saved workouts")
        reset_button.connect("clicked", lambda *_: self.controller.reset())
        header_bar.pack_end(reset_button)
        toolbar_view.add_top_bar(header_bar)

        fixed = None
        if self.test_mode:
            fixed = Position(self.settings.home_latitude, self.settings.home_longitude)
        self.map_port = ShumateMapPort(self.settings, fixed_position=fixed)

        # The controller's handlers are bound lazily; it is created right below
        self.form_ui = WorkoutFormUI(
            on_submit=lambda: self.controller.on_form_submitted(),
            on_kind_changed=lambda kind: self.controller.on_kind_changed(kind),
        )
        self.list_ui = WorkoutListUI(
            on_activate=lambda workout_id: self.controller.on_workout_activated(workout_id),
        )

        sidebar = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=0)
        sidebar.set_size_request(360, -1)
        sidebar.append(self.form_ui.build())
        sidebar.append(self.list_ui.build())

        paned = Gtk.Paned(orientation=Gtk.Orientation.HORIZONTAL)
        paned.set_start_child(sidebar)
        paned.set_resize_start_child(False)
        paned.set_shrink_start_child(False)
        paned.set_end_child(self.map_port.widget)
        toolbar_view.set_content(paned)

        self.controller = AppController(
            map_port=self.map_port,
            list_view=self.list_ui,
            form_view=self.form_ui,
            storage=self.storage,
            settings=self.settings,
            notify=self.show_toast,
            restart=self.restart,
        )

    def restart(self) -> None:
        """Throw the window away and load again from (now empty) storage."""
        self.hold()
        try:
            if self._start_task and not self._start_task.done():
                self._start_task.cancel()
            old = self.window
            self.window = None
            self.controller = None
            if old:
                old.destroy()
            self.do_activate()
        finally:
            self.release()

    def do_shutdown(self):
        try:
            if self._start_task and not self._start_task.done():
                with contextlib.suppress(Exception):
                    self._start_task.cancel()
            self.storage.close()
        finally:
            Adw.Application.do_shutdown(self)
