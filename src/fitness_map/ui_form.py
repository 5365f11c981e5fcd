from __future__ import annotations

from collections.abc import Callable

import gi

from fitness_map.workouts import KINDS

gi.require_versions({"Gtk": "4.0", "Adw": "1"})
from gi.repository import Adw, GLib, Gtk  # noqa: E402


class WorkoutFormUI:
    """
    GTK side of the entry form. Holds no state of its own; FormController
    decides when it is shown and which extra field is visible.
    """

    def __init__(
        self,
        on_submit: Callable[[], None],
        on_kind_changed: Callable[[str], None],
    ):
        self._on_submit = on_submit
        self._on_kind_changed = on_kind_changed

        self.revealer: Gtk.Revealer | None = None
        self.kind_row: Adw.ComboRow | None = None
        self.distance_row: Adw.EntryRow | None = None
        self.duration_row: Adw.EntryRow | None = None
        self.cadence_row: Adw.EntryRow | None = None
        self.elevation_row: Adw.EntryRow | None = None

    def build(self) -> Gtk.Widget:
        group = Adw.PreferencesGroup()
        group.set_title("New Workout")

        self.kind_row = Adw.ComboRow()
        self.kind_row.set_title("Type")
        self.kind_row.set_model(Gtk.StringList.new([k.capitalize() for k in KINDS]))
        self.kind_row.connect("notify::selected", self._on_kind_selected)
        group.add(self.kind_row)

        self.distance_row = self._entry("Distance (km)")
        self.duration_row = self._entry("Duration (min)")
        self.cadence_row = self._entry("Cadence (step/min)")
        self.elevation_row = self._entry("Elevation Gain (m)")
        self.elevation_row.set_visible(False)
        for row in (self.distance_row, self.duration_row, self.cadence_row, self.elevation_row):
            group.add(row)

        btn = Gtk.Button(label="Add Workout")
        btn.add_css_class("suggested-action")
        btn.set_halign(Gtk.Align.END)
        btn.set_margin_top(6)
        btn.connect("clicked", lambda *_: self._on_submit())

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=6)
        for m in ("top", "bottom", "start", "end"):
            getattr(box, f"set_margin_{m}")(12)
        box.append(group)
        box.append(btn)

        self.revealer = Gtk.Revealer()
        self.revealer.set_transition_type(Gtk.RevealerTransitionType.SLIDE_DOWN)
        self.revealer.set_reveal_child(False)
        self.revealer.set_child(box)
        return self.revealer

    def _entry(self, title: str) -> Adw.EntryRow:
        row = Adw.EntryRow()
        row.set_title(title)
        row.set_input_purpose(Gtk.InputPurpose.NUMBER)
        # Enter submits, like a web form
        row.connect("entry-activated", lambda *_: self._on_submit())
        return row

    def _on_kind_selected(self, row: Adw.ComboRow, _pspec) -> None:
        idx = row.get_selected()
        if 0 <= idx < len(KINDS):
            self._on_kind_changed(KINDS[idx])

    # ---- FormView ----
    def show(self) -> None:
        self.revealer.set_reveal_child(True)

    def hide(self) -> None:
        self.revealer.set_reveal_child(False)

    def clear_fields(self) -> None:
        for row in (self.distance_row, self.duration_row, self.cadence_row, self.elevation_row):
            row.set_text("")

    def focus_distance(self) -> None:
        # wait for the revealer to map the entry
        GLib.idle_add(lambda: (self.distance_row.grab_focus(), False)[1])

    def show_extra_field(self, field: str) -> None:
        self.cadence_row.set_visible(field == "cadence")
        self.elevation_row.set_visible(field == "elevation")

    def read_values(self) -> dict[str, str]:
        return {
            "kind": KINDS[self.kind_row.get_selected()],
            "distance": self.distance_row.get_text(),
            "duration": self.duration_row.get_text(),
            "cadence": self.cadence_row.get_text(),
            "elevation": self.elevation_row.get_text(),
        }
