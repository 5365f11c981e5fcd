from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import gi

from fitness_map.formatting import detail_items

gi.require_versions({"Gtk": "4.0", "Adw": "1"})
from gi.repository import Gtk  # noqa: E402

if TYPE_CHECKING:
    from fitness_map.workouts import WorkoutRecord


class WorkoutListUI:
    def __init__(self, on_activate: Callable[[str], None]):
        self._on_activate = on_activate
        self._listbox: Gtk.ListBox | None = None
        self._placeholder: Gtk.Label | None = None

    def build(self) -> Gtk.Widget:
        scroller = Gtk.ScrolledWindow()
        scroller.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        scroller.set_vexpand(True)

        self._listbox = Gtk.ListBox()
        self._listbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self._listbox.set_activate_on_single_click(True)
        self._listbox.add_css_class("boxed-list")
        for m in ("top", "bottom", "start", "end"):
            getattr(self._listbox, f"set_margin_{m}")(12)
        self._listbox.connect("row-activated", self._on_row_activated)

        self._placeholder = Gtk.Label(label="Click on the map to log a workout.")
        self._placeholder.set_wrap(True)
        self._placeholder.add_css_class("dim-label")
        for m in ("top", "bottom", "start", "end"):
            getattr(self._placeholder, f"set_margin_{m}")(12)
        self._listbox.set_placeholder(self._placeholder)

        scroller.set_child(self._listbox)
        return scroller

    # ---- WorkoutListPort ----
    def render_workout(self, record: WorkoutRecord) -> None:
        row = self._make_row(record)
        setattr(row, "_workout_id", record.id)
        self._listbox.append(row)

    def _make_row(self, record: WorkoutRecord) -> Gtk.ListBoxRow:
        row = Gtk.ListBoxRow()
        row.add_css_class(f"workout-{record.kind}")

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=6)
        for m in ("top", "bottom", "start", "end"):
            getattr(box, f"set_margin_{m}")(8)

        title = Gtk.Label(label=record.description)
        title.add_css_class("title-4")
        title.set_xalign(0)
        box.append(title)

        flow = Gtk.FlowBox()
        flow.set_selection_mode(Gtk.SelectionMode.NONE)
        flow.set_max_children_per_line(4)
        flow.set_can_target(False)  # let clicks reach the row
        for detail in detail_items(record):
            lbl = Gtk.Label(label=str(detail))
            lbl.add_css_class("dim-label")
            child = Gtk.FlowBoxChild()
            child.set_child(lbl)
            flow.insert(child, -1)
        box.append(flow)

        row.set_child(box)
        return row

    def _on_row_activated(self, _listbox: Gtk.ListBox, row: Gtk.ListBoxRow) -> None:
        workout_id = getattr(row, "_workout_id", None)
        if not workout_id:
            return
        self._on_activate(workout_id)
