from __future__ import annotations

from dataclasses import dataclass

from fitness_map.ports import MarkerPopup
from fitness_map.workouts import RUNNING, WorkoutRecord

KIND_ICONS = {
    "running": "🏃‍♂️",
    "cycling": "🚴‍♀️",
}


@dataclass(frozen=True)
class Detail:
    icon: str
    value: str
    unit: str

    def __str__(self) -> str:
        return f"{self.icon} {self.value} {self.unit}"


def format_value(v: float | None) -> str:
    """Show measured values the way they were typed: 5 not 5.0."""
    if v is None:
        return "—"
    v = float(v)
    return str(int(v)) if v.is_integer() else str(v)


def popup_text(record: WorkoutRecord) -> str:
    return f"{KIND_ICONS.get(record.kind, '')} {record.description}"


def marker_popup(record: WorkoutRecord) -> MarkerPopup:
    return MarkerPopup(text=popup_text(record), css_class=record.kind)


def detail_items(record: WorkoutRecord) -> list[Detail]:
    items = [
        Detail(KIND_ICONS.get(record.kind, ""), format_value(record.distance), "KM"),
        Detail("⏱", format_value(record.duration), "MIN"),
    ]
    if record.kind == RUNNING:
        items.append(Detail("⚡️", f"{record.pace:.1f}", "MIN/KM"))
        items.append(Detail("🦶🏼", format_value(record.cadence), "SPM"))
    else:
        items.append(Detail("⚡️", f"{record.speed:.1f}", "KM/H"))
        items.append(Detail("⛰", format_value(record.elevation_gain), "M"))
    return items
