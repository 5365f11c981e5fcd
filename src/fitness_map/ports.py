"""
Boundaries between the app core and the outside world.

The controller only talks to these protocols; the GTK/libshumate/SQLite
implementations live in ui_map, ui_form, ui_workouts and database, and the
tests provide in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from fitness_map.workouts import WorkoutRecord

Coords = tuple[float, float]


class PositionError(Exception):
    """Geolocation was denied or is unavailable. str(e) is shown to the user."""


class StorageError(Exception):
    """The persistent medium couldn't be read or written."""


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float

    @property
    def coords(self) -> Coords:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class MarkerPopup:
    text: str
    css_class: str
    max_width: int = 250
    min_width: int = 200
    auto_close: bool = False
    close_on_click: bool = False


class MapPort(Protocol):
    async def get_current_position(self) -> Position:
        """One-shot lookup. Raises PositionError on failure."""
        ...

    def initialize(self, center: Coords, zoom: int) -> None: ...

    def on_map_clicked(self, handler: Callable[[Coords], None]) -> None: ...

    def place_marker(self, marker_id: str, coords: Coords, popup: MarkerPopup) -> None: ...

    def pan_to(self, coords: Coords, zoom: int, animated: bool = True) -> None: ...


class WorkoutListPort(Protocol):
    def render_workout(self, record: WorkoutRecord) -> None: ...


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self) -> None: ...

    def clear_fields(self) -> None: ...

    def focus_distance(self) -> None: ...

    def show_extra_field(self, field: str) -> None:
        """Show ``"cadence"`` or ``"elevation"`` and hide the other one."""
        ...

    def read_values(self) -> Mapping[str, str]:
        """Raw field text keyed by kind/distance/duration/cadence/elevation."""
        ...


class StoragePort(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...
