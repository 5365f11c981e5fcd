from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from fitness_map.workouts import KINDS, RUNNING, WorkoutRecord, create_workout

if TYPE_CHECKING:
    from fitness_map.ports import Coords, FormView

logger = logging.getLogger(__name__)

HIDDEN = "hidden"
AWAITING_SUBMISSION = "awaiting_submission"

# extra field shown for each kind
EXTRA_FIELDS = {
    "running": "cadence",
    "cycling": "elevation",
}


def parse_number(raw) -> float:
    """
    Read a form field. Blank reads as 0 and anything unparsable as NaN, so
    the workout validation decides what is acceptable.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


class FormController:
    """
    Entry form lifecycle.

      HIDDEN --open(coords)--> AWAITING_SUBMISSION(coords)
      AWAITING_SUBMISSION --submit, valid--> HIDDEN (record returned)
      AWAITING_SUBMISSION --submit, invalid--> unchanged (ValidationError)
    """

    def __init__(self, view: FormView, kind: str = RUNNING):
        self.view = view
        self.kind = kind
        self.state = HIDDEN
        self.coords: Coords | None = None

    @property
    def extra_field(self) -> str:
        return EXTRA_FIELDS[self.kind]

    def open(self, coords: Coords) -> None:
        # A second click while open just moves the pending location
        self.coords = (float(coords[0]), float(coords[1]))
        self.state = AWAITING_SUBMISSION
        self.view.clear_fields()
        self.view.show_extra_field(self.extra_field)
        self.view.show()
        self.view.focus_distance()

    def select_kind(self, kind: str) -> None:
        if kind not in KINDS:
            raise ValueError(f"Unknown workout kind: {kind!r}")
        self.kind = kind
        self.view.show_extra_field(self.extra_field)

    def submit(self) -> WorkoutRecord | None:
        if self.state != AWAITING_SUBMISSION or self.coords is None:
            logger.debug("Ignoring submit while the form is hidden")
            return None

        values = self.view.read_values()
        kind = values.get("kind") or self.kind
        if kind != self.kind and kind in KINDS:
            self.select_kind(kind)

        extra = {}
        if kind == RUNNING:
            extra["cadence"] = parse_number(values.get("cadence"))
        else:
            extra["elevation_gain"] = parse_number(values.get("elevation"))

        # Raises ValidationError; state and field contents stay as they are
        record = create_workout(
            kind,
            self.coords,
            parse_number(values.get("distance")),
            parse_number(values.get("duration")),
            **extra,
        )

        self.close()
        return record

    def close(self) -> None:
        self.view.clear_fields()
        self.view.hide()
        self.state = HIDDEN
        self.coords = None

