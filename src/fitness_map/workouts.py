from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

RUNNING = "running"
CYCLING = "cycling"
KINDS = (RUNNING, CYCLING)

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

INVALID_INPUT_MSG = "Inputs must be positive numbers!"


class ValidationError(ValueError):
    """Raised when a workout can't be built from the given numbers."""

    def __init__(self, message: str = INVALID_INPUT_MSG, *, field: str | None = None):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class WorkoutRecord:
    id: str
    created_at: datetime
    kind: str
    coords: tuple[float, float]  # (lat, lng)
    distance: float  # km
    duration: float  # min

    # running
    cadence: float | None = None  # steps/min
    pace: float | None = None  # min/km

    # cycling
    elevation_gain: float | None = None  # m
    speed: float | None = None  # km/h

    description: str = ""

    @property
    def metric(self) -> float | None:
        """The derived value for this kind: pace for runs, speed for rides."""
        return self.pace if self.kind == RUNNING else self.speed


# ---------- Derived metrics ----------


def compute_pace(distance: float, duration: float) -> float:
    # min/km
    return duration / distance


def compute_speed(distance: float, duration: float) -> float:
    # km/h
    return distance / (duration / 60)


_DERIVED = {
    RUNNING: ("pace", compute_pace),
    CYCLING: ("speed", compute_speed),
}


def derived_metric(kind: str, distance: float, duration: float) -> tuple[str, float]:
    """Return (field_name, value) of the derived metric for ``kind``."""
    name, func = _DERIVED[kind]
    return name, func(distance, duration)


def describe(kind: str, created_at: datetime) -> str:
    return f"{kind[:1].upper()}{kind[1:]} on {MONTHS[created_at.month - 1]} {created_at.day}"


def make_id(created_at: datetime) -> str:
    # last 10 digits of the epoch milliseconds
    return str(int(created_at.timestamp() * 1000))[-10:]


# ---------- Validation ----------


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _require_finite(name: str, v) -> float:
    if not _is_number(v) or not math.isfinite(v):
        raise ValidationError(field=name)
    return float(v)


def _require_positive(name: str, v) -> float:
    v = _require_finite(name, v)
    if v <= 0:
        raise ValidationError(field=name)
    return v


def create_workout(
    kind: str,
    coords: tuple[float, float],
    distance: float,
    duration: float,
    *,
    cadence: float | None = None,
    elevation_gain: float | None = None,
    now: datetime | None = None,
) -> WorkoutRecord:
    """
    Validate the inputs and build an immutable workout.

    distance/duration must be finite and positive for both kinds. Runs also
    need a positive cadence; rides only need a finite elevation gain, which
    may be zero or negative.
    """
    if kind not in KINDS:
        raise ValidationError(f"Unknown workout kind: {kind!r}", field="kind")

    if coords is None or len(coords) != 2:
        raise ValidationError("A map location is required.", field="coords")
    lat = _require_finite("coords", coords[0])
    lng = _require_finite("coords", coords[1])

    distance = _require_positive("distance", distance)
    duration = _require_positive("duration", duration)

    extra: dict[str, float] = {}
    if kind == RUNNING:
        extra["cadence"] = _require_positive("cadence", cadence)
    else:
        extra["elevation_gain"] = _require_finite("elevation_gain", elevation_gain)

    created_at = now if now is not None else datetime.now().astimezone()
    metric_name, metric_value = derived_metric(kind, distance, duration)
    extra[metric_name] = metric_value

    return WorkoutRecord(
        id=make_id(created_at),
        created_at=created_at,
        kind=kind,
        coords=(lat, lng),
        distance=distance,
        duration=duration,
        description=describe(kind, created_at),
        **extra,
    )
