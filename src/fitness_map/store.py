from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from typing import Any

from fitness_map.workouts import CYCLING, KINDS, RUNNING, WorkoutRecord

logger = logging.getLogger(__name__)

# Keys written by the browser build of the app
_LEGACY_KEYS = {"type": "kind", "date": "createdAt"}


class NotFound(LookupError):
    pass


class StorageCorrupt(ValueError):
    """A persisted snapshot (or one element of it) has the wrong shape."""


# ---------- Field helpers ----------


def _as_number(v: Any, name: str) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise StorageCorrupt(f"{name!r} is not a number: {v!r}")
    if not math.isfinite(v):
        raise StorageCorrupt(f"{name!r} is not finite: {v!r}")
    return float(v)


def _number(fields: dict, key: str) -> float:
    return _as_number(fields.get(key), key)


def _string(fields: dict, key: str) -> str:
    v = fields.get(key)
    if not isinstance(v, str):
        raise StorageCorrupt(f"{key!r} is not a string: {v!r}")
    return v


def _timestamp(v: Any) -> datetime:
    if isinstance(v, str):
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError as e:
            raise StorageCorrupt(f"bad createdAt: {v!r}") from e
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(v / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise StorageCorrupt(f"bad createdAt: {v!r}") from e
    raise StorageCorrupt(f"bad createdAt: {v!r}")


def record_to_fields(record: WorkoutRecord) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
        "coords": [record.coords[0], record.coords[1]],
        "distance": record.distance,
        "duration": record.duration,
        "kind": record.kind,
    }
    if record.kind == RUNNING:
        fields["cadence"] = record.cadence
        fields["pace"] = record.pace
    else:
        fields["elevationGain"] = record.elevation_gain
        fields["speed"] = record.speed
    fields["description"] = record.description
    return fields


def record_from_fields(raw: Any) -> WorkoutRecord:
    """Rebuild a record from its flat form. Derived values are taken as stored."""
    if not isinstance(raw, dict):
        raise StorageCorrupt(f"record is not an object: {raw!r}")
    fields = {_LEGACY_KEYS.get(k, k): v for k, v in raw.items()}

    kind = fields.get("kind")
    if kind not in KINDS:
        raise StorageCorrupt(f"unknown kind: {kind!r}")

    coords = fields.get("coords")
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        raise StorageCorrupt(f"bad coords: {coords!r}")
    lat = _as_number(coords[0], "coords")
    lng = _as_number(coords[1], "coords")

    payload: dict[str, float] = {}
    if kind == RUNNING:
        payload["cadence"] = _number(fields, "cadence")
        payload["pace"] = _number(fields, "pace")
    elif kind == CYCLING:
        payload["elevation_gain"] = _number(fields, "elevationGain")
        payload["speed"] = _number(fields, "speed")

    return WorkoutRecord(
        id=_string(fields, "id"),
        created_at=_timestamp(fields.get("createdAt")),
        kind=kind,
        coords=(lat, lng),
        distance=_number(fields, "distance"),
        duration=_number(fields, "duration"),
        description=_string(fields, "description"),
        **payload,
    )


# ---------- Store ----------


class WorkoutStore:
    """Ordered, append-only collection of workouts."""

    def __init__(self, records: Iterable[WorkoutRecord] = ()):
        self._records: list[WorkoutRecord] = list(records)

    def append(self, record: WorkoutRecord) -> None:
        self._records.append(record)

    def list(self) -> tuple[WorkoutRecord, ...]:
        return tuple(self._records)

    def find_by_id(self, workout_id: str) -> WorkoutRecord:
        for record in self._records:
            if record.id == workout_id:
                return record
        raise NotFound(workout_id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[WorkoutRecord]:
        return iter(tuple(self._records))

    # ---- snapshot ----
    def serialize(self) -> list[dict[str, Any]]:
        return [record_to_fields(r) for r in self._records]

    @classmethod
    def deserialize(cls, snapshot: Any) -> WorkoutStore:
        """
        Rebuild a store from a snapshot produced by serialize().

        Anything that isn't a list of well-formed records gives an empty
        store; this never raises.
        """
        if snapshot is None:
            return cls()
        try:
            if not isinstance(snapshot, list):
                raise StorageCorrupt(f"snapshot is not a list: {type(snapshot).__name__}")
            return cls(record_from_fields(item) for item in snapshot)
        except StorageCorrupt as e:
            logger.warning("Ignoring stored workouts: %s", e)
            return cls()

    def dumps(self) -> str:
        return json.dumps(self.serialize())

    @classmethod
    def loads(cls, text: str | None) -> WorkoutStore:
        if not text:
            return cls()
        try:
            snapshot = json.loads(text)
        except (ValueError, RecursionError) as e:
            logger.warning("Stored workouts are not valid JSON: %s", e)
            return cls()
        return cls.deserialize(snapshot)
