from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from fitness_map.form import FormController
from fitness_map.formatting import marker_popup
from fitness_map.ports import PositionError, StorageError
from fitness_map.store import NotFound, WorkoutStore
from fitness_map.workouts import ValidationError, WorkoutRecord

if TYPE_CHECKING:
    from fitness_map.config import Settings
    from fitness_map.ports import Coords, FormView, MapPort, StoragePort, WorkoutListPort

logger = logging.getLogger(__name__)


class AppController:
    """
    Ties the workout store, the form and the map together.

    Every public ``on_*`` method is an event handler and runs to completion;
    the only await point is the position lookup in locate().
    """

    def __init__(
        self,
        *,
        map_port: MapPort,
        list_view: WorkoutListPort,
        form_view: FormView,
        storage: StoragePort,
        settings: Settings,
        notify: Callable[[str], None],
        restart: Callable[[], None],
    ):
        self.map = map_port
        self.list_view = list_view
        self.storage = storage
        self.settings = settings
        self.notify = notify
        self._restart = restart

        self.form = FormController(form_view)
        self.store = WorkoutStore()
        self.map_ready = False

    # ---- startup ----
    async def start(self) -> None:
        self.load()
        await self.locate()

    def load(self) -> None:
        """Restore persisted workouts and list them. Doesn't touch the map."""
        try:
            text = self.storage.get_item(self.settings.storage_key)
        except StorageError as e:
            logger.warning("Could not read stored workouts: %s", e)
            text = None

        self.store = WorkoutStore.loads(text)
        for record in self.store:
            self.list_view.render_workout(record)
        logger.info("Restored %d workouts", len(self.store))

    async def locate(self) -> None:
        try:
            position = await self.map.get_current_position()
        except PositionError as e:
            logger.warning("Position unavailable: %s", e)
            self.notify(str(e))
            return
        self._load_map(position.coords)

    def _load_map(self, center: Coords) -> None:
        self.map.initialize(center, self.settings.zoom_level)
        self.map.on_map_clicked(self.on_map_clicked)
        self.map_ready = True
        for record in self.store:
            self._render_marker(record)

    # ---- events ----
    def on_map_clicked(self, coords: Coords) -> None:
        self.form.open(coords)

    def on_kind_changed(self, kind: str) -> None:
        self.form.select_kind(kind)

    def on_form_submitted(self) -> WorkoutRecord | None:
        try:
            record = self.form.submit()
        except ValidationError as e:
            self.notify(str(e))
            return None
        if record is None:
            return None

        self.store.append(record)
        self._render_marker(record)
        self.list_view.render_workout(record)
        self._persist()
        return record

    def on_workout_activated(self, workout_id: str) -> None:
        try:
            record = self.store.find_by_id(workout_id)
        except NotFound:
            logger.debug("No workout with id %s", workout_id)
            return
        if not self.map_ready:
            return
        self.map.pan_to(record.coords, self.settings.zoom_level, animated=True)

    def reset(self) -> None:
        """Forget every stored workout and start over. Not undoable."""
        try:
            self.storage.remove_item(self.settings.storage_key)
        except StorageError as e:
            logger.error("Could not clear workouts: %s", e)
            self.notify("Could not clear saved workouts")
            return
        logger.info("Cleared stored workouts")
        self._restart()

    # ---- helpers ----
    def _render_marker(self, record: WorkoutRecord) -> None:
        if self.map_ready:
            self.map.place_marker(record.id, record.coords, marker_popup(record))

    def _persist(self) -> None:
        try:
            self.storage.set_item(self.settings.storage_key, self.store.dumps())
        except StorageError as e:
            # in-memory store stays authoritative for this session
            logger.error("Could not save workouts: %s", e)
