# tests/conftest.py
from __future__ import annotations

import pytest
from fitness_map.config import Settings
from fitness_map.controller import AppController
from fitness_map.ports import Position, PositionError, StorageError


class FakeMap:
    def __init__(self, position: Position | None = None, error: str | None = None):
        self.position = position
        self.error = error
        self.position_requests = 0
        self.initialized: tuple | None = None
        self.click_handler = None
        self.markers: dict[str, tuple] = {}
        self.marker_calls: list[str] = []
        self.pans: list[tuple] = []

    async def get_current_position(self) -> Position:
        self.position_requests += 1
        if self.error is not None:
            raise PositionError(self.error)
        return self.position

    def initialize(self, center, zoom):
        self.initialized = (center, zoom)

    def on_map_clicked(self, handler):
        self.click_handler = handler

    def place_marker(self, marker_id, coords, popup):
        self.marker_calls.append(marker_id)
        self.markers.setdefault(marker_id, (coords, popup))

    def pan_to(self, coords, zoom, animated=True):
        self.pans.append((coords, zoom, animated))

    # test helper
    def click(self, lat: float, lng: float) -> None:
        assert self.click_handler is not None, "map was never initialized"
        self.click_handler((lat, lng))


class FakeList:
    def __init__(self):
        self.rendered = []

    def render_workout(self, record):
        self.rendered.append(record)


class FakeFormView:
    def __init__(self):
        self.visible = False
        self.extra_field = None
        self.focused = 0
        self.values: dict[str, str] = {}
        self.kind = "running"

    def show(self):
        self.visible = True

    def hide(self):
        self.visible = False

    def clear_fields(self):
        self.values = {}

    def focus_distance(self):
        self.focused += 1

    def show_extra_field(self, field):
        self.extra_field = field

    def read_values(self):
        return {"kind": self.kind, **self.values}

    # test helper
    def fill(self, **values):
        self.values = {k: str(v) for k, v in values.items()}


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self.items: dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.fail_reads = False
        self.writes = 0

    def get_item(self, key):
        if self.fail_reads:
            raise StorageError("disk on fire")
        return self.items.get(key)

    def set_item(self, key, value):
        if self.fail_writes:
            raise StorageError("disk full")
        self.writes += 1
        self.items[key] = value

    def remove_item(self, key):
        self.items.pop(key, None)


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://")


@pytest.fixture
def fake_map() -> FakeMap:
    return FakeMap(position=Position(45.0, 7.0))


@pytest.fixture
def fake_list() -> FakeList:
    return FakeList()


@pytest.fixture
def form_view() -> FakeFormView:
    return FakeFormView()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def notices() -> list[str]:
    return []


@pytest.fixture
def restarts() -> list[int]:
    return []


@pytest.fixture
def make_app(fake_map, fake_list, form_view, storage, settings, notices, restarts):
    def _make(**overrides) -> AppController:
        kwargs = dict(
            map_port=fake_map,
            list_view=fake_list,
            form_view=form_view,
            storage=storage,
            settings=settings,
            notify=notices.append,
            restart=lambda: restarts.append(1),
        )
        kwargs.update(overrides)
        return AppController(**kwargs)

    return _make
