from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import gi

from fitness_map.config import APP_ID
from fitness_map.ports import Position, PositionError

gi.require_versions({"Gtk": "4.0", "Shumate": "1.0", "Geoclue": "2.0"})
from gi.repository import Geoclue, GLib, Gtk, Shumate  # noqa: E402

if TYPE_CHECKING:
    from fitness_map.config import Settings
    from fitness_map.ports import Coords, MarkerPopup

logger = logging.getLogger(__name__)


def shumate_url_template(tile_url: str) -> str:
    """Leaflet style {s}/{z}/{x}/{y} -> libshumate #Z#/#X#/#Y#."""
    return (
        tile_url.replace("{s}", "a")
        .replace("{z}", "#Z#")
        .replace("{x}", "#X#")
        .replace("{y}", "#Y#")
    )


class ShumateMapPort:
    """Map port backed by a Shumate.SimpleMap, position from GeoClue."""

    def __init__(self, settings: Settings, *, fixed_position: Position | None = None):
        self.settings = settings
        self.fixed_position = fixed_position

        self.widget = Shumate.SimpleMap()
        self.widget.set_vexpand(True)
        self.widget.set_hexpand(True)

        self._markers: dict[str, Shumate.Marker] = {}
        self._marker_layer: Shumate.MarkerLayer | None = None
        self._click_handler: Callable[[Coords], None] | None = None

    # ---- position ----
    async def get_current_position(self) -> Position:
        if self.fixed_position is not None:
            return self.fixed_position

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Position] = loop.create_future()

        def _on_ready(_source, result):
            if future.done():
                return
            try:
                simple = Geoclue.Simple.new_finish(result)
            except GLib.Error as e:
                future.set_exception(PositionError(e.message))
                return
            loc = simple.get_location()
            future.set_result(Position(loc.props.latitude, loc.props.longitude))

        Geoclue.Simple.new(APP_ID, Geoclue.AccuracyLevel.EXACT, None, _on_ready)
        return await future

    # ---- map ----
    def initialize(self, center: Coords, zoom: int) -> None:
        source = Shumate.RasterRenderer.new_full_from_url(
            "fitness-map-tiles",
            "Map tiles",
            self.settings.tile_attribution,
            "https://www.openstreetmap.org/copyright",
            0,
            19,
            256,
            Shumate.MapProjection.MERCATOR,
            shumate_url_template(self.settings.tile_url),
        )
        self.widget.set_map_source(source)

        viewport = self.widget.get_viewport()
        self._marker_layer = Shumate.MarkerLayer.new(viewport)
        self.widget.add_overlay_layer(self._marker_layer)

        viewport.set_zoom_level(zoom)
        self.widget.get_map().center_on(center[0], center[1])

        gesture = Gtk.GestureClick()
        gesture.connect("released", self._on_released)
        self.widget.get_map().add_controller(gesture)

    def on_map_clicked(self, handler: Callable[[Coords], None]) -> None:
        self._click_handler = handler

    def _on_released(self, _gesture, n_press: int, x: float, y: float) -> None:
        if n_press != 1 or not self._click_handler:
            return
        lat, lng = self.widget.get_viewport().widget_coords_to_location(
            self.widget.get_map(), x, y
        )
        self._click_handler((lat, lng))

    def place_marker(self, marker_id: str, coords: Coords, popup: MarkerPopup) -> None:
        if marker_id in self._markers or self._marker_layer is None:
            return

        bubble = Gtk.Label(label=popup.text)
        bubble.set_wrap(True)
        bubble.set_max_width_chars(popup.max_width // 8)
        bubble.set_size_request(popup.min_width, -1)
        bubble.add_css_class("popup")
        bubble.add_css_class(popup.css_class)

        pin = Gtk.Image.new_from_icon_name("mark-location-symbolic")
        pin.set_pixel_size(32)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=2)
        box.append(bubble)
        box.append(pin)

        marker = Shumate.Marker()
        marker.set_location(coords[0], coords[1])
        marker.set_child(box)
        self._marker_layer.add_marker(marker)
        self._markers[marker_id] = marker

    def pan_to(self, coords: Coords, zoom: int, animated: bool = True) -> None:
        map_ = self.widget.get_map()
        if animated:
            map_.go_to_full(coords[0], coords[1], zoom)
        else:
            self.widget.get_viewport().set_zoom_level(zoom)
            map_.center_on(coords[0], coords[1])
