import logging
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

APP_ID = "io.Luigi311.FitnessMap"
APP_DIR = Path("~/.local/share") / APP_ID

DEFAULT_ZOOM = 12
DEFAULT_TILE_URL = "https://{s}.tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
DEFAULT_ATTRIBUTION = "© OpenStreetMap contributors"
DEFAULT_STORAGE_KEY = "workouts"


@dataclass(frozen=True)
class Settings:
    database_url: str
    zoom_level: int = DEFAULT_ZOOM
    tile_url: str = DEFAULT_TILE_URL
    tile_attribution: str = DEFAULT_ATTRIBUTION
    storage_key: str = DEFAULT_STORAGE_KEY

    # Position used instead of geolocation in --test mode
    home_latitude: float = 51.505
    home_longitude: float = -0.09


def _getint(cfg: ConfigParser, section: str, option: str, fallback: int) -> int:
    try:
        return cfg.getint(section, option, fallback=fallback)
    except ValueError:
        logger.warning("Invalid %s.%s in config, using %s", section, option, fallback)
        return fallback


def _getfloat(cfg: ConfigParser, section: str, option: str, fallback: float) -> float:
    try:
        return cfg.getfloat(section, option, fallback=fallback)
    except ValueError:
        logger.warning("Invalid %s.%s in config, using %s", section, option, fallback)
        return fallback


def load_settings(config_file: Path, *, default_database_url: str) -> Settings:
    """Read config.ini, falling back to defaults for anything missing."""
    cfg = ConfigParser(interpolation=None)
    if config_file.exists():
        cfg.read(config_file, encoding="utf-8")

    return Settings(
        database_url=cfg.get("storage", "database_url", fallback=default_database_url),
        storage_key=cfg.get("storage", "key", fallback=DEFAULT_STORAGE_KEY),
        zoom_level=_getint(cfg, "map", "zoom_level", DEFAULT_ZOOM),
        tile_url=cfg.get("map", "tile_url", fallback=DEFAULT_TILE_URL),
        tile_attribution=cfg.get("map", "tile_attribution", fallback=DEFAULT_ATTRIBUTION),
        home_latitude=_getfloat(cfg, "map", "home_latitude", Settings.home_latitude),
        home_longitude=_getfloat(cfg, "map", "home_longitude", Settings.home_longitude),
    )


def save_settings(settings: Settings, config_file: Path) -> None:
    cfg = ConfigParser(interpolation=None)
    cfg["map"] = {
        "zoom_level": str(settings.zoom_level),
        "tile_url": settings.tile_url,
        "tile_attribution": settings.tile_attribution,
        "home_latitude": str(settings.home_latitude),
        "home_longitude": str(settings.home_longitude),
    }
    cfg["storage"] = {
        "key": settings.storage_key,
        "database_url": settings.database_url,
    }
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        cfg.write(f)
