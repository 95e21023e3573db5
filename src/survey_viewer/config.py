"""Environment-driven configuration for the survey viewer."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Configuration defaults
DEFAULT_IMAGE_BASE = "./images"
DEFAULT_CELL_RESOLUTION = 9          # H3 resolution (~175 m hexagon edge)
MIN_CELL_RESOLUTION = 0
MAX_CELL_RESOLUTION = 15             # Finest H3 resolution
DEFAULT_FETCH_TIMEOUT = 10.0         # Image fetch timeout (seconds)
DEFAULT_VIEWER_INIT_DELAY = 0.1      # Wait for viewer surface layout before init (seconds)
DEFAULT_MINIMAP_ZOOM = 15


@dataclass(frozen=True)
class ViewerConfig:
    """Runtime settings shared by the provider, controller and displays."""

    image_base: str = DEFAULT_IMAGE_BASE
    cell_resolution: int = DEFAULT_CELL_RESOLUTION
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    viewer_init_delay: float = DEFAULT_VIEWER_INIT_DELAY
    minimap_zoom: int = DEFAULT_MINIMAP_ZOOM


def _env_number(name: str, default, cast, minimum=None, maximum=None):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default

    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        logger.warning(
            f"Out-of-range value for {name}: {value} (allowed {minimum}-{maximum}), "
            f"using default {default}"
        )
        return default
    return value


def load_config() -> ViewerConfig:
    """
    Build a ViewerConfig from the environment.

    Reads a .env file if present, then the SURVEY_* variables:
    SURVEY_IMAGE_BASE, SURVEY_CELL_RESOLUTION, SURVEY_FETCH_TIMEOUT,
    SURVEY_VIEWER_INIT_DELAY and SURVEY_MINIMAP_ZOOM. Unset, empty, invalid or
    out-of-range values fall back to the module defaults.
    """
    load_dotenv()

    return ViewerConfig(
        image_base=(os.getenv("SURVEY_IMAGE_BASE") or DEFAULT_IMAGE_BASE).rstrip("/"),
        cell_resolution=_env_number(
            "SURVEY_CELL_RESOLUTION", DEFAULT_CELL_RESOLUTION, int,
            minimum=MIN_CELL_RESOLUTION, maximum=MAX_CELL_RESOLUTION,
        ),
        fetch_timeout=_env_number("SURVEY_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, float),
        viewer_init_delay=_env_number(
            "SURVEY_VIEWER_INIT_DELAY", DEFAULT_VIEWER_INIT_DELAY, float
        ),
        minimap_zoom=_env_number("SURVEY_MINIMAP_ZOOM", DEFAULT_MINIMAP_ZOOM, int),
    )
