"""Configuration module."""
from .settings import (
    Settings,
    get_settings,
    configure_logging,
    MARINE_FIELDS,
    REQUIRED_MARINE_FIELDS,
    WEATHER_FIELDS,
    SURF_SPOTS,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "MARINE_FIELDS",
    "REQUIRED_MARINE_FIELDS",
    "WEATHER_FIELDS",
    "SURF_SPOTS",
]
