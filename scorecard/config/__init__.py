"""Config module - settings and constants."""

from scorecard.config.settings import Settings, load_settings
from scorecard.config.constants import (
    CATEGORY_NAMES,
    CONGRESS_GOV,
    GOVTRACK,
    PROMISE_TRACKER,
    DEFAULT_SOURCES,
)

__all__ = [
    "Settings",
    "load_settings",
    "CATEGORY_NAMES",
    "CONGRESS_GOV",
    "GOVTRACK",
    "PROMISE_TRACKER",
    "DEFAULT_SOURCES",
]
