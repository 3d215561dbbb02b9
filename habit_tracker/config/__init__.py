"""Configuration package."""

from habit_tracker.config.settings import (
    DEFAULT_MAX_TASKS,
    AppSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_MAX_TASKS",
    "AppSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
