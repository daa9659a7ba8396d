"""Configuration."""

from .settings import (
    Settings,
    REFRESH_INTERVAL_MS,
    DUPLICATE_WINDOW_MS,
    MAX_HISTORY,
    STORAGE_KEY,
    REQUEST_TIMEOUT,
)

__all__ = [
    "Settings",
    "REFRESH_INTERVAL_MS",
    "DUPLICATE_WINDOW_MS",
    "MAX_HISTORY",
    "STORAGE_KEY",
    "REQUEST_TIMEOUT",
]
