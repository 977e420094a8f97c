"""Configuration Module for filestore

Typed, dataclass-based settings with environment variable support.

Example:
    from filestore.config import Settings, get_settings

    settings = Settings.from_env(prefix="FILESTORE")
    settings = get_settings()  # cached per prefix
"""

from filestore.config.env_loader import EnvLoader
from filestore.config.settings import (
    DEFAULT_MAX_UPLOAD_SIZE,
    DEFAULT_PREFIX,
    IconSettings,
    LogSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "EnvLoader",
    "DEFAULT_PREFIX",
    "DEFAULT_MAX_UPLOAD_SIZE",
    # Dataclass settings
    "StorageSettings",
    "IconSettings",
    "ServerSettings",
    "LogSettings",
    "Settings",
    # Singleton
    "get_settings",
    "reset_settings",
]
