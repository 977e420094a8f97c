"""Dataclass-based Settings for filestore

Provides typed configuration with environment variable support.
Every settings class reads ``{prefix}_*`` keys from an environment mapping
(``os.environ`` unless the caller passes one, usually from ``EnvLoader``).

Design principles:
- Single source of truth for storage location, upload cap and icon tables
- Environment variable overrides with sensible defaults
- Icon tables are immutable once loaded and injected into the service
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from filestore.config.env_loader import EnvLoader
from filestore.exceptions import ConfigurationError

DEFAULT_PREFIX = "FILESTORE"

# ~1.5 GiB
DEFAULT_MAX_UPLOAD_SIZE = 1_610_612_736

DEFAULT_FOLDER_ICON = "📁"
DEFAULT_SHORTCUT_ICON = "🔗"
DEFAULT_FILE_ICON = "📄"

DEFAULT_EXTENSION_ICONS: Dict[str, str] = {
    ".pdf": "📕",
    ".txt": "📝",
    ".doc": "📘",
    ".docx": "📘",
    ".xls": "📗",
    ".xlsx": "📗",
    ".csv": "📗",
    ".ppt": "📙",
    ".pptx": "📙",
    ".jpg": "🖼️",
    ".jpeg": "🖼️",
    ".png": "🖼️",
    ".gif": "🖼️",
    ".bmp": "🖼️",
    ".webp": "🖼️",
    ".svg": "🖼️",
    ".mp3": "🎵",
    ".mp4": "🎬",
    ".zip": "🗜️",
    ".json": "🧾",
    ".xml": "🧾",
}


def _env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def _int_value(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            "INVALID_SETTING",
            f"{key} must be an integer",
            {"key": key, "value": raw},
        )


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


@dataclass
class StorageSettings:
    """Storage location and upload limits

    Attributes:
        base_dir: Directory holding one subdirectory per resource key
        max_upload_size: Per-file upload cap in bytes
    """

    base_dir: Path = field(default_factory=lambda: Path.cwd() / "Storage")
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE

    def __post_init__(self):
        if isinstance(self.base_dir, str):
            self.base_dir = Path(self.base_dir)
        self.base_dir = self.base_dir.expanduser().absolute()

        if self.max_upload_size <= 0:
            raise ConfigurationError(
                "INVALID_SETTING",
                "max_upload_size must be positive",
                {"max_upload_size": self.max_upload_size},
            )

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env: Optional[Mapping[str, str]] = None,
    ) -> "StorageSettings":
        """Load storage settings from environment variables

        Environment variables:
            {prefix}_BASE_DIR: Storage base directory (default: ./Storage)
            {prefix}_MAX_UPLOAD_SIZE: Per-file cap in bytes
        """
        values = _env(env)
        base_dir = values.get(f"{prefix}_BASE_DIR", "").strip() or "Storage"
        return cls(
            base_dir=Path(base_dir),
            max_upload_size=_int_value(
                values, f"{prefix}_MAX_UPLOAD_SIZE", DEFAULT_MAX_UPLOAD_SIZE
            ),
        )

    def ensure_directories(self) -> None:
        """Create the base directory if it doesn't exist"""
        self.base_dir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class IconSettings:
    """Read-only icon lookup tables

    Attributes:
        folder: Icon token for folders
        shortcut: Icon token for ``.url`` shortcuts
        default: Icon token for files with no mapped extension
        extensions: Extension (lowercase, with dot) to icon token
    """

    folder: str = DEFAULT_FOLDER_ICON
    shortcut: str = DEFAULT_SHORTCUT_ICON
    default: str = DEFAULT_FILE_ICON
    extensions: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_EXTENSION_ICONS))
    )

    def __post_init__(self):
        normalized = {
            _normalize_extension(ext): icon for ext, icon in self.extensions.items()
        }
        object.__setattr__(self, "extensions", MappingProxyType(normalized))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "IconSettings":
        """Build from a JSON-style mapping.

        Keys: ``folder``, ``url`` (or ``shortcut``), ``default``, ``extensions``.
        Extension entries are merged over the built-in table.
        """
        extensions = dict(DEFAULT_EXTENSION_ICONS)
        custom = data.get("extensions") or {}
        if not isinstance(custom, Mapping):
            raise ConfigurationError(
                "INVALID_ICONS", "'extensions' must be an object", {"value": custom}
            )
        extensions.update({str(k): str(v) for k, v in custom.items()})

        return cls(
            folder=str(data.get("folder") or DEFAULT_FOLDER_ICON),
            shortcut=str(data.get("url") or data.get("shortcut") or DEFAULT_SHORTCUT_ICON),
            default=str(data.get("default") or DEFAULT_FILE_ICON),
            extensions=extensions,
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env: Optional[Mapping[str, str]] = None,
    ) -> "IconSettings":
        """Load icon tables, optionally from a JSON file

        Environment variables:
            {prefix}_ICONS_FILE: Path to a JSON file with icon overrides
        """
        icons_file = _env(env).get(f"{prefix}_ICONS_FILE", "").strip()
        if not icons_file:
            return cls()

        path = Path(icons_file)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                "INVALID_ICONS",
                f"Cannot load icon configuration from {path}",
                {"path": str(path), "error": str(e)},
            ) from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                "INVALID_ICONS", "Icon configuration must be a JSON object", {"path": str(path)}
            )
        return cls.from_mapping(data)


@dataclass
class ServerSettings:
    """Network server configuration"""

    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env: Optional[Mapping[str, str]] = None,
    ) -> "ServerSettings":
        """
        Environment variables:
            {prefix}_HOST: Server host
            {prefix}_PORT: Server port
        """
        values = _env(env)
        return cls(
            host=values.get(f"{prefix}_HOST", "0.0.0.0"),
            port=_int_value(values, f"{prefix}_PORT", 8000),
        )


@dataclass
class LogSettings:
    """Logging configuration

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (console or json)
    """

    level: str = "INFO"
    format: str = "console"

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env: Optional[Mapping[str, str]] = None,
    ) -> "LogSettings":
        values = _env(env)
        return cls(
            level=values.get(f"{prefix}_LOG_LEVEL", "INFO").upper(),
            format=values.get(f"{prefix}_LOG_FORMAT", "console").lower(),
        )

    @property
    def json_format(self) -> bool:
        return self.format == "json"


@dataclass
class Settings:
    """Complete application settings

    Attributes:
        storage: Storage location and limits
        icons: Icon lookup tables
        server: Network server settings
        log: Logging settings
        prefix: Environment variable prefix used
    """

    storage: StorageSettings = field(default_factory=StorageSettings)
    icons: IconSettings = field(default_factory=IconSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    log: LogSettings = field(default_factory=LogSettings)
    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env_file: Optional[Path | str] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """
        Load complete settings from .env, the OS environment and overrides

        Environment variables:
            {prefix}_BASE_DIR: Storage base directory
            {prefix}_MAX_UPLOAD_SIZE: Per-file upload cap in bytes
            {prefix}_ICONS_FILE: JSON icon overrides
            {prefix}_HOST / {prefix}_PORT: Server bind address
            {prefix}_LOG_LEVEL / {prefix}_LOG_FORMAT: Logging
        """
        env = EnvLoader(env_file).load(overrides)
        return cls(
            storage=StorageSettings.from_env(prefix, env),
            icons=IconSettings.from_env(prefix, env),
            server=ServerSettings.from_env(prefix, env),
            log=LogSettings.from_env(prefix, env),
            prefix=prefix,
        )

    def resolve_defaults(self) -> None:
        """Ensure the storage base directory exists"""
        self.storage.ensure_directories()


# Global settings storage per prefix
_global_settings: dict[str, Settings] = {}


def get_settings(
    prefix: str = DEFAULT_PREFIX,
    reload: bool = False,
    env_file: Optional[Path | str] = None,
) -> Settings:
    """
    Get or create settings instance for a given prefix

    Args:
        prefix: Environment variable prefix
        reload: If True, reload settings from environment
        env_file: Optional .env file to read first

    Returns:
        Settings instance for the given prefix
    """
    if prefix not in _global_settings or reload:
        settings = Settings.from_env(prefix=prefix, env_file=env_file)
        settings.resolve_defaults()
        _global_settings[prefix] = settings

    return _global_settings[prefix]


def reset_settings(prefix: Optional[str] = None) -> None:
    """Reset settings (primarily for testing)

    Args:
        prefix: Specific prefix to reset, or None to reset all
    """
    if prefix:
        _global_settings.pop(prefix, None)
    else:
        _global_settings.clear()
