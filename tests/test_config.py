"""Tests for filestore.config module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from filestore.config import (
    DEFAULT_MAX_UPLOAD_SIZE,
    IconSettings,
    LogSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)
from filestore.exceptions import ConfigurationError


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = StorageSettings()

        assert settings.base_dir == tmp_path / "Storage"
        assert settings.max_upload_size == DEFAULT_MAX_UPLOAD_SIZE == 1_610_612_736

    def test_string_base_dir_is_converted(self, tmp_path):
        settings = StorageSettings(base_dir=str(tmp_path / "data"))  # type: ignore[arg-type]

        assert isinstance(settings.base_dir, Path)
        assert settings.base_dir == tmp_path / "data"

    def test_relative_base_dir_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = StorageSettings(base_dir=Path("relative/store"))

        assert settings.base_dir.is_absolute()
        assert settings.base_dir == tmp_path / "relative" / "store"

    def test_non_positive_upload_size_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageSettings(base_dir=tmp_path, max_upload_size=0)

        assert exc_info.value.code == "INVALID_SETTING"

    def test_from_env(self, tmp_path):
        env = {
            "FILESTORE_BASE_DIR": str(tmp_path / "env-store"),
            "FILESTORE_MAX_UPLOAD_SIZE": "2048",
        }
        settings = StorageSettings.from_env(env=env)

        assert settings.base_dir == tmp_path / "env-store"
        assert settings.max_upload_size == 2048

    def test_from_env_custom_prefix(self, tmp_path):
        settings = StorageSettings.from_env(
            prefix="ACME", env={"ACME_BASE_DIR": str(tmp_path)}
        )

        assert settings.base_dir == tmp_path

    def test_from_env_invalid_integer(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageSettings.from_env(env={"FILESTORE_MAX_UPLOAD_SIZE": "lots"})

        assert exc_info.value.code == "INVALID_SETTING"
        assert exc_info.value.details["key"] == "FILESTORE_MAX_UPLOAD_SIZE"

    def test_ensure_directories(self, tmp_path):
        settings = StorageSettings(base_dir=tmp_path / "a" / "b")
        settings.ensure_directories()

        assert settings.base_dir.is_dir()


class TestIconSettings:
    """Tests for IconSettings."""

    def test_defaults(self):
        icons = IconSettings()

        assert icons.folder == "📁"
        assert icons.shortcut == "🔗"
        assert icons.default == "📄"
        assert ".pdf" in icons.extensions

    def test_extensions_are_read_only(self):
        icons = IconSettings()

        with pytest.raises(TypeError):
            icons.extensions[".new"] = "x"  # type: ignore[index]

    def test_frozen(self):
        icons = IconSettings()

        with pytest.raises(AttributeError):
            icons.folder = "x"  # type: ignore[misc]

    def test_extension_keys_normalized(self):
        icons = IconSettings(extensions={"PDF": "P", ".TXT": "T"})

        assert dict(icons.extensions) == {".pdf": "P", ".txt": "T"}

    def test_from_mapping_merges_extensions(self):
        icons = IconSettings.from_mapping(
            {"folder": "F", "url": "U", "extensions": {".md": "M", ".pdf": "P"}}
        )

        assert icons.folder == "F"
        assert icons.shortcut == "U"
        assert icons.default == "📄"
        assert icons.extensions[".md"] == "M"
        assert icons.extensions[".pdf"] == "P"
        assert ".txt" in icons.extensions

    def test_from_mapping_rejects_non_object_extensions(self):
        with pytest.raises(ConfigurationError):
            IconSettings.from_mapping({"extensions": ["pdf"]})

    def test_from_env_without_file(self):
        assert IconSettings.from_env(env={}) == IconSettings()

    def test_from_env_reads_json_file(self, tmp_path):
        icons_file = tmp_path / "icons.json"
        icons_file.write_text(json.dumps({"default": "D", "extensions": {"md": "M"}}))

        icons = IconSettings.from_env(env={"FILESTORE_ICONS_FILE": str(icons_file)})

        assert icons.default == "D"
        assert icons.extensions[".md"] == "M"

    def test_from_env_bad_json(self, tmp_path):
        icons_file = tmp_path / "icons.json"
        icons_file.write_text("{not json")

        with pytest.raises(ConfigurationError) as exc_info:
            IconSettings.from_env(env={"FILESTORE_ICONS_FILE": str(icons_file)})

        assert exc_info.value.code == "INVALID_ICONS"

    def test_from_env_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            IconSettings.from_env(env={"FILESTORE_ICONS_FILE": str(tmp_path / "none.json")})

    def test_from_env_json_array_rejected(self, tmp_path):
        icons_file = tmp_path / "icons.json"
        icons_file.write_text("[]")

        with pytest.raises(ConfigurationError):
            IconSettings.from_env(env={"FILESTORE_ICONS_FILE": str(icons_file)})


class TestServerAndLogSettings:
    """Tests for ServerSettings and LogSettings."""

    def test_server_defaults(self):
        settings = ServerSettings.from_env(env={})

        assert settings.host == "0.0.0.0"
        assert settings.port == 8000

    def test_server_from_env(self):
        settings = ServerSettings.from_env(env={"FILESTORE_HOST": "127.0.0.1", "FILESTORE_PORT": "9100"})

        assert settings.host == "127.0.0.1"
        assert settings.port == 9100

    def test_log_settings(self):
        settings = LogSettings.from_env(env={"FILESTORE_LOG_LEVEL": "debug", "FILESTORE_LOG_FORMAT": "JSON"})

        assert settings.level == "DEBUG"
        assert settings.json_format is True

    def test_log_settings_default_console(self):
        assert LogSettings.from_env(env={}).json_format is False


class TestSettings:
    """Tests for the aggregate Settings and the cached accessor."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_from_env_with_overrides(self, tmp_path):
        settings = Settings.from_env(
            env_file=tmp_path / "absent.env",
            overrides={"FILESTORE_BASE_DIR": str(tmp_path / "store"), "FILESTORE_PORT": "8123"},
        )

        assert settings.storage.base_dir == tmp_path / "store"
        assert settings.server.port == 8123
        assert settings.prefix == "FILESTORE"

    def test_from_env_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(f"FILESTORE_BASE_DIR={tmp_path / 'from-file'}\n")

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env(env_file=env_file)

        assert settings.storage.base_dir == tmp_path / "from-file"

    def test_resolve_defaults_creates_base_dir(self, tmp_path):
        settings = Settings(storage=StorageSettings(base_dir=tmp_path / "created"))
        settings.resolve_defaults()

        assert (tmp_path / "created").is_dir()

    def test_get_settings_is_cached(self, tmp_path):
        with patch.dict(os.environ, {"FILESTORE_BASE_DIR": str(tmp_path)}):
            first = get_settings()
            second = get_settings()

        assert first is second

    def test_get_settings_reload(self, tmp_path):
        with patch.dict(os.environ, {"FILESTORE_BASE_DIR": str(tmp_path / "one")}):
            first = get_settings()
        with patch.dict(os.environ, {"FILESTORE_BASE_DIR": str(tmp_path / "two")}):
            second = get_settings(reload=True)

        assert first is not second
        assert second.storage.base_dir == tmp_path / "two"

    def test_reset_settings_single_prefix(self, tmp_path):
        with patch.dict(os.environ, {"ACME_BASE_DIR": str(tmp_path)}):
            first = get_settings(prefix="ACME")
            reset_settings("ACME")
            second = get_settings(prefix="ACME")

        assert first is not second
