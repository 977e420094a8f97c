from pathlib import Path

import pytest

from filestore.config import EnvLoader


def test_env_loader_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("FOO=file\nBAR=file\n")

    monkeypatch.setenv("BAR", "env")

    loader = EnvLoader(env_file)
    data = loader.load({"BAR": "override", "BAZ": "override"})

    assert data["FOO"] == "file"
    assert data["BAR"] == "override"
    assert data["BAZ"] == "override"


def test_os_environment_beats_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("FILESTORE_BASE_DIR=/from/file\n")
    monkeypatch.setenv("FILESTORE_BASE_DIR", "/from/env")

    data = EnvLoader(env_file).load()

    assert data["FILESTORE_BASE_DIR"] == "/from/env"


def test_missing_env_file_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ONLY_ENV", "yes")

    data = EnvLoader(tmp_path / "absent.env").load()

    assert data["ONLY_ENV"] == "yes"


def test_defaults_to_dotenv_in_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".env").write_text("FILESTORE_CWD_VALUE=here\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FILESTORE_CWD_VALUE", raising=False)

    data = EnvLoader().load()

    assert data["FILESTORE_CWD_VALUE"] == "here"


def test_overrides_are_stringified(tmp_path: Path) -> None:
    data = EnvLoader(tmp_path / "absent.env").load({"FILESTORE_PORT": 9000})  # type: ignore[dict-item]

    assert data["FILESTORE_PORT"] == "9000"


def test_loaded_file_recorded(tmp_path: Path) -> None:
    env_file = tmp_path / "settings.env"
    env_file.write_text("FILESTORE_MAX_UPLOAD_SIZE=10\n")
    loader = EnvLoader(env_file)

    assert loader.loaded_file is None
    loader.load()
    assert loader.loaded_file == env_file

    env_file.unlink()
    loader.load()
    assert loader.loaded_file is None


def test_valueless_keys_skipped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("FILESTORE_BARE\nFILESTORE_SET=1\n")
    monkeypatch.delenv("FILESTORE_BARE", raising=False)

    data = EnvLoader(env_file).load()

    assert "FILESTORE_BARE" not in data
    assert data["FILESTORE_SET"] == "1"


def test_home_is_expanded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / "filestore.env").write_text("FILESTORE_FROM_HOME=yes\n")

    loader = EnvLoader("~/filestore.env")

    assert loader.env_file == tmp_path / "filestore.env"
    assert loader.load()["FILESTORE_FROM_HOME"] == "yes"
