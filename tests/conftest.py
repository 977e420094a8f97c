"""Shared fixtures for filestore tests."""

import logging
from pathlib import Path

import pytest

from filestore.config import IconSettings, StorageSettings
from filestore.logger import create_logger
from filestore.storage import StorageService


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    return tmp_path / "Storage"


@pytest.fixture
def storage_settings(base_dir: Path) -> StorageSettings:
    return StorageSettings(base_dir=base_dir, max_upload_size=1024)


@pytest.fixture
def service(storage_settings: StorageSettings) -> StorageService:
    logger = create_logger(name="filestore-test", level=logging.DEBUG)
    return StorageService(storage_settings, IconSettings(), logger)
