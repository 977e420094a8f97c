"""Tests for filestore.logger module."""

import json
import logging
import os
from unittest import mock

import pytest

from filestore.logger import (
    JsonFormatter,
    Logger,
    StructuredLogger,
    TextFormatter,
    create_logger,
    get_logger,
)


class TestLoggerInterface:
    """Tests for the Logger abstract interface."""

    def test_logger_is_abstract(self):
        """Test that Logger cannot be instantiated directly."""
        with pytest.raises(TypeError):
            Logger()  # type: ignore

    def test_logger_has_required_methods(self):
        for method in ("debug", "info", "warning", "error", "critical", "get_session_id"):
            assert hasattr(Logger, method)


class TestStructuredLogger:
    """Tests for the StructuredLogger implementation."""

    def test_creates_session_id(self):
        logger = StructuredLogger(name="test-structured")
        assert len(logger.get_session_id()) == 8

    def test_different_instances_have_different_session_ids(self):
        assert (
            StructuredLogger(name="test-a").get_session_id()
            != StructuredLogger(name="test-b").get_session_id()
        )

    def test_name_property(self):
        assert StructuredLogger(name="test-name").name == "test-name"

    def test_text_format(self, capsys):
        logger = StructuredLogger(name="test-text", json_format=False)
        logger.info("Folder created", path="docs/new")

        out = capsys.readouterr().out
        assert "INFO" in out
        assert "Folder created" in out
        assert "test-text" in out
        assert "path=docs/new" in out
        assert f"session:{logger.get_session_id()}" in out

    def test_json_format(self, capsys):
        logger = StructuredLogger(name="test-json", json_format=True)
        logger.info("File uploaded", resource_key="acme", size=12)

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["level"] == "INFO"
        assert entry["message"] == "File uploaded"
        assert entry["logger"] == "test-json"
        assert entry["session_id"] == logger.get_session_id()
        assert entry["resource_key"] == "acme"
        assert entry["size"] == 12

    def test_json_serializes_unknown_types(self, capsys, tmp_path):
        logger = StructuredLogger(name="test-json-path", json_format=True)
        logger.info("Path value", location=tmp_path)

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["location"] == str(tmp_path)

    def test_reserved_kwargs_are_prefixed(self, capsys):
        logger = StructuredLogger(name="test-reserved", json_format=True)
        logger.info("Test", name="should be prefixed", filename="a.txt")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["_name"] == "should be prefixed"
        assert entry["_filename"] == "a.txt"
        assert entry["logger"] == "test-reserved"

    def test_level_filtering(self, capsys):
        logger = StructuredLogger(name="test-level", level=logging.WARNING)
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_all_levels(self, capsys):
        logger = StructuredLogger(name="test-levels", level=logging.DEBUG)
        logger.debug("d")
        logger.info("i")
        logger.warning("w")
        logger.error("e")
        logger.critical("c")

        out = capsys.readouterr().out
        for level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            assert level in out

    def test_reinitialising_does_not_duplicate_output(self, capsys):
        StructuredLogger(name="test-dup")
        logger = StructuredLogger(name="test-dup")
        logger.info("once")

        assert capsys.readouterr().out.count("once") == 1

    def test_file_output(self, tmp_path):
        log_file = tmp_path / "filestore.log"
        logger = StructuredLogger(name="test-file", log_file=str(log_file))
        logger.info("File test message")

        for handler in logger._logger.handlers:
            handler.flush()

        assert "File test message" in log_file.read_text()

    def test_unwritable_log_file_falls_back_to_console(self, capsys, tmp_path):
        log_file = tmp_path / "missing-dir" / "filestore.log"
        logger = StructuredLogger(name="test-bad-file", log_file=str(log_file))
        logger.info("still logged")

        captured = capsys.readouterr()
        assert "Failed to setup log file" in captured.err
        assert "still logged" in captured.out


class TestFormatters:
    """Tests for the formatters used directly."""

    def _record(self, **extra):
        record = logging.LogRecord("fmt", logging.INFO, __file__, 1, "hello", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        data = json.loads(JsonFormatter().format(self._record(session_id="abc", count=3)))

        assert data["message"] == "hello"
        assert data["session_id"] == "abc"
        assert data["count"] == 3

    def test_text_formatter_appends_extras(self):
        text = TextFormatter("%(message)s").format(self._record(path="a/b"))

        assert text == "hello path=a/b"


class TestLoggerFactoryFunctions:
    """Tests for create_logger and get_logger."""

    def test_create_logger_returns_logger(self):
        assert isinstance(create_logger(name="test-factory"), Logger)

    def test_get_logger_returns_structured_logger(self):
        assert isinstance(get_logger("test-get"), StructuredLogger)

    def test_create_logger_respects_level(self, capsys):
        logger = create_logger(name="test-level-factory", level=logging.WARNING)
        logger.info("Should not appear")
        logger.warning("Should appear")

        out = capsys.readouterr().out
        assert "Should not appear" not in out
        assert "Should appear" in out

    def test_create_logger_reads_level_from_env(self, capsys):
        with mock.patch.dict(os.environ, {"FILESTORE_WEB_LOG_LEVEL": "WARNING"}):
            logger = create_logger(name="filestore-web")
        logger.info("Should not appear")

        assert "Should not appear" not in capsys.readouterr().out

    def test_create_logger_reads_json_from_env(self, capsys):
        with mock.patch.dict(os.environ, {"TEST_JSON_ENV_LOG_JSON": "true"}):
            logger = create_logger(name="test-json-env")
        logger.info("json please")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["message"] == "json please"

    def test_invalid_env_level_defaults_to_info(self, capsys):
        with mock.patch.dict(os.environ, {"TEST_BAD_LEVEL_LOG_LEVEL": "LOUD"}):
            logger = create_logger(name="test-bad-level")
        logger.debug("no debug")
        logger.info("info yes")

        out = capsys.readouterr().out
        assert "no debug" not in out
        assert "info yes" in out
