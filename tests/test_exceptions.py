"""Tests for filestore.exceptions module.

Covers the structured base error and the storage error taxonomy that the
web layer maps onto HTTP status codes.
"""

import pytest

from filestore.exceptions import (
    AccessDeniedError,
    ConfigurationError,
    FilestoreError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    OperationCancelledError,
    PayloadTooLargeError,
    ResourceNotFoundError,
    SecurityError,
    StorageIOError,
    ValidationError,
)


class TestFilestoreError:
    """Tests for the FilestoreError base class."""

    def test_basic_creation(self):
        error = FilestoreError(code="TEST_ERROR", message="Something went wrong")

        assert error.code == "TEST_ERROR"
        assert error.message == "Something went wrong"
        assert error.details == {}

    def test_with_details(self):
        error = FilestoreError("TEST_ERROR", "Failed", {"path": "a/b"})

        assert error.details == {"path": "a/b"}

    def test_str_without_details(self):
        error = FilestoreError("TEST_ERROR", "Failed")

        assert str(error) == "TEST_ERROR: Failed"

    def test_str_with_details(self):
        error = FilestoreError("TEST_ERROR", "Failed", {"key": "value"})

        assert "TEST_ERROR: Failed" in str(error)
        assert "key" in str(error)

    def test_to_dict(self):
        error = FilestoreError("TEST_ERROR", "Failed", {"key": "value"})

        assert error.to_dict() == {
            "code": "TEST_ERROR",
            "message": "Failed",
            "details": {"key": "value"},
        }

    def test_can_be_raised_and_caught(self):
        with pytest.raises(FilestoreError) as exc_info:
            raise FilestoreError("RAISED", "Raised error")

        assert exc_info.value.code == "RAISED"


class TestStorageErrors:
    """Tests for the coded storage errors."""

    @pytest.mark.parametrize(
        "error_class, code",
        [
            (InvalidArgumentError, "INVALID_ARGUMENT"),
            (AccessDeniedError, "ACCESS_DENIED"),
            (NotFoundError, "NOT_FOUND"),
            (PayloadTooLargeError, "PAYLOAD_TOO_LARGE"),
            (InvalidOperationError, "INVALID_OPERATION"),
            (StorageIOError, "IO_FAILURE"),
            (OperationCancelledError, "CANCELLED"),
        ],
    )
    def test_default_codes(self, error_class, code):
        error = error_class("message")

        assert error.code == code
        assert error.message == "message"
        assert isinstance(error, FilestoreError)

    def test_message_and_details_positional(self):
        error = NotFoundError("Item not found", {"path": "x.txt"})

        assert error.details == {"path": "x.txt"}
        assert str(error) == "NOT_FOUND: Item not found (details: {'path': 'x.txt'})"

    def test_code_override(self):
        error = StorageIOError("Disk full", code="DISK_FULL")

        assert error.code == "DISK_FULL"


class TestExceptionHierarchy:
    """Tests for the exception class hierarchy."""

    def test_validation_family(self):
        assert issubclass(InvalidArgumentError, ValidationError)
        assert issubclass(PayloadTooLargeError, ValidationError)

    def test_access_denied_is_security_error(self):
        assert issubclass(AccessDeniedError, SecurityError)

    def test_not_found_is_resource_not_found(self):
        assert issubclass(NotFoundError, ResourceNotFoundError)

    def test_catch_base_catches_all(self):
        for error in (
            InvalidArgumentError("a"),
            AccessDeniedError("b"),
            StorageIOError("c"),
            ConfigurationError("INVALID_SETTING", "d"),
        ):
            with pytest.raises(FilestoreError):
                raise error

    def test_configuration_error_takes_code(self):
        error = ConfigurationError("INVALID_SETTING", "Bad value", {"key": "X"})

        assert error.code == "INVALID_SETTING"
        assert error.to_dict()["details"] == {"key": "X"}
