"""Base exception classes for filestore.

All filestore exceptions carry structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery
"""

from typing import Any, Dict, Optional


class FilestoreError(Exception):
    """Base exception for all filestore errors.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND")
        message: Human-readable error message
        details: Optional additional context for debugging/recovery
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and details keys.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FilestoreError):
    """Input failed validation before any filesystem mutation."""

    pass


class ResourceNotFoundError(FilestoreError):
    """A requested file, folder or trash entry doesn't exist."""

    pass


class SecurityError(FilestoreError):
    """Access outside the resource sandbox was attempted."""

    pass


class ConfigurationError(FilestoreError):
    """System configuration is invalid or incomplete."""

    pass


class _CodedError(FilestoreError):
    """Error with a fixed default code; message may be passed positionally."""

    default_code = "FILESTORE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(code=code or self.default_code, message=message, details=details)


class InvalidArgumentError(_CodedError, ValidationError):
    """Missing or empty required input (no files, empty path)."""

    default_code = "INVALID_ARGUMENT"


class PayloadTooLargeError(_CodedError, ValidationError):
    """A single uploaded file exceeds the configured size cap."""

    default_code = "PAYLOAD_TOO_LARGE"


class AccessDeniedError(_CodedError, SecurityError):
    """Path traversal attempt or a path escaping the resource root."""

    default_code = "ACCESS_DENIED"


class NotFoundError(_CodedError, ResourceNotFoundError):
    """Missing file, directory or trash target."""

    default_code = "NOT_FOUND"


class InvalidOperationError(_CodedError):
    """Operation is not legal for the given target (e.g. restoring the trash root)."""

    default_code = "INVALID_OPERATION"


class StorageIOError(_CodedError):
    """Underlying filesystem failure: disk full, permission denied, cross-device move."""

    default_code = "IO_FAILURE"


class OperationCancelledError(_CodedError):
    """A streaming operation was cancelled by the caller."""

    default_code = "CANCELLED"
