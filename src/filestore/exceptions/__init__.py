"""Exceptions for filestore.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from filestore.exceptions import NotFoundError, AccessDeniedError

    try:
        service.delete("tenant", "missing.txt")
    except NotFoundError as e:
        return JSONResponse(e.to_dict(), status_code=404)
"""

from filestore.exceptions.base import (
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

__all__ = [
    # Base exceptions
    "FilestoreError",
    "ValidationError",
    "ResourceNotFoundError",
    "SecurityError",
    "ConfigurationError",
    # Storage taxonomy
    "InvalidArgumentError",
    "PayloadTooLargeError",
    "AccessDeniedError",
    "NotFoundError",
    "InvalidOperationError",
    "StorageIOError",
    "OperationCancelledError",
]
