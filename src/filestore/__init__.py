"""filestore - Sandboxed multi-tenant file storage.

This package provides:
- storage: Per-resource sandboxes with list/upload/download/create/delete,
  collision-safe naming and a reversible trash
- gallery: Read-only year/category photo gallery over a storage resource
- web: Starlette application exposing storage and gallery over HTTP
- config: Configuration management with typed settings
- logger: Structured logging with session tracking and JSON support
- exceptions: Exception classes with structured error info
"""

__version__ = "1.0.0"

# Re-export commonly used items for convenience
from filestore.logger import (
    Logger,
    StructuredLogger,
    get_logger,
    create_logger,
)

from filestore.config import (
    Settings,
    StorageSettings,
    IconSettings,
    ServerSettings,
    LogSettings,
    get_settings,
    reset_settings,
)

from filestore.exceptions import (
    FilestoreError,
    ValidationError,
    ResourceNotFoundError,
    SecurityError,
    ConfigurationError,
    InvalidArgumentError,
    AccessDeniedError,
    NotFoundError,
    PayloadTooLargeError,
    InvalidOperationError,
    StorageIOError,
    OperationCancelledError,
)

from filestore.storage import (
    StorageService,
    UploadFile,
    UploadResult,
    CreateResult,
    DownloadResult,
    ItemKind,
    StorageItem,
    StorageListing,
)

from filestore.gallery import (
    GalleryBrowser,
    GalleryCard,
    GalleryPhoto,
)

__all__ = [
    "__version__",
    # Logger
    "Logger",
    "StructuredLogger",
    "get_logger",
    "create_logger",
    # Config
    "Settings",
    "StorageSettings",
    "IconSettings",
    "ServerSettings",
    "LogSettings",
    "get_settings",
    "reset_settings",
    # Exceptions
    "FilestoreError",
    "ValidationError",
    "ResourceNotFoundError",
    "SecurityError",
    "ConfigurationError",
    "InvalidArgumentError",
    "AccessDeniedError",
    "NotFoundError",
    "PayloadTooLargeError",
    "InvalidOperationError",
    "StorageIOError",
    "OperationCancelledError",
    # Storage
    "StorageService",
    "UploadFile",
    "UploadResult",
    "CreateResult",
    "DownloadResult",
    "ItemKind",
    "StorageItem",
    "StorageListing",
    # Gallery
    "GalleryBrowser",
    "GalleryCard",
    "GalleryPhoto",
]
