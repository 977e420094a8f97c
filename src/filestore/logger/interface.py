"""
Logging contract for filestore components.

``StorageService``, ``GalleryBrowser`` and the web middleware only depend
on this interface, so tests can hand them a ``MagicMock`` and assert on
the calls.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Message plus structured fields.

    Fields are keyword arguments, e.g.
    ``logger.info("File uploaded", resource_key="acme", path="docs/a.txt", size=12)``.
    Implementations decide how they are rendered (``key=value`` or JSON).
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Skipped empty uploads and other routine detail."""

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Completed operations: uploads, creates, deletes, trash moves."""

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Rejected requests and recoverable oddities (e.g. unprefixed trash entries)."""

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Filesystem failures, logged before they are raised as StorageIOError."""

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        ...

    @abstractmethod
    def get_session_id(self) -> str:
        """Short identifier attached to every record from this instance."""
