"""Path resolution for resource-scoped storage

Turns an untrusted resource key and relative path into an absolute path
inside ``<base_dir>/<sanitized key>``. Traversal is rejected textually
before any filesystem access; the resolved absolute path is additionally
canonicalized and checked to stay under the resource root so a symlink
inside the root cannot lead outside of it.
"""

import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from filestore.exceptions import AccessDeniedError, InvalidArgumentError, StorageIOError

_RESOURCE_KEY_INVALID = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_resource_key(key: Optional[str]) -> str:
    """Replace every character outside ``[a-zA-Z0-9-_]`` with ``_``.

    A missing or blank key gets a generated ``resource_<hex>`` fallback, so
    two blank keys never share a root.
    """
    if key is None or not key.strip():
        return f"resource_{uuid.uuid4().hex}"
    return _RESOURCE_KEY_INVALID.sub("_", key)


def normalize_path(path: Optional[str], required: bool = False) -> str:
    """Normalize a client-supplied relative path.

    Trims whitespace, converts backslashes, strips leading/trailing slashes
    and collapses empty segments. The empty string denotes the resource root.

    Raises:
        InvalidArgumentError: If ``required`` and the path is empty, or the
            path contains a control character (NUL included)
        AccessDeniedError: If the path contains ``..`` anywhere
    """
    normalized = (path or "").replace("\\", "/").strip().strip("/")

    if ".." in normalized:
        raise AccessDeniedError("Invalid path", {"path": path})
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in normalized):
        raise InvalidArgumentError("Path must not contain control characters", {"path": path})

    relative = "/".join(segment for segment in normalized.split("/") if segment)
    if required and not relative:
        raise InvalidArgumentError("Path must not be empty")
    return relative


def to_absolute(root: Path, relative: str) -> Path:
    """Join a normalized relative path onto ``root`` using the host separator."""
    if not relative:
        return root
    return root / relative.replace("/", os.sep)


def combine_relative(current: str, child: str) -> str:
    """Compose a forward-slash path from the resource root."""
    if not current:
        return child
    return f"{current.rstrip('/')}/{child}"


def parent_and_name(relative: str) -> tuple[str, str]:
    """Split ``a/b/c.txt`` into ``("a/b", "c.txt")``."""
    head, _sep, tail = relative.rpartition("/")
    return head, tail


@dataclass(frozen=True)
class ResourceRoot:
    """Directory owned by one resource key.

    Attributes:
        path: Absolute directory of the resource
        key: Sanitized resource key (directory name)
    """

    path: Path
    key: str


class PathResolver:
    """Maps resource keys and relative paths onto ``base_dir``.

    Holds no per-key state; every call recomputes the root from the key.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir).absolute()

    def resolve_root(self, resource_key: Optional[str]) -> ResourceRoot:
        """Sanitize the key and create its directory if absent.

        Raises:
            StorageIOError: If the directory cannot be created
        """
        sanitized = sanitize_resource_key(resource_key)
        root = self.base_dir / sanitized
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(
                "Cannot create resource directory",
                {"resource_key": sanitized, "error": str(e)},
            ) from e
        return ResourceRoot(path=root, key=sanitized)

    def absolute(self, root: ResourceRoot, relative: str) -> Path:
        """Absolute path for a normalized relative path, confined to ``root``.

        Raises:
            AccessDeniedError: If the canonical path leaves the resource root
        """
        candidate = to_absolute(root.path, relative)
        canonical_root = root.path.resolve()
        canonical = candidate.resolve()
        if canonical != canonical_root and canonical_root not in canonical.parents:
            raise AccessDeniedError(
                "Path escapes the resource root",
                {"resource_key": root.key, "path": relative},
            )
        return candidate
