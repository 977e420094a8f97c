"""Filename sanitization and collision-free naming

Names are made unique within a directory by appending `` (n)`` before the
extension: ``photo.jpg``, ``photo (1).jpg``, ``photo (2).jpg`` ...

``ensure_unique`` only checks; the ``create_unique_*`` helpers claim the
name atomically (exclusive create, retry with the next candidate on
``FileExistsError``) so two concurrent writers never end up with the same
entry.
"""

import os
import re
from itertools import count
from pathlib import Path
from typing import BinaryIO, Collection, Iterator, Tuple

DEFAULT_ITEM_NAME = "item"

# Illegal on at least one mainstream filesystem, plus control characters
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_name(name: str, default: str = DEFAULT_ITEM_NAME) -> str:
    """Replace characters that are illegal in a filename with ``_``.

    Blank results, and names made only of dots, are replaced by ``default``.
    """
    sanitized = _INVALID_NAME_CHARS.sub("_", name or "")
    if not sanitized.strip() or not sanitized.strip("."):
        return default
    return sanitized


def split_name(name: str) -> Tuple[str, str]:
    """Split ``name`` into base and extension (``.tar.gz`` keeps ``.gz`` only)."""
    return os.path.splitext(name)


def numbered_name(name: str, counter: int) -> str:
    base, ext = split_name(name)
    return f"{base} ({counter}){ext}"


def candidate_names(desired: str, reserved: Collection[str] = ()) -> Iterator[str]:
    """Yield ``desired`` then the numbered alternatives, skipping ``reserved``."""
    if desired not in reserved:
        yield desired
    for n in count(1):
        candidate = numbered_name(desired, n)
        if candidate not in reserved:
            yield candidate


def _taken(directory: Path, name: str) -> bool:
    # lexists so a dangling symlink still counts as taken
    return os.path.lexists(directory / name)


def ensure_unique(directory: Path, desired: str, reserved: Collection[str] = ()) -> str:
    """Return the first free candidate name in ``directory`` (check only)."""
    return next(c for c in candidate_names(desired, reserved) if not _taken(directory, c))


def create_unique_file(
    directory: Path, desired: str, reserved: Collection[str] = ()
) -> Tuple[BinaryIO, str]:
    """Exclusively create a new file named after ``desired``.

    Names in ``reserved`` are never used, even when free.

    Returns:
        Tuple of (binary write handle, final name). The caller closes the handle.

    Raises:
        OSError: On any failure other than a name collision
    """
    candidates = candidate_names(desired, reserved)
    while True:
        candidate = next(candidates)
        try:
            handle = open(directory / candidate, "xb")
        except FileExistsError:
            continue
        return handle, candidate


def create_unique_directory(directory: Path, desired: str, reserved: Collection[str] = ()) -> str:
    """Create a new subdirectory named after ``desired`` and return its name."""
    candidates = candidate_names(desired, reserved)
    while True:
        candidate = next(candidates)
        try:
            (directory / candidate).mkdir()
        except FileExistsError:
            continue
        return candidate
