"""Trash name encoding

A trashed entry lives at ``<root>/.trash/<yyyyMMdd_HHmmss>_<original name>``.
On collision inside the trash the counter goes before the extension while
the timestamp prefix is kept: ``<ts>_<base>_<n><ext>``.

The prefix is the only record of when an entry was trashed. Restoring
strips exactly one leading ``\\d{8}_\\d{6}_``; a name without that prefix is
restored unchanged. Names that went through the collision counter keep
the ``_<n>`` suffix after restore.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from filestore.storage.naming import split_name

TRASH_DIR_NAME = ".trash"
TRASH_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TRASH_PREFIX_PATTERN = re.compile(r"^(\d{8}_\d{6})_")


def is_trash_path(relative: str) -> bool:
    """True for the trash directory itself or anything under it."""
    return relative == TRASH_DIR_NAME or relative.startswith(TRASH_DIR_NAME + "/")


def encode_trash_name(name: str, when: datetime, counter: int = 0) -> str:
    """Stored trash name for ``name`` trashed at ``when``.

    Args:
        name: Original entry name
        when: Trash time (callers pass UTC)
        counter: Collision counter; 0 for the first attempt
    """
    timestamp = when.strftime(TRASH_TIMESTAMP_FORMAT)
    if counter <= 0:
        return f"{timestamp}_{name}"
    base, ext = split_name(name)
    return f"{timestamp}_{base}_{counter}{ext}"


@dataclass(frozen=True)
class TrashName:
    """Decoded trash entry name.

    Attributes:
        original_name: Name to restore under
        timestamp: Parsed trash time, or None when the prefix was absent
    """

    original_name: str
    timestamp: Optional[datetime] = None

    @property
    def had_prefix(self) -> bool:
        return self.timestamp is not None


def decode_trash_name(stored: str) -> TrashName:
    """Strip the timestamp prefix from a stored trash name."""
    match = TRASH_PREFIX_PATTERN.match(stored)
    if not match:
        return TrashName(original_name=stored)

    try:
        timestamp = datetime.strptime(match.group(1), TRASH_TIMESTAMP_FORMAT)
    except ValueError:
        # Digits match the grammar but not a calendar date; still strip them
        timestamp = datetime.min
    return TrashName(original_name=stored[match.end():], timestamp=timestamp)
