"""Storage item projection

Projects directory entries into ``StorageItem`` values: kind, display
names, the full forward-slash path from the resource root, and an icon
token resolved from ``IconSettings``.
"""

import os
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from filestore.config.settings import (
    DEFAULT_FILE_ICON,
    DEFAULT_FOLDER_ICON,
    DEFAULT_SHORTCUT_ICON,
    IconSettings,
)
from filestore.storage.paths import combine_relative

SHORTCUT_EXTENSION = ".url"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        ".pdf": "application/pdf",
        ".txt": "text/plain",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".gif": "image/gif",
        ".zip": "application/zip",
        ".json": "application/json",
        ".xml": "application/xml",
        ".mp4": "video/mp4",
        ".mp3": "audio/mpeg",
        ".csv": "text/csv",
        ".html": "text/html",
        ".css": "text/css",
        ".js": "application/javascript",
    }
)


class ItemKind(IntEnum):
    """Kind of a storage entry; values are the wire codes."""

    FOLDER = 0
    FILE = 1
    SHORTCUT = 2


def extension_of(name: str) -> str:
    """Lowercased extension including the dot, or ``""``."""
    return os.path.splitext(name)[1].lower()


def is_shortcut(name: str) -> bool:
    return extension_of(name) == SHORTCUT_EXTENSION


def content_type_for(name: str) -> str:
    """MIME type from the static extension table."""
    return CONTENT_TYPES.get(extension_of(name), DEFAULT_CONTENT_TYPE)


@dataclass(frozen=True)
class StorageItem:
    """Projection of one directory entry.

    ``relative_path`` is the full path from the resource root and can be
    passed straight back as the ``path`` argument of list/download.
    """

    kind: ItemKind
    display_name: str
    display_name_without_extension: str
    relative_path: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": int(self.kind),
            "filename": self.display_name,
            "filenameWithoutExtension": self.display_name_without_extension,
            "path": self.relative_path,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class StorageListing:
    """Result of listing one directory: folders first, then files."""

    current_path: str
    items: List[StorageItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentPath": self.current_path,
            "items": [item.to_dict() for item in self.items],
        }


def _or_default(value: str, fallback: str) -> str:
    return value if value and value.strip() else fallback


class IconResolver:
    """Resolves icon tokens; blank configured tokens fall back to built-ins."""

    def __init__(self, icons: IconSettings):
        self._icons = icons

    @property
    def folder(self) -> str:
        return _or_default(self._icons.folder, DEFAULT_FOLDER_ICON)

    @property
    def shortcut(self) -> str:
        return _or_default(self._icons.shortcut, DEFAULT_SHORTCUT_ICON)

    @property
    def default(self) -> str:
        return _or_default(self._icons.default, DEFAULT_FILE_ICON)

    def for_file(self, name: str) -> str:
        ext = extension_of(name)
        if ext == SHORTCUT_EXTENSION:
            return self.shortcut
        if ext:
            icon = self._icons.extensions.get(ext)
            if icon:
                return icon
        return self.default


def project_folder(current_path: str, name: str, icons: IconResolver) -> StorageItem:
    return StorageItem(
        kind=ItemKind.FOLDER,
        display_name=name,
        display_name_without_extension=name,
        relative_path=combine_relative(current_path, name),
        icon=icons.folder,
    )


def project_file(current_path: str, name: str, icons: IconResolver) -> StorageItem:
    return StorageItem(
        kind=ItemKind.SHORTCUT if is_shortcut(name) else ItemKind.FILE,
        display_name=name,
        display_name_without_extension=os.path.splitext(name)[0],
        relative_path=combine_relative(current_path, name),
        icon=icons.for_file(name),
    )


def project_directory(directory: os.PathLike, current_path: str, icons: IconResolver) -> StorageListing:
    """Enumerate ``directory`` into a listing.

    Subdirectories then files, each ordered case-insensitively by name.
    Entries that are neither (sockets, broken links) are skipped.
    """
    folders: List[str] = []
    files: List[str] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir():
                folders.append(entry.name)
            elif entry.is_file():
                files.append(entry.name)

    items = [
        project_folder(current_path, name, icons)
        for name in sorted(folders, key=str.casefold)
    ]
    items.extend(
        project_file(current_path, name, icons)
        for name in sorted(files, key=str.casefold)
    )
    return StorageListing(current_path=current_path, items=items)
