"""Storage module for filestore

Sandboxed, per-resource file storage with collision-safe naming and a
reversible trash.

Layout on disk:
    <base_dir>/<sanitized resource key>/...                  live entries
    <base_dir>/<sanitized resource key>/.trash/<ts>_<name>   trashed entries
"""

from .items import (
    CONTENT_TYPES,
    IconResolver,
    ItemKind,
    StorageItem,
    StorageListing,
    content_type_for,
)
from .naming import ensure_unique, sanitize_name
from .paths import PathResolver, ResourceRoot, normalize_path, sanitize_resource_key
from .service import (
    CreateResult,
    DownloadResult,
    StorageService,
    UploadFile,
    UploadResult,
)
from .trash import (
    TRASH_DIR_NAME,
    TrashName,
    decode_trash_name,
    encode_trash_name,
    is_trash_path,
)

__all__ = [
    "StorageService",
    "UploadFile",
    "UploadResult",
    "CreateResult",
    "DownloadResult",
    "ItemKind",
    "StorageItem",
    "StorageListing",
    "IconResolver",
    "CONTENT_TYPES",
    "content_type_for",
    "PathResolver",
    "ResourceRoot",
    "normalize_path",
    "sanitize_resource_key",
    "sanitize_name",
    "ensure_unique",
    "TRASH_DIR_NAME",
    "TrashName",
    "encode_trash_name",
    "decode_trash_name",
    "is_trash_path",
]
