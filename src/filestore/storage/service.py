"""Resource-scoped file storage service

Every public operation normalizes the client path first (so validation and
traversal errors are raised before anything touches the disk), then
resolves the resource root, creating it if absent, then acts.

Concurrency: no lock serializes a resource root. Creating operations
claim their final name with an exclusive create and retry on collision.
Trash and restore moves pick a free destination first and then rename, so
two concurrent moves to the same destination name can still race; the
rename itself is atomic on a single volume.
"""

import os
import shutil
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from filestore.config.settings import IconSettings, Settings, StorageSettings
from filestore.exceptions import (
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    OperationCancelledError,
    PayloadTooLargeError,
    StorageIOError,
)
from filestore.logger import Logger, get_logger
from filestore.storage.items import (
    SHORTCUT_EXTENSION,
    IconResolver,
    StorageItem,
    StorageListing,
    content_type_for,
    project_directory,
    project_file,
    project_folder,
)
from filestore.storage.naming import (
    DEFAULT_ITEM_NAME,
    create_unique_directory,
    create_unique_file,
    ensure_unique,
    sanitize_name,
)
from filestore.storage.paths import (
    PathResolver,
    ResourceRoot,
    combine_relative,
    normalize_path,
    parent_and_name,
)
from filestore.storage.trash import (
    TRASH_DIR_NAME,
    decode_trash_name,
    encode_trash_name,
    is_trash_path,
)

DEFAULT_FOLDER_NAME = "New Folder"
DEFAULT_SHORTCUT_NAME = "New URL"

# Names new entries may never take at the resource root
ROOT_RESERVED_NAMES = frozenset({TRASH_DIR_NAME})

UPLOAD_MESSAGE = "Files uploaded successfully"
FOLDER_MESSAGE = "Folder created successfully"
SHORTCUT_MESSAGE = "URL created successfully"


def reserved_names(relative: str) -> FrozenSet[str]:
    return ROOT_RESERVED_NAMES if not relative else frozenset()


@dataclass
class UploadFile:
    """One file handed over by the upload transport.

    Attributes:
        filename: Client-supplied name (sanitized before use)
        stream: Readable binary stream with the payload
        length: Declared size in bytes, or None when unknown
    """

    filename: str
    stream: BinaryIO
    length: Optional[int] = None


@dataclass(frozen=True)
class UploadResult:
    message: str
    items: List[StorageItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"message": self.message, "items": [i.to_dict() for i in self.items]}


@dataclass(frozen=True)
class CreateResult:
    message: str
    item: StorageItem

    def to_dict(self) -> dict:
        return {"message": self.message, "item": self.item.to_dict()}


@dataclass
class DownloadResult:
    """Open read-only stream for a stored file; the caller must close it."""

    stream: BinaryIO
    content_type: str
    filename: str
    size: int

    def iter_chunks(self, chunk_size: int = 81920) -> Iterator[bytes]:
        """Yield the file in chunks and close the stream afterwards."""
        with self.stream:
            while True:
                chunk = self.stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "DownloadResult":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class StorageService:
    """List, upload, download, create, delete, trash and restore entries
    inside per-resource sandboxes under ``StorageSettings.base_dir``.
    """

    COPY_BUFFER_SIZE = 81920

    def __init__(
        self,
        storage: StorageSettings,
        icons: Optional[IconSettings] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Args:
            storage: Base directory and upload cap
            icons: Icon lookup tables (defaults to the built-in tables)
            logger: Logger instance (defaults to get_logger("filestore"))
        """
        self.settings = storage
        self.resolver = PathResolver(storage.base_dir)
        self.icons = IconResolver(icons or IconSettings())
        self.logger = logger or get_logger("filestore")

    @classmethod
    def from_settings(cls, settings: Settings, logger: Optional[Logger] = None) -> "StorageService":
        return cls(settings.storage, settings.icons, logger)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _io_errors(self, operation: str, **details: Any) -> Iterator[None]:
        """Translate OSError into StorageIOError after logging it."""
        try:
            yield
        except OSError as e:
            self.logger.error(f"{operation} failed", error=str(e), **details)
            raise StorageIOError(
                f"{operation} failed: {e.strerror or e}",
                {**details, "errno": e.errno},
            ) from e

    def _locate(self, resource_key: str, relative: str) -> Tuple[ResourceRoot, Path]:
        root = self.resolver.resolve_root(resource_key)
        return root, self.resolver.absolute(root, relative)

    def _copy_stream(
        self,
        source: BinaryIO,
        target: BinaryIO,
        filename: str,
        cancel_event: Optional[threading.Event],
    ) -> int:
        limit = self.settings.max_upload_size
        written = 0
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError(
                    "Upload was cancelled", {"filename": filename, "written": written}
                )
            chunk = source.read(self.COPY_BUFFER_SIZE)
            if not chunk:
                return written
            written += len(chunk)
            if written > limit:
                raise PayloadTooLargeError(
                    f"File {filename} exceeds the maximum allowed size",
                    {"filename": filename, "max_upload_size": limit},
                )
            target.write(chunk)

    def _trash_dir(self, root: ResourceRoot) -> Path:
        trash_dir = root.path / TRASH_DIR_NAME
        if os.path.lexists(trash_dir) and not trash_dir.is_dir():
            raise InvalidOperationError(
                "The trash folder is blocked by a file of the same name",
                {"resource_key": root.key, "path": TRASH_DIR_NAME},
            )
        return trash_dir

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Could not remove partial upload", path=str(path), error=str(e))

    # ------------------------------------------------------------------
    # listing
    # ------------------------------------------------------------------

    def list(self, resource_key: str, path: Optional[str] = None) -> StorageListing:
        """List one directory of a resource.

        The trash area is created on demand; any other missing directory
        raises NotFoundError.
        """
        relative = normalize_path(path)
        root, absolute = self._locate(resource_key, relative)
        if is_trash_path(relative):
            self._trash_dir(root)

        with self._io_errors("List", resource_key=root.key, path=relative):
            if is_trash_path(relative):
                absolute.mkdir(parents=True, exist_ok=True)
            elif not absolute.is_dir():
                raise NotFoundError(
                    "Folder not found", {"resource_key": root.key, "path": relative}
                )
            return project_directory(absolute, relative, self.icons)

    # ------------------------------------------------------------------
    # upload / download
    # ------------------------------------------------------------------

    def upload(
        self,
        resource_key: str,
        path: Optional[str],
        files: Sequence[UploadFile],
        cancel_event: Optional[threading.Event] = None,
    ) -> UploadResult:
        """Store uploaded files in a directory, creating it if needed.

        Declared sizes are checked for every file before anything is
        written. Zero-length files are skipped. A file whose stream turns
        out larger than the cap, or whose copy is cancelled through
        ``cancel_event``, is deleted before the error propagates; files
        finished earlier in the same call are kept.

        Raises:
            InvalidArgumentError: If no files are given
            PayloadTooLargeError: If any single file exceeds the cap
            OperationCancelledError: If ``cancel_event`` is set mid-upload
        """
        if not files:
            raise InvalidArgumentError("No files were provided for upload")

        relative = normalize_path(path)
        limit = self.settings.max_upload_size
        for upload in files:
            if upload.length is not None and upload.length > limit:
                raise PayloadTooLargeError(
                    f"File {upload.filename} exceeds the maximum allowed size",
                    {"filename": upload.filename, "length": upload.length, "max_upload_size": limit},
                )

        root, directory = self._locate(resource_key, relative)
        items: List[StorageItem] = []

        with self._io_errors("Upload", resource_key=root.key, path=relative):
            directory.mkdir(parents=True, exist_ok=True)

            for upload in files:
                if upload.length == 0:
                    self.logger.debug("Skipping empty upload", filename=upload.filename)
                    continue
                if cancel_event is not None and cancel_event.is_set():
                    raise OperationCancelledError(
                        "Upload was cancelled", {"filename": upload.filename, "written": 0}
                    )

                handle, name = create_unique_file(
                    directory, sanitize_name(upload.filename), reserved_names(relative)
                )
                target = directory / name
                try:
                    with handle:
                        written = self._copy_stream(upload.stream, handle, upload.filename, cancel_event)
                except BaseException:
                    self._discard(target)
                    raise

                if written == 0:
                    self._discard(target)
                    self.logger.debug("Skipping empty upload", filename=upload.filename)
                    continue

                items.append(project_file(relative, name, self.icons))
                self.logger.info(
                    "File uploaded",
                    resource_key=root.key,
                    path=combine_relative(relative, name),
                    size=written,
                )

        return UploadResult(message=UPLOAD_MESSAGE, items=items)

    def download(self, resource_key: str, path: str) -> Optional[DownloadResult]:
        """Open a stored file for reading, or return None if it isn't a file."""
        relative = normalize_path(path, required=True)
        root, absolute = self._locate(resource_key, relative)

        if not absolute.is_file():
            return None

        with self._io_errors("Download", resource_key=root.key, path=relative):
            stream = open(absolute, "rb", buffering=self.COPY_BUFFER_SIZE)
            size = os.fstat(stream.fileno()).st_size

        return DownloadResult(
            stream=stream,
            content_type=content_type_for(absolute.name),
            filename=absolute.name,
            size=size,
        )

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create_folder(self, resource_key: str, path: Optional[str], name: Optional[str]) -> CreateResult:
        relative = normalize_path(path)
        root, directory = self._locate(resource_key, relative)
        safe_name = sanitize_name(name or "", default=DEFAULT_FOLDER_NAME)

        with self._io_errors("Create folder", resource_key=root.key, path=relative):
            directory.mkdir(parents=True, exist_ok=True)
            created = create_unique_directory(directory, safe_name, reserved_names(relative))

        item = project_folder(relative, created, self.icons)
        self.logger.info("Folder created", resource_key=root.key, path=item.relative_path)
        return CreateResult(message=FOLDER_MESSAGE, item=item)

    def create_shortcut(
        self,
        resource_key: str,
        path: Optional[str],
        name: Optional[str],
        url: str,
    ) -> CreateResult:
        """Write an ``[InternetShortcut]`` file pointing at ``url``.

        Raises:
            InvalidArgumentError: If the URL is empty or spans several lines
        """
        url = (url or "").strip()
        if not url:
            raise InvalidArgumentError("URL must not be empty")
        if "\r" in url or "\n" in url:
            raise InvalidArgumentError("URL must be a single line", {"url": url})

        relative = normalize_path(path)
        safe_name = sanitize_name(name or "", default=DEFAULT_SHORTCUT_NAME)
        if not safe_name.lower().endswith(SHORTCUT_EXTENSION):
            safe_name += SHORTCUT_EXTENSION

        root, directory = self._locate(resource_key, relative)
        content = f"[InternetShortcut]\r\nURL={url}\r\n".encode("utf-8")

        with self._io_errors("Create shortcut", resource_key=root.key, path=relative):
            directory.mkdir(parents=True, exist_ok=True)
            handle, created = create_unique_file(directory, safe_name, reserved_names(relative))
            with handle:
                handle.write(content)

        item = project_file(relative, created, self.icons)
        self.logger.info("Shortcut created", resource_key=root.key, path=item.relative_path)
        return CreateResult(message=SHORTCUT_MESSAGE, item=item)

    # ------------------------------------------------------------------
    # delete / trash / restore
    # ------------------------------------------------------------------

    def delete(self, resource_key: str, path: str) -> None:
        """Permanently delete a file, or a directory with everything in it."""
        relative = normalize_path(path, required=True)
        root, absolute = self._locate(resource_key, relative)

        with self._io_errors("Delete", resource_key=root.key, path=relative):
            if absolute.is_dir() and not absolute.is_symlink():
                shutil.rmtree(absolute)
            elif os.path.lexists(absolute):
                absolute.unlink()
            else:
                raise NotFoundError(
                    "Item not found", {"resource_key": root.key, "path": relative}
                )

        self.logger.info("Item deleted", resource_key=root.key, path=relative)

    def move_to_trash(self, resource_key: str, path: str) -> str:
        """Move a file or folder into ``.trash`` under a timestamped name.

        Returns:
            Relative path of the new trash entry (``.trash/<stored name>``)

        Raises:
            NotFoundError: If the target doesn't exist
            InvalidOperationError: If the target is the trash or inside it
        """
        relative = normalize_path(path, required=True)
        if is_trash_path(relative):
            raise InvalidOperationError(
                "Items in the trash cannot be moved to the trash", {"path": relative}
            )

        root, absolute = self._locate(resource_key, relative)
        if not os.path.lexists(absolute):
            raise NotFoundError("Item not found", {"resource_key": root.key, "path": relative})

        trash_dir = self._trash_dir(root)
        item_name = absolute.name or DEFAULT_ITEM_NAME
        trashed_at = datetime.now(timezone.utc)

        with self._io_errors("Move to trash", resource_key=root.key, path=relative):
            trash_dir.mkdir(parents=True, exist_ok=True)

            counter = 0
            stored_name = encode_trash_name(item_name, trashed_at)
            while os.path.lexists(trash_dir / stored_name):
                counter += 1
                stored_name = encode_trash_name(item_name, trashed_at, counter)

            os.rename(absolute, trash_dir / stored_name)

        trash_path = combine_relative(TRASH_DIR_NAME, stored_name)
        self.logger.info(
            "Item moved to trash", resource_key=root.key, path=relative, trash_path=trash_path
        )
        return trash_path

    def restore_from_trash(self, resource_key: str, path: str) -> str:
        """Move a trash entry back to the resource root under its original name.

        A name colliding with a live entry gets `` (n)`` before the extension.

        Returns:
            Relative path of the restored entry

        Raises:
            InvalidOperationError: If the path is the trash itself or outside it
            NotFoundError: If the trash entry doesn't exist
            StorageIOError: If the move fails (logged, never swallowed)
        """
        relative = normalize_path(path, required=True)
        self.logger.info("Restoring from trash", resource_key=resource_key, path=relative)

        if relative == TRASH_DIR_NAME:
            self.logger.error("Refusing to restore the trash folder itself", path=relative)
            raise InvalidOperationError("The trash folder itself cannot be restored")
        if not is_trash_path(relative):
            self.logger.warning("Restore requested for an item outside the trash", path=relative)
            raise InvalidOperationError(
                "Only items in the trash can be restored", {"path": relative}
            )

        root, absolute = self._locate(resource_key, relative)
        if not os.path.lexists(absolute):
            self.logger.warning("Trash entry not found", resource_key=root.key, path=relative)
            raise NotFoundError("Item not found", {"resource_key": root.key, "path": relative})

        _parent, stored_name = parent_and_name(relative)
        decoded = decode_trash_name(stored_name)
        if not decoded.had_prefix:
            self.logger.warning("Trash entry has no timestamp prefix", name=stored_name)

        restored_name = ensure_unique(
            root.path, decoded.original_name or DEFAULT_ITEM_NAME, ROOT_RESERVED_NAMES
        )
        destination = root.path / restored_name

        try:
            os.rename(absolute, destination)
        except OSError as e:
            self.logger.error(
                "Failed to restore item",
                resource_key=root.key,
                source=str(absolute),
                destination=str(destination),
                error=str(e),
            )
            raise StorageIOError(
                f"Restore failed: {e.strerror or e}",
                {"resource_key": root.key, "path": relative, "errno": e.errno},
            ) from e

        self.logger.info(
            "Item restored", resource_key=root.key, path=relative, restored_path=restored_name
        )
        return restored_name
