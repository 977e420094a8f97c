"""HTTP routes for storage and gallery

Handlers translate requests into ``StorageService`` / ``GalleryBrowser``
calls. The service does blocking file I/O, so every call goes through
``run_in_threadpool``. Errors are not handled here; ``FilestoreError``
subclasses propagate to the handler registered by ``create_storage_app``.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

import anyio
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as FormFile
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from filestore.exceptions import FilestoreError, InvalidArgumentError, NotFoundError
from filestore.gallery import GalleryBrowser
from filestore.storage import StorageService, UploadFile

STORAGE_PREFIX = "/api/resources/{resource_key}/storage"
GALLERY_PREFIX = "/api/gallery"

# Seconds between client-disconnect checks during an upload
DISCONNECT_POLL_INTERVAL = 0.25

T = TypeVar("T")

# Status code per FilestoreError.code; anything unlisted is a 500
ERROR_STATUS_CODES: Dict[str, int] = {
    "INVALID_ARGUMENT": 400,
    "ACCESS_DENIED": 403,
    "NOT_FOUND": 404,
    "INVALID_OPERATION": 409,
    "PAYLOAD_TOO_LARGE": 413,
    "CANCELLED": 499,
    "IO_FAILURE": 500,
}


def status_for(error: FilestoreError) -> int:
    return ERROR_STATUS_CODES.get(error.code, 500)


async def filestore_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a FilestoreError as ``{"code", "message", "details"}``."""
    if not isinstance(exc, FilestoreError):
        raise exc
    return JSONResponse(exc.to_dict(), status_code=status_for(exc))


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidArgumentError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise InvalidArgumentError("Request body must be a JSON object")
    return body


def _int_param(request: Request, name: str, required: bool = False) -> Optional[int]:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        if required:
            raise InvalidArgumentError(f"Query parameter '{name}' is required")
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidArgumentError(
            f"Query parameter '{name}' must be an integer", {name: raw}
        ) from e


async def run_cancellable(request: Any, func: Callable[..., T], *args: Any) -> T:
    """Run ``func(*args, cancel_event=...)`` in the threadpool.

    The event is set as soon as the client disconnects, so a long upload
    stops and cleans up its partial file instead of finishing for nobody.
    """
    cancel_event = threading.Event()
    outcome: Dict[str, Any] = {}

    async def watch_disconnect() -> None:
        while not await request.is_disconnected():
            await anyio.sleep(DISCONNECT_POLL_INTERVAL)
        cancel_event.set()

    async with anyio.create_task_group() as tg:
        tg.start_soon(watch_disconnect)
        # errors are re-raised outside the group so they aren't wrapped in an ExceptionGroup
        try:
            outcome["result"] = await run_in_threadpool(func, *args, cancel_event=cancel_event)
        except Exception as e:
            outcome["error"] = e
        tg.cancel_scope.cancel()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def create_storage_routes(service: StorageService) -> List[Route]:
    """Routes under ``/api/resources/{resource_key}/storage``."""

    async def list_items(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        listing = await run_in_threadpool(service.list, key, request.query_params.get("path"))
        return JSONResponse(listing.to_dict())

    async def upload(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        path = request.query_params.get("path")
        form = await request.form()
        try:
            files = [
                UploadFile(filename=entry.filename or "", stream=entry.file, length=entry.size)
                for entry in form.getlist("files")
                if isinstance(entry, FormFile)
            ]
            result = await run_cancellable(request, service.upload, key, path, files)
        finally:
            await form.close()
        return JSONResponse(result.to_dict())

    async def download(request: Request) -> Response:
        key = request.path_params["resource_key"]
        path = request.query_params.get("path", "")
        result = await run_in_threadpool(service.download, key, path)
        if result is None:
            raise NotFoundError("File not found", {"resource_key": key, "path": path})

        headers = {
            "Content-Disposition": content_disposition(result.filename),
            "Content-Length": str(result.size),
        }
        return StreamingResponse(
            result.iter_chunks(), media_type=result.content_type, headers=headers
        )

    async def create_folder(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        body = await _json_body(request)
        result = await run_in_threadpool(
            service.create_folder, key, body.get("path"), body.get("name")
        )
        return JSONResponse(result.to_dict(), status_code=201)

    async def create_url(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        body = await _json_body(request)
        result = await run_in_threadpool(
            service.create_shortcut, key, body.get("path"), body.get("name"), body.get("url") or ""
        )
        return JSONResponse(result.to_dict(), status_code=201)

    async def delete(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        path = request.query_params.get("path", "")
        await run_in_threadpool(service.delete, key, path)
        return JSONResponse({"message": "Item deleted successfully", "path": path})

    async def move_to_trash(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        path = request.query_params.get("path", "")
        trash_path = await run_in_threadpool(service.move_to_trash, key, path)
        return JSONResponse({"message": "Item moved to trash", "path": trash_path})

    async def restore(request: Request) -> JSONResponse:
        key = request.path_params["resource_key"]
        path = request.query_params.get("path", "")
        restored = await run_in_threadpool(service.restore_from_trash, key, path)
        return JSONResponse({"message": "Item restored", "path": restored})

    return [
        Route(STORAGE_PREFIX, endpoint=list_items, methods=["GET"]),
        Route(STORAGE_PREFIX, endpoint=delete, methods=["DELETE"]),
        Route(f"{STORAGE_PREFIX}/upload", endpoint=upload, methods=["POST"]),
        Route(f"{STORAGE_PREFIX}/download", endpoint=download, methods=["GET"]),
        Route(f"{STORAGE_PREFIX}/folders", endpoint=create_folder, methods=["POST"]),
        Route(f"{STORAGE_PREFIX}/urls", endpoint=create_url, methods=["POST"]),
        Route(f"{STORAGE_PREFIX}/trash", endpoint=move_to_trash, methods=["POST"]),
        Route(f"{STORAGE_PREFIX}/restore", endpoint=restore, methods=["POST"]),
    ]


def create_gallery_routes(gallery: GalleryBrowser) -> List[Route]:
    """Read-only routes under ``/api/gallery``."""

    async def years(request: Request) -> JSONResponse:
        result = await run_in_threadpool(gallery.years)
        return JSONResponse({"years": result})

    async def photos(request: Request) -> JSONResponse:
        year = _int_param(request, "year")
        result = await run_in_threadpool(gallery.photos, year)
        return JSONResponse({"year": year, "photos": [p.to_dict() for p in result]})

    async def has_photos(request: Request) -> JSONResponse:
        year = _int_param(request, "year", required=True)
        result = await run_in_threadpool(gallery.has_photos, year)
        return JSONResponse({"year": year, "hasPhotos": result})

    async def years_with_photos(request: Request) -> JSONResponse:
        result = await run_in_threadpool(gallery.years_with_photos)
        return JSONResponse({"years": result})

    async def cards(request: Request) -> JSONResponse:
        year = _int_param(request, "year")
        result = await run_in_threadpool(gallery.cards, year)
        return JSONResponse({"year": year, "cards": [c.to_dict() for c in result]})

    async def card_photos(request: Request) -> JSONResponse:
        year = _int_param(request, "year", required=True)
        category = request.query_params.get("category", "").strip()
        if not category:
            raise InvalidArgumentError("Query parameter 'category' is required")
        result = await run_in_threadpool(gallery.card_photos, year, category)
        return JSONResponse(
            {"year": year, "category": category, "photos": [p.to_dict() for p in result]}
        )

    return [
        Route(f"{GALLERY_PREFIX}/years", endpoint=years, methods=["GET"]),
        Route(f"{GALLERY_PREFIX}/photos", endpoint=photos, methods=["GET"]),
        Route(f"{GALLERY_PREFIX}/has-photos", endpoint=has_photos, methods=["GET"]),
        Route(f"{GALLERY_PREFIX}/years-with-photos", endpoint=years_with_photos, methods=["GET"]),
        Route(f"{GALLERY_PREFIX}/cards", endpoint=cards, methods=["GET"]),
        Route(f"{GALLERY_PREFIX}/card-photos", endpoint=card_photos, methods=["GET"]),
    ]
