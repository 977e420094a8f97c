"""Starlette application factory for filestore.

Provides factory functions for creating the storage/gallery HTTP
application with error mapping, request logging and CORS applied.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from filestore.config import Settings, get_settings
from filestore.exceptions import FilestoreError
from filestore.gallery import GalleryBrowser
from filestore.logger import Logger, create_logger
from filestore.storage import StorageService
from filestore.web.cors import CORSConfig, create_cors_middleware
from filestore.web.health import create_health_routes, storage_health_check
from filestore.web.middleware import RequestLoggingMiddleware
from filestore.web.routes import (
    create_gallery_routes,
    create_storage_routes,
    filestore_error_handler,
)

SERVICE_NAME = "filestore"


def create_starlette_app(
    routes: Optional[List[Any]] = None,
    lifespan: Optional[Callable] = None,
    cors_config: Optional[CORSConfig] = None,
    logger: Optional[Logger] = None,
    exception_handlers: Optional[Dict[Any, Callable]] = None,
    debug: bool = False,
) -> Any:
    """Create a Starlette application with common middleware.

    Args:
        routes: List of Route objects
        lifespan: Lifespan context manager for startup/shutdown
        cors_config: CORS configuration (default: permissive)
        logger: When given, requests are logged through RequestLoggingMiddleware
        exception_handlers: Mapping of exception class or status code to handler
        debug: Enable debug mode

    Returns:
        Starlette application wrapped in CORS middleware
    """
    from starlette.applications import Starlette

    app = Starlette(
        debug=debug,
        routes=routes or [],
        lifespan=lifespan,
        exception_handlers=exception_handlers,
    )

    if logger is not None:
        app.add_middleware(RequestLoggingMiddleware, logger=logger)  # type: ignore[arg-type]

    if cors_config is None:
        cors_config = CORSConfig.permissive()

    return create_cors_middleware(app, cors_config)


def create_storage_app(
    service: Optional[StorageService] = None,
    settings: Optional[Settings] = None,
    gallery: Optional[GalleryBrowser] = None,
    cors_config: Optional[CORSConfig] = None,
    debug: bool = False,
) -> Any:
    """Create the storage and gallery HTTP application.

    Args:
        service: Storage service (built from ``settings`` when omitted)
        settings: Settings (defaults to ``get_settings()``)
        gallery: Gallery browser (defaults to one over ``service``)
        cors_config: CORS configuration (defaults to ``CORSConfig.from_env``)
        debug: Enable debug mode

    Example:
        from filestore.web import create_storage_app

        app = create_storage_app()
    """
    if settings is None:
        settings = get_settings()
    if service is None:
        service = StorageService.from_settings(settings)
    if gallery is None:
        gallery = GalleryBrowser(service)
    if cors_config is None:
        cors_config = CORSConfig.from_env(settings.prefix)

    routes = (
        create_storage_routes(service)
        + create_gallery_routes(gallery)
        + create_health_routes(
            SERVICE_NAME, health_check=storage_health_check(service.settings.base_dir)
        )
    )

    return create_starlette_app(
        routes=routes,
        cors_config=cors_config,
        logger=service.logger,
        exception_handlers={FilestoreError: filestore_error_handler},
        debug=debug,
    )


def serve(settings: Optional[Settings] = None) -> None:
    """Run the application with uvicorn on the configured host and port.

    Requires the ``server`` extra (``pip install filestore[server]``).
    """
    import uvicorn

    if settings is None:
        settings = get_settings()
    settings.storage.ensure_directories()
    logger = create_logger(
        name=SERVICE_NAME,
        level=getattr(logging, settings.log.level, logging.INFO),
        json_format=settings.log.json_format,
    )
    service = StorageService.from_settings(settings, logger)
    logger.info("Starting filestore", host=settings.server.host, port=settings.server.port)
    app = create_storage_app(service=service, settings=settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log.level.lower(),
    )
