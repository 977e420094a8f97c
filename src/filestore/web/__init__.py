"""Web layer for filestore.

Starlette application factory, CORS configuration, health checks,
request logging and the storage/gallery HTTP routes.
"""

from filestore.web.app import (
    create_starlette_app,
    create_storage_app,
    serve,
)
from filestore.web.cors import (
    CORSConfig,
    create_cors_middleware,
    get_cors_origins,
)
from filestore.web.health import (
    create_health_response,
    create_health_routes,
    create_ping_response,
    storage_health_check,
)
from filestore.web.middleware import RequestLoggingMiddleware
from filestore.web.routes import (
    ERROR_STATUS_CODES,
    create_gallery_routes,
    create_storage_routes,
    filestore_error_handler,
)

__all__ = [
    # CORS
    "CORSConfig",
    "create_cors_middleware",
    "get_cors_origins",
    # Middleware
    "RequestLoggingMiddleware",
    # Health checks
    "create_health_routes",
    "create_ping_response",
    "create_health_response",
    "storage_health_check",
    # Routes
    "create_storage_routes",
    "create_gallery_routes",
    "filestore_error_handler",
    "ERROR_STATUS_CODES",
    # App factories
    "create_starlette_app",
    "create_storage_app",
    "serve",
]
