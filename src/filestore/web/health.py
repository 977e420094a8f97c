"""Health check routes for the filestore web server."""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


def create_ping_response(
    service: str,
    status: str = "ok",
) -> Dict[str, Any]:
    """Create a standard ping response.

    Example:
        >>> create_ping_response("filestore")
        {"status": "ok", "timestamp": "2025-01-01T12:00:00", "service": "filestore"}
    """
    return {
        "status": status,
        "timestamp": datetime.now().isoformat(),
        "service": service,
    }


def create_health_response(
    service: str,
    healthy: bool = True,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a standard health check response."""
    response = {
        "status": "healthy" if healthy else "unhealthy",
        "service": service,
    }

    if extra:
        response.update(extra)

    return response


def storage_health_check(base_dir: Path) -> Callable[[], bool]:
    """Health probe: the storage base directory exists and is writable."""

    def check() -> bool:
        return base_dir.is_dir() and os.access(base_dir, os.W_OK)

    return check


def create_health_routes(
    service: str,
    health_check: Optional[Callable[[], bool]] = None,
) -> List[Any]:
    """Create /ping and /health routes.

    Args:
        service: Service name for responses
        health_check: Optional callable that returns True if healthy

    Returns:
        List of Starlette Route objects
    """
    from starlette.responses import JSONResponse
    from starlette.routing import Route

    async def ping(request: Any) -> JSONResponse:
        return JSONResponse(create_ping_response(service))

    async def health(request: Any) -> JSONResponse:
        healthy = True
        if health_check is not None:
            try:
                healthy = health_check()
            except OSError:
                healthy = False

        response = create_health_response(service=service, healthy=healthy)
        return JSONResponse(response, status_code=200 if healthy else 503)

    return [
        Route("/ping", endpoint=ping, methods=["GET"]),
        Route("/health", endpoint=health, methods=["GET"]),
    ]
