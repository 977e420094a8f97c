"""Request logging middleware for the filestore web server."""

import time
from typing import Any, Callable, Optional


class RequestLoggingMiddleware:
    """ASGI middleware logging method, path, status and duration.

    Successful requests are logged at info, 4xx responses at warning, and
    5xx responses (or a request that never produced a response) at error.

    Example:
        from filestore.logger import get_logger

        app.add_middleware(RequestLoggingMiddleware, logger=get_logger("filestore-web"))
    """

    def __init__(self, app: Any, logger: Optional[Any] = None) -> None:
        """
        Args:
            app: The ASGI application to wrap
            logger: Logger with info/warning/error methods
        """
        self.app = app
        self.logger = logger

    def _log_method(self, status: int) -> Callable[..., None]:
        if status == 0 or status >= 500:
            return self.logger.error
        if status >= 400:
            return self.logger.warning
        return self.logger.info

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http" or not self.logger:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "/")
        started = time.monotonic()
        status = 0

        async def capture_status(message: dict) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            self._log_method(status)(
                f"{method} {path}",
                status=status,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
