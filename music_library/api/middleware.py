"""
HTTP middleware: request ids, request logging and response hardening headers.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from music_library.api.config import Settings
from music_library.api.logging_config import set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, log the request line and outcome, add security headers."""

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        method = request.method
        path = request.url.path
        quiet = path.startswith(("/static/", "/images/"))

        if self.settings.debug:
            logger.debug("request_headers: method=%s path=%s headers=%s", method, path, dict(request.headers))

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed: method=%s path=%s duration_ms=%d",
                method,
                path,
                int((time.perf_counter() - start) * 1000),
            )
            raise

        if not quiet:
            logger.info(
                "request: method=%s path=%s status=%d duration_ms=%d range=%s",
                method,
                path,
                response.status_code,
                int((time.perf_counter() - start) * 1000),
                request.headers.get("range"),
            )

        headers = response.headers
        headers[REQUEST_ID_HEADER] = request_id
        headers["X-Content-Type-Options"] = "nosniff"
        headers["X-Frame-Options"] = "DENY"
        headers["X-XSS-Protection"] = "1; mode=block"
        if self.settings.is_production:
            headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        if self.settings.is_development:
            headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        return response
