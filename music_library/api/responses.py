"""
Response helpers: JSON for API clients, HTML alert fragments for HTMX requests.

`register_exception_handlers()` maps domain errors onto these so routes can
simply raise.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from music_library.api.deps import get_templates, is_htmx
from music_library.api.errors import LibraryError, NotFoundError
from music_library.api.schemas import ActionResponse, ErrorResponse

logger = logging.getLogger(__name__)


def send_error(request: Request, message: str, status_code: int) -> Response:
    """Error body shaped for the caller: alert fragment for HTMX, JSON otherwise."""
    if is_htmx(request):
        alert_class = "alert-warning" if 400 <= status_code < 500 else "alert-error"
        return get_templates(request).TemplateResponse(
            request,
            "partials/alert.html",
            {"alert_class": alert_class, "message": message},
            status_code=status_code,
        )
    body = ErrorResponse(message=message, status=status_code)
    return JSONResponse(body.model_dump(), status_code=status_code)


def send_success(request: Request, message: str, record_id: Optional[int] = None) -> Response:
    if is_htmx(request):
        return get_templates(request).TemplateResponse(
            request,
            "partials/alert.html",
            {"alert_class": "alert-success", "message": message},
        )
    return JSONResponse(ActionResponse(message=message, id=record_id).model_dump())


async def _library_error_handler(request: Request, exc: LibraryError) -> Response:
    if isinstance(exc, NotFoundError):
        logger.info("request_not_found: path=%s msg=%s", request.url.path, exc)
    elif exc.status_code >= 500:
        logger.error("request_failed: path=%s exc=%s msg=%s", request.url.path, exc.__class__.__name__, exc)
    else:
        logger.info("request_rejected: path=%s msg=%s", request.url.path, exc)
    return send_error(request, str(exc), exc.status_code)


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> Response:
    logger.error("request_database_error: path=%s exc=%s", request.url.path, exc.__class__.__name__)
    return send_error(request, "Database connection/query failed.", 503)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LibraryError, _library_error_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
