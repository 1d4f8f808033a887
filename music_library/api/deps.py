"""
FastAPI dependencies shared by the routers.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from music_library.api.config import Settings
from music_library.api.db import db_session_dep
from music_library.api.library import LibraryService
from music_library.api.repository import Repository
from music_library.api.storage import Storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


# PUBLIC_INTERFACE
def get_library(
    request: Request,
    db: Session = Depends(db_session_dep),
) -> LibraryService:
    """Request-scoped `LibraryService` bound to this request's DB session."""
    return LibraryService(
        Repository(db),
        get_storage(request),
        get_settings(request),
        log=logging.getLogger("music_library.api.library"),
    )


def is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request") == "true"
