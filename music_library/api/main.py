"""
FastAPI application entrypoint for the music library service.

- Pages: /, /about, /library, /artist/{id}, /album/{id}, /create/artist, /create/album, /upload
- Streaming: GET /stream/{id} (HTTP Range support)
- JSON API: /api/...
- Health: GET /health

There is no authentication; the service is meant for a personal, self-hosted library.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from music_library.api.config import Settings, load_settings
from music_library.api.db import Database
from music_library.api.logging_config import configure_logging
from music_library.api.middleware import RequestContextMiddleware
from music_library.api.responses import register_exception_handlers
from music_library.api.routes_api import router as api_router
from music_library.api.routes_pages import router as pages_router
from music_library.api.routes_stream import router as stream_router
from music_library.api.schemas import HealthResponse, image_url
from music_library.api.storage import Storage

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Library", "description": "Create, list, search and delete artists, albums and songs."},
    {"name": "Streaming", "description": "Audio streaming with HTTP Range support."},
    {"name": "Health", "description": "Service health."},
]


def _lifespan(configure_logs: bool):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings: Settings = app.state.settings
        if configure_logs:
            configure_logging(settings.log_level, settings.log_format)

        for directory in (settings.upload_dir, settings.image_dir, settings.static_dir):
            directory.mkdir(parents=True, exist_ok=True)
        app.state.db.create_schema()

        logger.info(
            "startup: address=%s environment=%s upload_dir=%s image_dir=%s",
            settings.address,
            settings.environment,
            settings.upload_dir,
            settings.image_dir,
        )
        try:
            yield
        finally:
            app.state.db.dispose()
            logger.info("shutdown: complete")

    return lifespan


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, configure_logs: bool = True) -> FastAPI:
    """
    Build the application for `settings` (read from the environment when omitted).

    Raises:
        ConfigError: if the settings do not validate.
    """
    settings = settings or load_settings()
    settings.validate()

    app = FastAPI(
        title="Music Library API",
        description=(
            "Self-hosted music library.\n\n"
            "Authentication: none (public API)\n\n"
            "Streaming:\n"
            "- GET /stream/{song_id} supports single byte-range requests for seeking."
        ),
        version="1.0.0",
        openapi_tags=openapi_tags,
        debug=settings.debug,
        lifespan=_lifespan(configure_logs),
    )

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    templates.env.globals["image_url"] = image_url

    app.state.settings = settings
    app.state.db = Database(settings.database_url)
    app.state.storage = Storage(log=logging.getLogger("music_library.api.storage"))
    app.state.templates = templates

    app.add_middleware(RequestContextMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=list(settings.allowed_methods),
        allow_headers=list(settings.allowed_headers),
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length", "Link"],
        max_age=300,
    )

    register_exception_handlers(app)

    app.mount("/static", StaticFiles(directory=str(settings.static_dir), check_dir=False), name="static")
    app.mount("/images", StaticFiles(directory=str(settings.image_dir), check_dir=False), name="images")

    app.include_router(pages_router)
    app.include_router(stream_router)
    app.include_router(api_router)

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health check",
        description="Simple health check endpoint.",
        tags=["Health"],
    )
    def health_check() -> HealthResponse:
        """Return basic service health information."""
        return HealthResponse(status="healthy")

    return app


def run() -> None:
    """Console entrypoint: serve the app with uvicorn on HOST:PORT."""
    import uvicorn

    settings = load_settings()
    settings.validate()
    configure_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        "music_library.api.main:create_app",
        factory=True,
        host=settings.host,
        port=int(settings.port),
        reload=settings.debug and settings.is_development,
        log_config=None,
    )


if __name__ == "__main__":
    run()
