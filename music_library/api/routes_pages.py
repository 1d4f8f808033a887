"""
Server-rendered pages (Jinja2 templates).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from music_library.api.deps import get_library, get_templates
from music_library.api.library import LibraryService

router = APIRouter(tags=["Pages"], default_response_class=HTMLResponse, include_in_schema=False)


@router.get("/")
def index(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(request, "index.html", {"stats": library.stats()})


@router.get("/about")
def about(request: Request, templates: Jinja2Templates = Depends(get_templates)):
    return templates.TemplateResponse(request, "about.html", {})


@router.get("/library")
def library_page(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(
        request,
        "library.html",
        {"albums": library.list_albums(), "artists": library.list_artists()},
    )


@router.get("/artist/{artist_id}")
def artist_page(
    artist_id: int,
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(request, "artist.html", {"artist": library.get_artist(artist_id)})


@router.get("/album/{album_id}")
def album_page(
    album_id: int,
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(request, "album.html", {"album": library.get_album(album_id)})


@router.get("/create/artist")
def create_artist_page(request: Request, templates: Jinja2Templates = Depends(get_templates)):
    return templates.TemplateResponse(request, "create_artist.html", {})


@router.get("/create/album")
def create_album_page(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(request, "create_album.html", {"artists": library.list_artists()})


@router.get("/upload")
def upload_songs_page(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    library: LibraryService = Depends(get_library),
):
    return templates.TemplateResponse(request, "upload.html", {"albums": library.list_albums()})
