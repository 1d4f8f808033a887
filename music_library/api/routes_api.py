"""
JSON API under /api.

Mutations accept multipart forms (the upload pages post straight to them) and
answer with `{"success": true, "message": ...}`, or an alert fragment when the
request comes from HTMX.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import Response

from music_library.api.deps import get_library, get_templates, is_htmx
from music_library.api.errors import ValidationError
from music_library.api.library import LibraryService
from music_library.api.responses import send_success
from music_library.api.schemas import (
    AlbumResponse,
    AlbumSongsResponse,
    ArtistResponse,
    SearchResponse,
    SongInfoResponse,
    StatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Library"])


def _parse_int(value: Optional[str], what: str) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        raise ValidationError(f"Invalid {what}")


@router.post(
    "/create/artist",
    summary="Create an artist",
    description="Creates an artist from a multipart form with an optional cover image.",
    operation_id="create_artist",
)
def create_artist(
    request: Request,
    name: str = Form(..., description="Artist name (unique)."),
    desc: str = Form("", description="Free-form description."),
    file: Optional[UploadFile] = File(None, description="Cover image."),
    library: LibraryService = Depends(get_library),
) -> Response:
    image = file.file if file is not None and file.filename else None
    artist = library.create_artist(name, desc, image)
    return send_success(request, "Artist created successfully", artist.id)


@router.post(
    "/create/album",
    summary="Create an album",
    description="Creates an album for an existing artist, looked up by name.",
    operation_id="create_album",
)
def create_album(
    request: Request,
    name: str = Form(..., description="Album name."),
    year: str = Form(..., description="Release year."),
    artist: str = Form(..., description="Existing artist name."),
    desc: str = Form("", description="Free-form description."),
    file: Optional[UploadFile] = File(None, description="Cover image."),
    library: LibraryService = Depends(get_library),
) -> Response:
    year_value = _parse_int(year, "year")
    image = file.file if file is not None and file.filename else None
    album = library.create_album(name, desc, artist, year_value, image)
    return send_success(request, "Album created successfully", album.id)


@router.post(
    "/songs/upload",
    summary="Upload a song",
    description="Uploads an audio file (mp3, wav, flac, ogg, m4a, aac) into an album.",
    operation_id="upload_song",
)
def upload_song(
    request: Request,
    album_id: str = Form(..., description="Target album id."),
    song_title: Optional[str] = Form(None, description="Title. Defaults to the filename stem."),
    audio_file: UploadFile = File(..., description="Audio file (multipart/form-data)."),
    library: LibraryService = Depends(get_library),
) -> Response:
    album_id_value = _parse_int(album_id, "album ID")
    if not audio_file.filename:
        raise ValidationError("No audio file provided")
    song = library.add_song(song_title, audio_file.filename, album_id_value, audio_file.file)
    return send_success(request, "Song uploaded successfully", song.id)


@router.put(
    "/song/{song_id}/album",
    summary="Move a song to another album",
    operation_id="change_song_album",
)
def change_song_album(
    song_id: int,
    request: Request,
    album_id: str = Form(..., description="Target album id."),
    library: LibraryService = Depends(get_library),
) -> Response:
    song = library.change_album(song_id, _parse_int(album_id, "album ID"))
    return send_success(request, "Song moved successfully", song.id)


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Library statistics",
    operation_id="get_stats",
)
def get_stats(library: LibraryService = Depends(get_library)) -> StatsResponse:
    return StatsResponse(**library.stats())


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Search albums and artists",
    description="Case-insensitive substring search over names and descriptions.",
    operation_id="search_content",
)
def search_content(
    request: Request,
    q: str = Query("", description="Search term."),
    library: LibraryService = Depends(get_library),
):
    result = library.search(q)
    if is_htmx(request):
        return get_templates(request).TemplateResponse(
            request, "partials/search_results.html", {"result": result}
        )
    return SearchResponse(
        query=result.query,
        albums=[AlbumResponse.from_row(a) for a in result.albums],
        artists=[ArtistResponse.from_row(a) for a in result.artists],
    )


@router.api_route(
    "/delete/album/{album_id}",
    methods=["GET", "DELETE"],
    summary="Delete an album",
    description="Deletes the album, its songs and their stored files.",
    operation_id="delete_album",
)
def delete_album(album_id: int, request: Request, library: LibraryService = Depends(get_library)) -> Response:
    library.delete_album(album_id)
    return send_success(request, "Album deleted successfully", album_id)


@router.api_route(
    "/delete/artist/{artist_id}",
    methods=["GET", "DELETE"],
    summary="Delete an artist",
    description="Deletes the artist with all albums, songs and stored files.",
    operation_id="delete_artist",
)
def delete_artist(artist_id: int, request: Request, library: LibraryService = Depends(get_library)) -> Response:
    library.delete_artist(artist_id)
    return send_success(request, "Artist deleted successfully", artist_id)


@router.get(
    "/song/{song_id}",
    response_model=SongInfoResponse,
    summary="Song info for the player",
    operation_id="get_song_info",
)
def get_song_info(song_id: int, library: LibraryService = Depends(get_library)) -> SongInfoResponse:
    return SongInfoResponse.from_row(library.get_song(song_id))


@router.get(
    "/album/{album_id}/songs",
    response_model=AlbumSongsResponse,
    summary="Songs of an album in play order",
    operation_id="get_album_songs",
)
def get_album_songs(album_id: int, library: LibraryService = Depends(get_library)) -> AlbumSongsResponse:
    return AlbumSongsResponse.from_row(library.get_album(album_id))


@router.get(
    "/artists",
    response_model=List[ArtistResponse],
    summary="List artists",
    operation_id="list_artists",
)
def list_artists(library: LibraryService = Depends(get_library)) -> List[ArtistResponse]:
    return [ArtistResponse.from_row(a) for a in library.list_artists()]


@router.get(
    "/albums",
    response_model=List[AlbumResponse],
    summary="List albums",
    operation_id="list_albums",
)
def list_albums(library: LibraryService = Depends(get_library)) -> List[AlbumResponse]:
    return [AlbumResponse.from_row(a) for a in library.list_albums()]
