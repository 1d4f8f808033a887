"""
Audio streaming endpoint:
- GET /stream/{song_id} (full body or a single byte range)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from music_library.api.deps import get_library
from music_library.api.library import LibraryService
from music_library.api.streaming import serve

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Streaming"])


@router.get(
    "/stream/{song_id}",
    summary="Stream a song",
    description=(
        "Streams the stored audio file. Supports a single `Range: bytes=start-end` "
        "request; only the first range of a multi-range header is served and "
        "suffix ranges are rejected with 416."
    ),
    operation_id="stream_song",
    response_class=Response,
    responses={
        200: {"content": {"audio/mpeg": {}}, "description": "Whole file"},
        206: {"content": {"audio/mpeg": {}}, "description": "Requested byte range"},
        404: {"description": "Song or file not found"},
        416: {"description": "Range not satisfiable"},
    },
)
def stream_song(song_id: int, request: Request, library: LibraryService = Depends(get_library)) -> Response:
    """Serve a song file by id, with explicit Range support."""
    song, resource = library.open_song(song_id)

    # Range header can be any casing depending on proxy; starlette headers are case-insensitive.
    range_header = request.headers.get("range")

    logger.info(
        "stream_song: song_id=%s file=%s size=%d mime=%s range=%s",
        song_id,
        resource.name,
        resource.total_size,
        song.mime_type,
        range_header,
    )
    return serve(resource, range_header, song.mime_type, log=logger)
