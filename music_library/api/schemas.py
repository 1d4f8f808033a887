"""
Pydantic models (response shapes) for the JSON API.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from music_library.api.models import Album, Artist, Song


def image_url(image_path: str) -> Optional[str]:
    return f"/images/{image_path}" if image_path else None


def stream_url(song_id: int) -> str:
    return f"/stream/{song_id}"


class ArtistRef(BaseModel):
    id: int = Field(..., description="Artist id.")
    name: str = Field(..., description="Artist name.")


class ArtistResponse(BaseModel):
    id: int = Field(..., description="Artist id.")
    name: str = Field(..., description="Artist name.")
    description: str = Field("", description="Free-form description.")
    image_url: Optional[str] = Field(None, description="Cover image URL, if uploaded.")
    album_count: int = Field(0, description="Number of albums.")
    created_at: datetime = Field(..., description="Creation timestamp.")

    @classmethod
    def from_row(cls, artist: Artist) -> "ArtistResponse":
        return cls(
            id=artist.id,
            name=artist.name,
            description=artist.description,
            image_url=image_url(artist.image_path),
            album_count=len(artist.albums),
            created_at=artist.created_at,
        )


class AlbumResponse(BaseModel):
    id: int = Field(..., description="Album id.")
    name: str = Field(..., description="Album name.")
    description: str = Field("", description="Free-form description.")
    year: int = Field(..., description="Release year.")
    artist: ArtistRef
    image_url: Optional[str] = Field(None, description="Cover image URL, if uploaded.")
    song_count: int = Field(0, description="Number of songs.")

    @classmethod
    def from_row(cls, album: Album) -> "AlbumResponse":
        return cls(
            id=album.id,
            name=album.name,
            description=album.description,
            year=album.year,
            artist=ArtistRef(id=album.artist.id, name=album.artist.name),
            image_url=image_url(album.image_path),
            song_count=len(album.songs),
        )


class AlbumRef(BaseModel):
    id: int
    name: str
    year: int
    artist: ArtistRef


class SongInfoResponse(BaseModel):
    """Everything the player needs to show and stream one song."""

    id: int = Field(..., description="Song id.")
    name: str = Field(..., description="Song title.")
    filename: str = Field(..., description="Original upload filename.")
    mime_type: str = Field(..., description="Content type served when streaming.")
    file_size: int = Field(..., description="File size in bytes.")
    duration: Optional[int] = Field(None, description="Duration in seconds if known.")
    stream_url: str = Field(..., description="URL supporting HTTP Range requests.")
    album: AlbumRef

    @classmethod
    def from_row(cls, song: Song) -> "SongInfoResponse":
        album = song.album
        return cls(
            id=song.id,
            name=song.name,
            filename=song.filename,
            mime_type=song.mime_type,
            file_size=song.file_size,
            duration=song.duration,
            stream_url=stream_url(song.id),
            album=AlbumRef(
                id=album.id,
                name=album.name,
                year=album.year,
                artist=ArtistRef(id=album.artist.id, name=album.artist.name),
            ),
        )


class AlbumSongItem(BaseModel):
    id: int
    name: str
    album_id: int
    artist: str
    mime_type: str
    stream_url: str


class AlbumSongsResponse(BaseModel):
    album_id: int = Field(..., description="Album id.")
    album: str = Field(..., description="Album name.")
    artist: str = Field(..., description="Artist name.")
    songs: List[AlbumSongItem] = Field(default_factory=list, description="Songs in play order.")

    @classmethod
    def from_row(cls, album: Album) -> "AlbumSongsResponse":
        return cls(
            album_id=album.id,
            album=album.name,
            artist=album.artist.name,
            songs=[
                AlbumSongItem(
                    id=s.id,
                    name=s.name,
                    album_id=s.album_id,
                    artist=album.artist.name,
                    mime_type=s.mime_type,
                    stream_url=stream_url(s.id),
                )
                for s in album.songs
            ],
        )


class StatsResponse(BaseModel):
    albums: int = Field(..., description="Number of albums.")
    artists: int = Field(..., description="Number of artists.")
    songs: int = Field(..., description="Number of songs.")


class SearchResponse(BaseModel):
    query: str = Field(..., description="Trimmed search term.")
    albums: List[AlbumResponse] = Field(default_factory=list)
    artists: List[ArtistResponse] = Field(default_factory=list)


class ActionResponse(BaseModel):
    success: bool = Field(True, description="Whether the operation succeeded.")
    message: str = Field(..., description="Human-readable outcome.")
    id: Optional[int] = Field(None, description="Id of the created or changed record.")


class ErrorResponse(BaseModel):
    error: bool = Field(True)
    message: str
    status: int


class HealthResponse(BaseModel):
    status: str = Field("healthy")
