"""
ORM-backed catalog queries.

One `Repository` wraps one request-scoped `Session`; commit/rollback belongs
to the session owner (`Database.session()`). Lookups that miss raise the
matching `NotFoundError` subclass instead of returning None.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from music_library.api.errors import (
    AlbumNotFoundError,
    ArtistNotFoundError,
    SongNotFoundError,
    ValidationError,
)
from music_library.api.models import Album, Artist, Song

logger = logging.getLogger(__name__)


class Repository:
    def __init__(self, session: Session, log: Optional[logging.Logger] = None) -> None:
        self.session = session
        self._log = log or logger

    def _flush(self, what: str) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            self._log.warning("repository_integrity_error: entity=%s exc=%s", what, exc.orig)
            raise ValidationError(f"{what} conflicts with an existing record") from exc

    # Artists

    def create_artist(self, artist: Artist) -> Artist:
        self._log.info("repository_create_artist: name=%s", artist.name)
        self.session.add(artist)
        self._flush("Artist")
        self._log.debug("repository_artist_created: id=%s", artist.id)
        return artist

    def get_artist(self, artist_id: int) -> Artist:
        artist = self.session.get(Artist, artist_id)
        if artist is None:
            self._log.warning("repository_artist_not_found: id=%s", artist_id)
            raise ArtistNotFoundError()
        return artist

    def get_artist_by_name(self, name: str) -> Artist:
        artist = self.session.execute(select(Artist).where(Artist.name == name)).scalar_one_or_none()
        if artist is None:
            self._log.warning("repository_artist_not_found: name=%s", name)
            raise ArtistNotFoundError(f"Artist {name!r} not found")
        return artist

    def list_artists(self) -> List[Artist]:
        return list(self.session.execute(select(Artist).order_by(Artist.name)).scalars().all())

    def delete_artist(self, artist_id: int) -> Artist:
        artist = self.get_artist(artist_id)
        self._log.info("repository_delete_artist: id=%s", artist_id)
        self.session.delete(artist)
        self._flush("Artist")
        return artist

    # Albums

    def create_album(self, album: Album) -> Album:
        self._log.info("repository_create_album: name=%s artist_id=%s", album.name, album.artist_id)
        if self.session.get(Artist, album.artist_id) is None:
            self._log.warning("repository_album_artist_missing: artist_id=%s", album.artist_id)
            raise ArtistNotFoundError("Invalid artist ID for album")
        self.session.add(album)
        self._flush("Album")
        return album

    def get_album(self, album_id: int) -> Album:
        album = self.session.get(Album, album_id)
        if album is None:
            self._log.warning("repository_album_not_found: id=%s", album_id)
            raise AlbumNotFoundError()
        return album

    def list_albums(self) -> List[Album]:
        stmt = select(Album).order_by(Album.year.desc(), Album.name)
        return list(self.session.execute(stmt).scalars().all())

    def delete_album(self, album_id: int) -> Album:
        album = self.get_album(album_id)
        self._log.info("repository_delete_album: id=%s", album_id)
        self.session.delete(album)
        self._flush("Album")
        return album

    # Songs

    def create_song(self, song: Song) -> Song:
        self._log.info("repository_create_song: name=%s album_id=%s", song.name, song.album_id)
        if self.session.get(Album, song.album_id) is None:
            self._log.warning("repository_song_album_missing: album_id=%s", song.album_id)
            raise AlbumNotFoundError("Invalid album ID for song")
        self.session.add(song)
        self._flush("Song")
        return song

    def get_song(self, song_id: int) -> Song:
        song = self.session.get(Song, song_id)
        if song is None:
            self._log.warning("repository_song_not_found: id=%s", song_id)
            raise SongNotFoundError()
        return song

    def update_song(self, song: Song) -> Song:
        self._log.info("repository_update_song: id=%s", song.id)
        self._flush("Song")
        # album relationship is stale after an album_id change
        self.session.expire(song, ["album"])
        return song

    def counts(self) -> Dict[str, int]:
        """Row counts keyed by "albums", "artists", "songs"."""
        return {
            "albums": self.session.scalar(select(func.count()).select_from(Album)) or 0,
            "artists": self.session.scalar(select(func.count()).select_from(Artist)) or 0,
            "songs": self.session.scalar(select(func.count()).select_from(Song)) or 0,
        }
