"""
Library service: catalog operations that touch both the database and the disk.

Routes talk to `LibraryService` only. It resolves names to stored paths via
`naming`, persists rows through `Repository` and files through `Storage`,
and hands out `MediaResource` handles for streaming.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import BinaryIO, Dict, List, Optional, Tuple

from music_library.api import naming
from music_library.api.config import Settings
from music_library.api.errors import NotFoundError, StorageError, ValidationError
from music_library.api.models import Album, Artist, Song
from music_library.api.repository import Repository
from music_library.api.storage import Storage
from music_library.api.streaming import MediaResource

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    query: str
    albums: List[Album] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.albums or self.artists)


def _required(value: Optional[str], what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{what} is required")
    return value


class LibraryService:
    def __init__(
        self,
        repository: Repository,
        storage: Storage,
        settings: Settings,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.settings = settings
        self._log = log or logger

    def image_path(self, relative: str) -> Path:
        return self.settings.image_dir / relative

    def song_path(self, song: Song) -> Path:
        return naming.song_path(self.settings.upload_dir, song)

    def _discard(self, path: Path) -> None:
        """Best-effort removal of a file whose catalog row is gone."""
        try:
            self.storage.delete_file(path)
        except NotFoundError:
            self._log.info("library_file_already_gone: path=%s", path)

    # Artists

    def create_artist(self, name: str, description: str = "", image: Optional[BinaryIO] = None) -> Artist:
        name = _required(name, "Artist name")
        artist = Artist(name=name, description=(description or "").strip())
        if image is not None:
            artist.image_path = naming.artist_image_name(name)
        self.repository.create_artist(artist)
        if image is not None:
            self.storage.save_file(image, self.image_path(artist.image_path))
        self._log.info("library_artist_created: id=%s name=%s", artist.id, artist.name)
        return artist

    def get_artist(self, artist_id: int) -> Artist:
        return self.repository.get_artist(artist_id)

    def list_artists(self) -> List[Artist]:
        return self.repository.list_artists()

    def delete_artist(self, artist_id: int) -> None:
        artist = self.repository.get_artist(artist_id)
        files = [self.song_path(song) for album in artist.albums for song in album.songs]
        files += [self.image_path(album.image_path) for album in artist.albums if album.image_path]
        if artist.image_path:
            files.append(self.image_path(artist.image_path))

        self.repository.delete_artist(artist_id)
        for path in files:
            self._discard(path)
        self._log.info("library_artist_deleted: id=%s files=%d", artist_id, len(files))

    # Albums

    def create_album(
        self,
        name: str,
        description: str,
        artist_name: str,
        year: int,
        image: Optional[BinaryIO] = None,
    ) -> Album:
        name = _required(name, "Album name")
        artist = self.repository.get_artist_by_name(_required(artist_name, "Artist"))
        album = Album(name=name, description=(description or "").strip(), year=year, artist_id=artist.id)
        if image is not None:
            album.image_path = naming.album_image_name(name, artist.id)
        self.repository.create_album(album)
        if image is not None:
            self.storage.save_file(image, self.image_path(album.image_path))
        self._log.info("library_album_created: id=%s name=%s artist_id=%s", album.id, album.name, artist.id)
        return album

    def get_album(self, album_id: int) -> Album:
        return self.repository.get_album(album_id)

    def list_albums(self) -> List[Album]:
        return self.repository.list_albums()

    def delete_album(self, album_id: int) -> None:
        album = self.repository.get_album(album_id)
        files = [self.song_path(song) for song in album.songs]
        if album.image_path:
            files.append(self.image_path(album.image_path))

        self.repository.delete_album(album_id)
        for path in files:
            self._discard(path)
        self._log.info("library_album_deleted: id=%s files=%d", album_id, len(files))

    # Songs

    def add_song(self, name: Optional[str], filename: str, album_id: int, source: BinaryIO) -> Song:
        """
        Store an uploaded audio file and create its catalog row.

        The title defaults to the filename without extension.

        Raises:
            ValidationError: unsupported format, or a song with the same name already in the album.
            PayloadTooLargeError: upload exceeds the configured limit.
            AlbumNotFoundError: no album with `album_id`.
        """
        filename = PurePath(_required(filename, "Audio file name")).name
        if not naming.is_supported_audio(filename):
            raise ValidationError(f"unsupported file format: {naming.file_extension(filename) or filename}")

        title = (name or "").strip() or PurePath(filename).stem
        album = self.repository.get_album(album_id)
        song = Song(
            name=title,
            filename=filename,
            mime_type=naming.detect_mime_type(filename),
            file_size=0,
            album_id=album.id,
        )
        song.album = album

        path = self.song_path(song)
        if path.exists():
            raise ValidationError(f"Song {title!r} already exists in album {album.name!r}")

        song.file_size = self.storage.save_file(source, path, max_bytes=self.settings.max_upload_bytes)
        try:
            self.repository.create_song(song)
        except Exception:
            self._discard(path)
            raise
        self._log.info(
            "library_song_added: id=%s name=%s album_id=%s bytes=%d",
            song.id,
            song.name,
            album.id,
            song.file_size,
        )
        return song

    def get_song(self, song_id: int) -> Song:
        return self.repository.get_song(song_id)

    def change_album(self, song_id: int, album_id: int) -> Song:
        """Move a song to another album, renaming its stored file to match."""
        song = self.repository.get_song(song_id)
        old_path = self.song_path(song)
        target = self.repository.get_album(album_id)
        new_path = self.settings.upload_dir / naming.song_file_name(
            song.name, target.name, target.artist.name, song.filename
        )
        if new_path != old_path and new_path.exists():
            raise ValidationError(f"Song {song.name!r} already exists in the target album")

        song.album_id = album_id
        self.repository.update_song(song)
        self.storage.rename_file(old_path, new_path)
        self._log.info("library_song_moved: id=%s album_id=%s path=%s", song_id, album_id, new_path.name)
        return song

    def open_song(self, song_id: int) -> Tuple[Song, MediaResource]:
        """
        Resolve a song id to its catalog row and an open media handle.

        The caller owns the returned resource.

        Raises:
            SongNotFoundError: unknown id.
            MediaNotFoundError: the row exists but the file is missing.
        """
        song = self.repository.get_song(song_id)
        path = self.song_path(song)
        try:
            resource = self.storage.open_media(path)
        except StorageError:
            self._log.exception("library_open_song_failed: id=%s path=%s", song_id, path)
            raise
        return song, resource

    # Browsing

    def search(self, query: str) -> SearchResult:
        """Case-insensitive substring match over album and artist fields."""
        query = (query or "").strip()
        result = SearchResult(query=query)
        if not query:
            return result

        needle = query.lower()
        for album in self.repository.list_albums():
            haystack = (album.name, album.description, album.artist.name)
            if any(needle in value.lower() for value in haystack):
                result.albums.append(album)
        for artist in self.repository.list_artists():
            if needle in artist.name.lower() or needle in artist.description.lower():
                result.artists.append(artist)

        self._log.debug(
            "library_search: query=%r albums=%d artists=%d", query, len(result.albums), len(result.artists)
        )
        return result

    def stats(self) -> Dict[str, int]:
        return self.repository.counts()
