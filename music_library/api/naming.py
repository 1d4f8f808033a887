"""
Naming policy for files kept on local disk.

Songs are stored as ``<song>-<album>-<artist><ext>`` in the upload directory,
artist images as ``<artist>.png`` and album images as ``<album>_<artist_id>.png``
in the image directory. Every name component is sanitized so a stored name
never contains a path separator.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePath

from music_library.api.models import Song

IMAGE_EXTENSION = ".png"
DEFAULT_MIME_TYPE = "audio/mpeg"

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".m4a": "audio/m4a",
    ".aac": "audio/aac",
}

_UNSAFE = re.compile(r"[^A-Za-z0-9._ -]+")


def sanitize_component(name: str, fallback: str = "untitled") -> str:
    """Reduce a user supplied name to a single safe file name component."""
    name = name.strip().replace("\\", "_").replace("/", "_")
    name = _UNSAFE.sub("_", name).strip(" .")
    return name or fallback


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def is_supported_audio(filename: str) -> bool:
    return file_extension(filename) in AUDIO_MIME_TYPES


def detect_mime_type(filename: str) -> str:
    """MIME type from the file extension, audio/mpeg when unknown."""
    return AUDIO_MIME_TYPES.get(file_extension(filename), DEFAULT_MIME_TYPE)


def song_file_name(song_name: str, album_name: str, artist_name: str, original_filename: str) -> str:
    return "{}-{}-{}{}".format(
        sanitize_component(song_name),
        sanitize_component(album_name),
        sanitize_component(artist_name),
        file_extension(original_filename),
    )


def song_path(upload_dir: Path, song: Song) -> Path:
    """Where `song` lives on disk; needs `song.album.artist` loaded."""
    album = song.album
    return upload_dir / song_file_name(song.name, album.name, album.artist.name, song.filename)


def artist_image_name(artist_name: str) -> str:
    return sanitize_component(artist_name) + IMAGE_EXTENSION


def album_image_name(album_name: str, artist_id: int) -> str:
    return f"{sanitize_component(album_name)}_{artist_id}{IMAGE_EXTENSION}"
