"""
Domain errors raised by the catalog, storage and configuration layers.

Route handlers never build HTTP errors for these by hand; the application
factory registers exception handlers that map each class to a status code.
"""

from __future__ import annotations


class LibraryError(Exception):
    """Base class for all music library errors."""

    status_code = 500


class ConfigError(LibraryError):
    """Invalid or incomplete service configuration."""


class NotFoundError(LibraryError):
    status_code = 404


class ArtistNotFoundError(NotFoundError):
    def __init__(self, message: str = "Artist not found") -> None:
        super().__init__(message)


class AlbumNotFoundError(NotFoundError):
    def __init__(self, message: str = "Album not found") -> None:
        super().__init__(message)


class SongNotFoundError(NotFoundError):
    def __init__(self, message: str = "Song not found") -> None:
        super().__init__(message)


class MediaNotFoundError(NotFoundError):
    """The catalog row exists but its file is missing on disk."""

    def __init__(self, message: str = "File missing on server.") -> None:
        super().__init__(message)


class ValidationError(LibraryError):
    """Client input that cannot be accepted."""

    status_code = 400


class PayloadTooLargeError(ValidationError):
    status_code = 413


class StorageError(LibraryError):
    """Local disk operation failed."""
