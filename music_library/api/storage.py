"""
Local disk file store for uploaded audio and cover images.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from music_library.api.errors import MediaNotFoundError, PayloadTooLargeError, StorageError
from music_library.api.streaming import MediaResource

logger = logging.getLogger(__name__)

_COPY_CHUNK = 1024 * 1024


class Storage:
    """Saves, moves, deletes and opens files; every failure is logged here."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger

    def save_file(self, source: BinaryIO, path: Path, max_bytes: Optional[int] = None) -> int:
        """
        Copy `source` into `path`, creating parent directories.

        Returns:
            Number of bytes written.

        Raises:
            PayloadTooLargeError: if `source` holds more than `max_bytes`; nothing is kept.
            StorageError: if the destination cannot be created or written.
        """
        written = 0
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as dest:
                while True:
                    chunk = source.read(_COPY_CHUNK)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        break
                    dest.write(chunk)
        except OSError as exc:
            self._log.error("storage_save_failed: path=%s exc=%s", path, exc)
            path.unlink(missing_ok=True)
            raise StorageError(f"Failed to store file {path.name}") from exc

        if max_bytes is not None and written > max_bytes:
            path.unlink(missing_ok=True)
            self._log.warning("storage_save_too_large: path=%s limit=%d", path, max_bytes)
            raise PayloadTooLargeError(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

        self._log.debug("storage_saved: path=%s bytes=%d", path, written)
        return written

    def delete_file(self, path: Path) -> None:
        """
        Remove `path`.

        Raises:
            MediaNotFoundError: if the file does not exist.
            StorageError: on any other failure.
        """
        try:
            path.unlink()
        except FileNotFoundError as exc:
            self._log.warning("storage_delete_missing: path=%s", path)
            raise MediaNotFoundError(f"File {path.name} not found") from exc
        except OSError as exc:
            self._log.error("storage_delete_failed: path=%s exc=%s", path, exc)
            raise StorageError(f"Failed to delete file {path.name}") from exc

    def rename_file(self, src: Path, dest: Path) -> None:
        """Move `src` to `dest`, replacing any existing file at `dest`."""
        if src == dest:
            return
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            os.replace(src, dest)
        except FileNotFoundError as exc:
            self._log.warning("storage_rename_missing: src=%s", src)
            raise MediaNotFoundError(f"File {src.name} not found") from exc
        except OSError as exc:
            self._log.error("storage_rename_failed: src=%s dest=%s exc=%s", src, dest, exc)
            raise StorageError(f"Failed to move file {src.name}") from exc

    def open_media(self, path: Path) -> MediaResource:
        """
        Open `path` for streaming.

        The caller owns the returned resource and must close it.

        Raises:
            MediaNotFoundError: if `path` is missing or not a regular file.
            StorageError: if the file exists but cannot be opened.
        """
        if not path.is_file():
            self._log.warning("storage_open_missing: path=%s", path)
            raise MediaNotFoundError()
        try:
            handle = path.open("rb")
        except OSError as exc:
            self._log.error("storage_open_failed: path=%s exc=%s", path, exc)
            raise StorageError(f"Failed to open file {path.name}") from exc
        try:
            total_size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            self._log.error("storage_stat_failed: path=%s exc=%s", path, exc)
            raise StorageError(f"Failed to stat file {path.name}") from exc
        return MediaResource(handle, total_size, path.name)
