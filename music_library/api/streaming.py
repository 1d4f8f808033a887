"""
HTTP range streaming for stored media.

`serve()` turns an open `MediaResource` plus the raw ``Range`` request header
into one of three responses:

- 200 with the whole resource when no Range header was sent,
- 206 with exactly the requested bytes for a satisfiable ``bytes=start-end`` range,
- 416 with an empty body for anything else.

Only the first range of a multi-range header is honoured (no
``multipart/byteranges``), and suffix ranges (``bytes=-500``) are rejected.
An unparsable or too-large end is clamped to the last byte while a bad start
is rejected.

The resource is closed exactly once on every path: immediately for 416, and
by the response itself once the body has been sent or the transfer failed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from starlette.requests import ClientDisconnect
from starlette.responses import Response, StreamingResponse
from starlette.types import Receive, Scope, Send

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "audio/mpeg"
DEFAULT_CHUNK_SIZE = 64 * 1024
RANGE_UNIT_PREFIX = "bytes="

# Optional "+" sign, ASCII digits only.
_DIGITS = re.compile(r"\+?[0-9]+")


class MediaResource:
    """
    A seekable byte source of known length, owned by one response.

    Wraps a binary file object. `close()` may be called any number of times;
    the underlying file is closed on the first call only.
    """

    def __init__(self, fileobj: BinaryIO, total_size: int, name: str) -> None:
        if total_size < 0:
            raise ValueError("total_size must be >= 0")
        self._file = fileobj
        self.total_size = total_size
        self.name = name
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def seek(self, offset: int) -> None:
        self._file.seek(offset)

    def read(self, size: int) -> bytes:
        return self._file.read(size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._file.close()

    def __enter__(self) -> "MediaResource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MediaResource(name={self.name!r}, total_size={self.total_size}, closed={self._closed})"


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte bounds, ``0 <= start <= end < total_size``."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total_size: int) -> str:
        return f"bytes {self.start}-{self.end}/{total_size}"


class RangeNotSatisfiable(Exception):
    """The Range header is malformed, unsupported, or outside the resource."""


def parse_range_header(range_header: Optional[str], total_size: int) -> Optional[ByteRange]:
    """
    Parse a ``Range`` header value against a resource of `total_size` bytes.

    Returns:
        None when no range was requested, otherwise the satisfiable `ByteRange`.

    Raises:
        RangeNotSatisfiable: wrong unit, malformed spec, suffix range, bad start,
            ``start > end`` or ``start >= total_size``.
    """
    if not range_header:
        return None

    if not range_header.startswith(RANGE_UNIT_PREFIX):
        raise RangeNotSatisfiable(f"unsupported range unit: {range_header!r}")

    first = range_header[len(RANGE_UNIT_PREFIX) :].split(",")[0]
    parts = first.split("-")
    if len(parts) != 2:
        raise RangeNotSatisfiable(f"malformed range: {first!r}")
    start_s, end_s = parts

    if start_s == "":
        raise RangeNotSatisfiable("suffix ranges are not supported")
    if not _DIGITS.fullmatch(start_s):
        raise RangeNotSatisfiable(f"invalid range start: {start_s!r}")
    start = int(start_s)

    last = total_size - 1
    if end_s == "" or not _DIGITS.fullmatch(end_s):
        end = last
    else:
        end = min(int(end_s), last)

    if start > end or start >= total_size:
        raise RangeNotSatisfiable(f"range {start}-{end} not satisfiable for size {total_size}")

    return ByteRange(start, end)


def _disposition_name(name: str) -> str:
    # Header values are latin-1 on the wire; quotes would end the filename early.
    safe = name.encode("latin-1", "replace").decode("latin-1")
    return safe.replace('"', "").replace("\r", "").replace("\n", "") or "audio"


def _iter_resource(
    resource: MediaResource,
    start: Optional[int],
    length: int,
    chunk_size: int,
    log: logging.Logger,
) -> Iterator[bytes]:
    """
    Yield `length` bytes of `resource`, seeking to `start` first when given.

    Headers are already on the wire when this runs, so an I/O error or a short
    read only ends the body early.
    """
    try:
        if start is not None:
            resource.seek(start)
        remaining = length
        while remaining > 0:
            chunk = resource.read(min(chunk_size, remaining))
            if not chunk:
                log.warning(
                    "stream_short_read: name=%s missing_bytes=%d total_size=%d",
                    resource.name,
                    remaining,
                    resource.total_size,
                )
                return
            remaining -= len(chunk)
            yield chunk
    except OSError as exc:
        log.warning(
            "stream_io_failed: name=%s exc=%s msg=%s",
            resource.name,
            exc.__class__.__name__,
            exc,
        )


class MediaStreamResponse(StreamingResponse):
    """StreamingResponse that releases its `MediaResource` however the send ends."""

    def __init__(
        self,
        resource: MediaResource,
        content: Iterator[bytes],
        *,
        log: Optional[logging.Logger] = None,
        **kwargs,
    ) -> None:
        super().__init__(content, **kwargs)
        self.resource = resource
        self._log = log or logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except (ClientDisconnect, OSError) as exc:
            # Client went away mid-body; nothing left to tell it.
            self._log.info(
                "stream_aborted: name=%s status=%d exc=%s",
                self.resource.name,
                self.status_code,
                exc.__class__.__name__,
            )
        finally:
            self.resource.close()


# PUBLIC_INTERFACE
def serve(
    resource: MediaResource,
    range_header: Optional[str],
    media_type: Optional[str] = None,
    *,
    log: Optional[logging.Logger] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Response:
    """
    Build the response for `resource`, honouring `range_header`.

    Args:
        resource: open resource positioned at offset 0; ownership passes to the
            returned response (or it is closed here for 416).
        range_header: raw ``Range`` header value, None or "" for a full response.
        media_type: Content-Type to send, audio/mpeg when not given.
        log: logger to report through, the module logger by default.
        chunk_size: maximum bytes per body chunk.

    Returns:
        A 200 or 206 `MediaStreamResponse`, or an empty 416 `Response`.
    """
    log = log or logger
    media_type = media_type or DEFAULT_MEDIA_TYPE
    headers = {
        "Accept-Ranges": "bytes",
        "Content-Disposition": f'inline; filename="{_disposition_name(resource.name)}"',
    }

    try:
        byte_range = parse_range_header(range_header, resource.total_size)
    except RangeNotSatisfiable as exc:
        log.info("stream_range_rejected: name=%s range=%r reason=%s", resource.name, range_header, exc)
        resource.close()
        return Response(status_code=416, media_type=media_type, headers=headers)
    except BaseException:
        resource.close()
        raise

    if byte_range is None:
        headers["Content-Length"] = str(resource.total_size)
        log.debug("stream_full: name=%s size=%d", resource.name, resource.total_size)
        return MediaStreamResponse(
            resource,
            _iter_resource(resource, None, resource.total_size, chunk_size, log),
            log=log,
            status_code=200,
            media_type=media_type,
            headers=headers,
        )

    headers["Content-Range"] = byte_range.content_range(resource.total_size)
    headers["Content-Length"] = str(byte_range.length)
    log.debug("stream_partial: name=%s range=%s", resource.name, headers["Content-Range"])
    return MediaStreamResponse(
        resource,
        _iter_resource(resource, byte_range.start, byte_range.length, chunk_size, log),
        log=log,
        status_code=206,
        media_type=media_type,
        headers=headers,
    )
