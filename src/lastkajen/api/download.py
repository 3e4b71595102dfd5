"""Incremental copy of a download response body into a caller-supplied sink."""

from __future__ import annotations

import logging
from http.client import HTTPException
from typing import Protocol

from lastkajen.api.errors import IoError, Response, TransportError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class Sink(Protocol):
    """Anything with a binary ``write`` method, e.g. a file opened in ``"wb"`` mode."""

    def write(self, data: bytes, /) -> object: ...


def copy_stream(response: Response, sink: Sink, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Copy a response body to ``sink`` chunk by chunk, in order.

    Reading stops at the first empty chunk. Any read or write failure aborts
    the copy immediately; bytes already written stay in the sink.

    Args:
        response: Open response positioned at the start of its body.
        sink: Destination for the bytes.
        chunk_size: Maximum number of bytes requested per read.

    Returns:
        Total number of bytes written.

    Raises:
        TransportError: If reading a chunk from the response fails.
        IoError: If the sink rejects a write.
        ValueError: If chunk_size is less than 1.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    written = 0
    while True:
        try:
            chunk = response.read(chunk_size)
        except (OSError, HTTPException) as exc:
            logger.error("[copy_stream] failed reading chunk; bytes_written:%d", written)
            raise TransportError(f"Download interrupted after {written} bytes") from exc
        if not chunk:
            break
        try:
            sink.write(chunk)
        except OSError as exc:
            logger.error("[copy_stream] failed writing chunk to sink; bytes_written:%d", written)
            raise IoError(f"Failed writing to sink after {written} bytes") from exc
        written += len(chunk)
    return written
