"""Error taxonomy for the Lastkajen API and the response status chokepoint."""

from __future__ import annotations

import logging
from http.client import HTTPException
from typing import Protocol

logger = logging.getLogger(__name__)

HTTP_OK = 200


class LastkajenError(Exception):
    """Base class for every failure raised by a Lastkajen client operation."""


class TransportError(LastkajenError):
    """Raised when the HTTP layer fails or a successful body cannot be decoded.

    The originating exception is chained as ``__cause__``.
    """


class IoError(LastkajenError):
    """Raised when writing downloaded bytes to the caller's sink fails."""


class HttpStatusError(LastkajenError):
    """Raised for a non-200 response that carries no readable error body."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Lastkajen API request failed with HTTP status {status_code}")
        self.status_code = status_code


class ServiceError(LastkajenError):
    """Raised for a non-200 response whose body holds the service's own message."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Lastkajen error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class Response(Protocol):
    """The subset of a urllib response (or ``HTTPError``) the client relies on."""

    def getcode(self) -> int | None: ...

    def read(self, amt: int | None = ..., /) -> bytes: ...

    def __enter__(self) -> Response: ...

    def __exit__(self, *exc_info: object) -> object: ...


def check_status(response: Response) -> Response:
    """Pass a 200 response through; classify anything else and raise.

    The body of a non-200 response is read as text and never decoded as JSON.

    Args:
        response: Response object returned by the transport.

    Returns:
        The same response, untouched, when its status is exactly 200.

    Raises:
        TransportError: If reading the error body fails.
        ServiceError: If the error body is non-empty UTF-8 text.
        HttpStatusError: If the error body is empty or not text.
    """
    status = response.getcode() or 0
    if status == HTTP_OK:
        return response

    try:
        raw = response.read()
    except (OSError, HTTPException) as exc:
        logger.error("[check_status] failed reading error body; status:%d", status)
        raise TransportError(f"Failed to read error body of HTTP {status} response") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = ""

    logger.warning("[check_status] request failed; status:%d;message:%s", status, text[:200])
    if text.strip():
        raise ServiceError(status, text)
    raise HttpStatusError(status)
