"""Lastkajen API client: login, listings, download tokens and file streaming."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from http.client import HTTPException
from typing import TYPE_CHECKING, Any, TypeVar, assert_never
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import urlencode, urlsplit

from lastkajen.api.download import DEFAULT_CHUNK_SIZE, Sink, copy_stream
from lastkajen.api.errors import Response, TransportError, check_status
from lastkajen.api.models import (
    DataPackageFile,
    DataPackageFolder,
    DownloadRequest,
    DownloadToken,
    PublishedDownloadToken,
    PublishedFileRequest,
    Token,
    UserDownloadToken,
    UserFile,
    UserFileRequest,
)

if TYPE_CHECKING:
    from lastkajen.config import ClientConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://lastkajen.trafikverket.se"

LOGIN_PATH = "/api/Identity/Login"
PUBLISHED_PACKAGES_PATH = "/api/DataPackage/GetPublishedDataPackages"
PACKAGE_FILES_PATH = "/api/DataPackage/GetDataPackageFiles/{id}"
USER_FILES_PATH = "/api/file/GetUserFiles"
USER_DOWNLOAD_TOKEN_PATH = "/api/file/GetUserFileDownloadToken"
PUBLISHED_DOWNLOAD_TOKEN_PATH = "/api/file/GetDataPackageDownloadToken"
# The two stream endpoints are not interchangeable.
USER_FILE_STREAM_PATH = "/api/file/GetFileStream"
PUBLISHED_FILE_STREAM_PATH = "/api/file/GetDataPackageFile"


def _send(
    opener: urllib_request.OpenerDirector,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    data: bytes | None = None,
    timeout: float | None = None,
) -> Response:
    """Send a request, returning error statuses as responses instead of raising.

    Query strings are left out of the log line since they may carry tokens.

    Raises:
        TransportError: If the request never produced an HTTP response.
    """
    path = urlsplit(url).path
    logger.info("[_send] request; method:%s;path:%s", method, path)
    try:
        req = urllib_request.Request(url, data=data, headers=headers or {}, method=method)
        if timeout is None:
            return opener.open(req)  # type: ignore[no-any-return]
        return opener.open(req, timeout=timeout)  # type: ignore[no-any-return]
    except HTTPError as exc:
        # HTTPError doubles as a response; let check_status classify it.
        return exc
    except (OSError, HTTPException, ValueError) as exc:
        logger.error("[_send] transport failure; method:%s;path:%s", method, path)
        raise TransportError(f"{method} {path} failed: {exc}") from exc


def _read_json(response: Response) -> Any:
    """Read and JSON-decode the body of a response that already passed check_status."""
    try:
        body = response.read()
    except (OSError, HTTPException) as exc:
        raise TransportError("Failed to read response body") from exc
    try:
        return json.loads(body)
    except ValueError as exc:
        raise TransportError("Response body is not valid JSON") from exc


def _parse(payload: Any, parser: Callable[[dict[str, Any]], T]) -> T:
    try:
        return parser(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise TransportError(f"Unexpected response shape: {exc!r}") from exc


def _expiry(expires_in: int) -> datetime:
    """Return now + expires_in in UTC, saturating at the datetime range limits."""
    now = datetime.now(timezone.utc)
    try:
        return now + timedelta(seconds=expires_in)
    except OverflowError:
        limit = datetime.max if expires_in > 0 else datetime.min
        return limit.replace(tzinfo=timezone.utc)


def _parse_list(payload: Any, parser: Callable[[dict[str, Any]], T]) -> list[T]:
    if not isinstance(payload, list):
        raise TransportError(f"Expected a JSON array, got {type(payload).__name__}")
    return [_parse(item, parser) for item in payload]


class LastkajenClient:
    """Authenticated session against the Lastkajen file distribution service.

    The bearer token is fetched once at login and never refreshed. ``expires_at``
    is informational only; no call checks it before hitting the service.
    """

    def __init__(
        self,
        token: Token,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        opener: urllib_request.OpenerDirector | None = None,
    ) -> None:
        """Wrap an already obtained token.

        Args:
            token: Bearer token from the login endpoint.
            base_url: Service root URL without a trailing slash.
            timeout: Socket timeout in seconds; None keeps the transport default.
            chunk_size: Bytes requested per read while streaming a download.
            opener: Transport handle; a new one is built when omitted.

        Raises:
            ValueError: If chunk_size is less than 1.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        self.token = token
        self.expires_at = _expiry(token.expires_in)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._opener = opener or urllib_request.build_opener()

    @classmethod
    def login(
        cls,
        username: str,
        password: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        opener: urllib_request.OpenerDirector | None = None,
    ) -> LastkajenClient:
        """Log in and return a ready client.

        Raises:
            LastkajenError: Whatever retrieve_token raises.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        opener = opener or urllib_request.build_opener()
        token = cls.retrieve_token(
            username, password, base_url=base_url, timeout=timeout, opener=opener
        )
        return cls(token, base_url=base_url, timeout=timeout, chunk_size=chunk_size, opener=opener)

    @staticmethod
    def retrieve_token(
        username: str,
        password: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        opener: urllib_request.OpenerDirector | None = None,
    ) -> Token:
        """Fetch a new bearer token.

        Needs no client instance, so callers can refresh a token by hand.

        Args:
            username: Lastkajen account user name.
            password: Lastkajen account password.
            base_url: Service root URL.
            timeout: Socket timeout in seconds; None keeps the transport default.
            opener: Transport handle; a new one is built when omitted.

        Returns:
            The decoded Token.

        Raises:
            TransportError: On connection failure or an undecodable body.
            ServiceError: If the service rejects the login with a message.
            HttpStatusError: If the service rejects the login without one.
        """
        with _send(
            opener or urllib_request.build_opener(),
            "POST",
            f"{base_url.rstrip('/')}{LOGIN_PATH}",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
            data=urlencode({"UserName": username, "Password": password}).encode("utf-8"),
            timeout=timeout,
        ) as resp:
            token = _parse(_read_json(check_status(resp)), Token.from_json)
        logger.info(
            "[retrieve_token] login succeeded; expires_in:%d;is_external:%s",
            token.expires_in,
            token.is_external,
        )
        return token

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def get_published_packages(self) -> list[DataPackageFolder]:
        """List the data packages published to all users."""
        packages = _parse_list(self._get_json(PUBLISHED_PACKAGES_PATH), DataPackageFolder.from_json)
        logger.info("[get_published_packages] fetched packages; count:%d", len(packages))
        return packages

    def get_package_files(self, package: DataPackageFolder) -> list[DataPackageFile]:
        """List the files of a published data package."""
        return self.get_package_files_from_id(package.id)

    def get_package_files_from_id(self, package_id: int) -> list[DataPackageFile]:
        """List the files of the published data package with the given id."""
        package_id = int(package_id)
        path = PACKAGE_FILES_PATH.format(id=package_id)
        files = _parse_list(self._get_json(path), DataPackageFile.from_json)
        logger.info(
            "[get_package_files_from_id] fetched files; package_id:%d;count:%d",
            package_id,
            len(files),
        )
        return files

    def get_user_files(self) -> list[UserFile]:
        """List the custom extracts ordered by the authenticated user."""
        files = _parse_list(self._get_json(USER_FILES_PATH), UserFile.from_json)
        logger.info("[get_user_files] fetched user files; count:%d", len(files))
        return files

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------

    def get_download_token(self, request: DownloadRequest) -> DownloadToken:
        """Resolve a single-use download token for a file.

        Tokens are valid for about 60 seconds and should be spent right away.
        The returned token always has the variant matching ``request``.

        Args:
            request: Which file to download.

        Returns:
            PublishedDownloadToken for a PublishedFileRequest, UserDownloadToken
            for a UserFileRequest.
        """
        match request:
            case PublishedFileRequest(package_id=package_id, file_name=file_name):
                query = urlencode({"id": package_id, "fileName": file_name})
                value = self._get_token_string(f"{PUBLISHED_DOWNLOAD_TOKEN_PATH}?{query}")
                return PublishedDownloadToken(value)
            case UserFileRequest(file_name=file_name):
                query = urlencode({"fileName": file_name})
                value = self._get_token_string(f"{USER_DOWNLOAD_TOKEN_PATH}?{query}")
                return UserDownloadToken(value)
            case _:
                assert_never(request)

    def download_with_token(self, download_token: DownloadToken, sink: Sink) -> int:
        """Stream a file into ``sink``, spending the download token.

        The request carries no bearer token; the download token authorises it.
        A failed copy is not retried and the token cannot be reused.

        Args:
            download_token: Token from get_download_token.
            sink: Binary destination, e.g. a file opened with ``"wb"``.

        Returns:
            Number of bytes written to ``sink``.

        Raises:
            TransportError: On connection failure or an interrupted body.
            IoError: If writing to ``sink`` fails.
            ServiceError: If the service refuses the token with a message.
            HttpStatusError: If the service refuses the token without one.
        """
        match download_token:
            case UserDownloadToken(value=value):
                path = USER_FILE_STREAM_PATH
            case PublishedDownloadToken(value=value):
                path = PUBLISHED_FILE_STREAM_PATH
            case _:
                assert_never(download_token)

        url = f"{self._base_url}{path}?{urlencode({'token': value})}"
        with _send(self._opener, "GET", url, timeout=self._timeout) as resp:
            written = copy_stream(check_status(resp), sink, self._chunk_size)
        logger.info(
            "[download_with_token] download complete; kind:%s;bytes:%d",
            download_token.kind.value,
            written,
        )
        return written

    def download_file(self, request: DownloadRequest, sink: Sink) -> int:
        """Resolve a download token and immediately spend it streaming into ``sink``.

        If the copy fails the token is gone; call again to get a fresh one.
        """
        return self.download_with_token(self.get_download_token(request), sink)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_json(self, path_and_query: str) -> Any:
        with _send(
            self._opener,
            "GET",
            f"{self._base_url}{path_and_query}",
            headers={
                "Authorization": f"Bearer {self.token.access_token}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
        ) as resp:
            return _read_json(check_status(resp))

    def _get_token_string(self, path_and_query: str) -> str:
        payload = self._get_json(path_and_query)
        if not isinstance(payload, str):
            raise TransportError(f"Expected a JSON string token, got {type(payload).__name__}")
        return payload


def client_from_config(config: ClientConfig) -> LastkajenClient:
    """Log in with the credentials and transport settings of a ClientConfig.

    Args:
        config: Client configuration instance.

    Returns:
        Logged-in LastkajenClient instance.
    """
    return LastkajenClient.login(
        config.username,
        config.password,
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        chunk_size=config.chunk_size,
    )
