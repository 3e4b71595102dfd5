"""Data models for Lastkajen API listings, tokens and download selectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Login response fields (snake_case on the wire)
FIELD_ACCESS_TOKEN = "access_token"
FIELD_EXPIRES_IN = "expires_in"
FIELD_IS_EXTERNAL = "is_external"

# Listing fields (camelCase on the wire)
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_PATH = "path"
FIELD_TARGET_FOLDER = "targetFolder"
FIELD_SOURCE_FOLDER = "sourceFolder"
FIELD_DESCRIPTION = "description"
FIELD_PUBLISHED = "published"
FIELD_HREF = "href"
FIELD_REL = "rel"
FIELD_METHOD = "method"
FIELD_IS_TEMPLATED = "isTemplated"
FIELD_IS_FOLDER = "isFolder"
FIELD_SIZE = "size"
FIELD_DATE_TIME = "dateTime"
FIELD_LINKS = "links"


def _typed(raw: dict[str, Any], key: str, kind: type) -> Any:
    """Return raw[key], raising TypeError when it is not of the given JSON type."""
    value = raw[key]
    # bool is an int subclass; never accept it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"Field {key!r} expected {kind.__name__}, got {type(value).__name__}")
    return value


class PackageKind(Enum):
    """The two file categories served by Lastkajen."""

    PUBLISHED = "published"
    USER = "user"


@dataclass(frozen=True)
class Token:
    """Bearer token returned by the login endpoint."""

    access_token: str
    expires_in: int
    is_external: bool

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> Token:
        return cls(
            access_token=_typed(raw, FIELD_ACCESS_TOKEN, str),
            expires_in=_typed(raw, FIELD_EXPIRES_IN, int),
            is_external=_typed(raw, FIELD_IS_EXTERNAL, bool),
        )


@dataclass
class TargetFolder:
    """Where a published package's contents are organised on the server."""

    id: int
    name: str
    path: str

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> TargetFolder:
        return cls(
            id=_typed(raw, FIELD_ID, int),
            name=_typed(raw, FIELD_NAME, str),
            path=_typed(raw, FIELD_PATH, str),
        )


@dataclass
class DataPackageFolder:
    """A published data package. ``id`` is the key used to list its files."""

    id: int
    target_folder: TargetFolder
    source_folder: str
    name: str
    description: str
    published: bool

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> DataPackageFolder:
        return cls(
            id=_typed(raw, FIELD_ID, int),
            target_folder=TargetFolder.from_json(_typed(raw, FIELD_TARGET_FOLDER, dict)),
            source_folder=_typed(raw, FIELD_SOURCE_FOLDER, str),
            name=_typed(raw, FIELD_NAME, str),
            description=_typed(raw, FIELD_DESCRIPTION, str),
            published=_typed(raw, FIELD_PUBLISHED, bool),
        )


@dataclass
class FileLink:
    """Hypermedia link attached to a published package file."""

    href: str
    rel: str
    method: str
    is_templated: bool

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> FileLink:
        return cls(
            href=_typed(raw, FIELD_HREF, str),
            rel=_typed(raw, FIELD_REL, str),
            method=_typed(raw, FIELD_METHOD, str),
            is_templated=_typed(raw, FIELD_IS_TEMPLATED, bool),
        )


@dataclass
class DataPackageFile:
    """A file or sub-folder within a published data package.

    Attributes:
        is_folder: True when the entry is a sub-folder.
        name: File name; together with the parent package id it selects the
            file for downloading.
        size: Human-readable size exactly as reported by the service.
        date_time: ISO 8601 timestamp string.
        links: Hypermedia links, not needed for downloading.
    """

    is_folder: bool
    name: str
    size: str
    date_time: str
    links: list[FileLink] = field(default_factory=list)

    @property
    def modified_at(self) -> datetime:
        """``date_time`` parsed as a datetime."""
        return datetime.fromisoformat(self.date_time)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> DataPackageFile:
        return cls(
            is_folder=_typed(raw, FIELD_IS_FOLDER, bool),
            name=_typed(raw, FIELD_NAME, str),
            size=_typed(raw, FIELD_SIZE, str),
            date_time=_typed(raw, FIELD_DATE_TIME, str),
            links=[FileLink.from_json(link) for link in _typed(raw, FIELD_LINKS, list)],
        )


@dataclass
class UserFile:
    """A custom extract ordered by the authenticated user.

    Attributes:
        is_folder: True when the entry is a folder.
        name: File name; the only key needed for downloading.
        size: Human-readable size exactly as reported by the service.
        date_time: Timestamp string. The service sends no UTC offset.
    """

    is_folder: bool
    name: str
    size: str
    date_time: str

    @property
    def modified_at(self) -> datetime:
        """``date_time`` parsed as a naive datetime (server local time)."""
        return datetime.fromisoformat(self.date_time)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> UserFile:
        return cls(
            is_folder=_typed(raw, FIELD_IS_FOLDER, bool),
            name=_typed(raw, FIELD_NAME, str),
            size=_typed(raw, FIELD_SIZE, str),
            date_time=_typed(raw, FIELD_DATE_TIME, str),
        )


# ---------------------------------------------------------------------------
# Download selectors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PublishedFileRequest:
    """Selects a file inside a published data package."""

    package_id: int
    file_name: str

    kind = PackageKind.PUBLISHED

    @classmethod
    def for_file(cls, package: DataPackageFolder, file: DataPackageFile) -> PublishedFileRequest:
        return cls(package_id=package.id, file_name=file.name)


@dataclass(frozen=True)
class UserFileRequest:
    """Selects one of the user's own files by name."""

    file_name: str

    kind = PackageKind.USER

    @classmethod
    def for_file(cls, user_file: UserFile) -> UserFileRequest:
        return cls(file_name=user_file.name)


@dataclass(frozen=True)
class PublishedDownloadToken:
    """Single-use token for a published package file, valid for about 60 seconds."""

    value: str

    kind = PackageKind.PUBLISHED


@dataclass(frozen=True)
class UserDownloadToken:
    """Single-use token for a user file, valid for about 60 seconds."""

    value: str

    kind = PackageKind.USER


DownloadRequest = PublishedFileRequest | UserFileRequest
DownloadToken = PublishedDownloadToken | UserDownloadToken
