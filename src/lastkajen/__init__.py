"""Client for the Lastkajen file distribution service of Trafikverket."""

from lastkajen.api.client import LastkajenClient, client_from_config
from lastkajen.api.errors import (
    HttpStatusError,
    IoError,
    LastkajenError,
    ServiceError,
    TransportError,
)
from lastkajen.api.models import (
    DataPackageFile,
    DataPackageFolder,
    DownloadRequest,
    DownloadToken,
    FileLink,
    PackageKind,
    PublishedDownloadToken,
    PublishedFileRequest,
    TargetFolder,
    Token,
    UserDownloadToken,
    UserFile,
    UserFileRequest,
)

__version__ = "0.1.0"

__all__ = [
    "DataPackageFile",
    "DataPackageFolder",
    "DownloadRequest",
    "DownloadToken",
    "FileLink",
    "HttpStatusError",
    "IoError",
    "LastkajenClient",
    "LastkajenError",
    "PackageKind",
    "PublishedDownloadToken",
    "PublishedFileRequest",
    "ServiceError",
    "TargetFolder",
    "Token",
    "TransportError",
    "UserDownloadToken",
    "UserFile",
    "UserFileRequest",
    "__version__",
    "client_from_config",
]
