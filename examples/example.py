"""Walk through the Lastkajen API: published packages, then the user's own files.

Credentials come from LK_USERNAME / LK_PASSWORD (a .env file works too).
Set LK_EXAMPLE_DOWNLOAD=1 to actually download the selected files.
"""

import logging
import os
import sys

from lastkajen.api.client import LastkajenClient, client_from_config
from lastkajen.api.errors import LastkajenError
from lastkajen.api.models import PublishedFileRequest, UserFileRequest
from lastkajen.config import load_config

logger = logging.getLogger(__name__)

PACKAGE_SOURCE_FOLDER = "Datapaket\\Länsfiler NVDB-data\\Gävleborgs län"
PACKAGE_FILE_NAME = "Gävleborgs_län_GeoPackage.zip"


def run(client: LastkajenClient, download: bool = False) -> None:
    """List packages and user files, optionally downloading one of each.

    Downloads land in the working directory under the base name of the file.
    """
    # Published packages. The API has no query support, so filter locally.
    packages = [
        package
        for package in client.get_published_packages()
        if package.source_folder == PACKAGE_SOURCE_FOLDER
    ]
    if not packages:
        raise LookupError(f"No published package in {PACKAGE_SOURCE_FOLDER!r}")
    package = packages[0]

    # Most folders outside INSPIRE hold the same data in several formats.
    files = [f for f in client.get_package_files(package) if f.name == PACKAGE_FILE_NAME]
    if not files:
        raise LookupError(f"No file named {PACKAGE_FILE_NAME!r} in package {package.id}")
    package_file = files[0]
    print(package_file)

    if download:
        with open(os.path.basename(package_file.name), "wb") as sink:
            client.download_file(PublishedFileRequest.for_file(package, package_file), sink)

    # User orders are custom extracts created on the Lastkajen website.
    user_files = client.get_user_files()
    if not user_files:
        print("No user files.")
        return
    user_file = user_files[-1]
    print(user_file)

    if download:
        with open(os.path.basename(user_file.name), "wb") as sink:
            client.download_file(UserFileRequest.for_file(user_file), sink)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    try:
        client = client_from_config(load_config())
        run(client, download=os.environ.get("LK_EXAMPLE_DOWNLOAD") == "1")
    except (LastkajenError, LookupError):
        logger.error("[main] example run failed", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
