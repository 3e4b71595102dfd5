"""Client configuration loaded from environment variables and an optional .env file."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from lastkajen.api.client import DEFAULT_BASE_URL
from lastkajen.api.download import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class ClientConfig:
    """Centralized client configuration.

    Credentials have no defaults and will cause a KeyError at startup if the
    corresponding environment variable is missing. Transport tuning has
    sensible defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    username: str
    password: str

    # Transport tuning — defaults provided, overridable via env
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")


def load_config(dotenv_path: str | None = None) -> ClientConfig:
    """Construct a ClientConfig from environment variables.

    Variables already present in the process environment take precedence over
    those read from the .env file.

    Required environment variables:
        LK_USERNAME: Lastkajen account user name.
        LK_PASSWORD: Lastkajen account password.

    Optional environment variables (with defaults):
        LK_BASE_URL: Service root URL (default: https://lastkajen.trafikverket.se).
        LK_TIMEOUT_SECONDS: Socket timeout per request (default: transport default).
        LK_CHUNK_SIZE: Bytes requested per read while streaming (default: 65536).

    Args:
        dotenv_path: Explicit .env file to load; searched for upwards from the
            working directory when omitted.

    Returns:
        Configured ClientConfig instance.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))

    timeout = os.environ.get("LK_TIMEOUT_SECONDS")
    return ClientConfig(
        username=os.environ["LK_USERNAME"],
        password=os.environ["LK_PASSWORD"],
        base_url=os.environ.get("LK_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        timeout_seconds=float(timeout) if timeout else None,
        chunk_size=int(os.environ.get("LK_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
    )
