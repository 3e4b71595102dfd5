"""Integration tests against the real Lastkajen service.

These tests require a real Lastkajen account and are skipped in CI/CD unless
the LK_USERNAME environment variable is set.
"""

import os

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("LK_USERNAME"),
    reason="Real Lastkajen credentials not available",
)


def test_login_and_list_real() -> None:
    """Log in and list published packages and user files.

    Asserts that both listings come back as lists without raising.
    """
    from lastkajen.api.client import client_from_config
    from lastkajen.config import load_config

    client = client_from_config(load_config())

    assert isinstance(client.get_published_packages(), list)
    assert isinstance(client.get_user_files(), list)
