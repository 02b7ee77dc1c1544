"""
Pytest fixtures for MIP stamp testing.
Provides Ed25519 key material and an isolated settings cache.
"""

import pytest

from mipstamp.core.config import get_settings
from mipstamp.core.crypto.signing import generate_signing_keypair

_MIP_ENV_VARS = (
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "MIP_SIGNING_KEY",
    "MIP_VERIFY_KEY",
    "MIP_SIGNING_KEY_ID",
    "MIP_STRICT_ORDERING",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep host environment variables out of cached settings."""
    for name in _MIP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def keypair() -> tuple[bytes, bytes]:
    """A fresh raw Ed25519 ``(private_key, public_key)`` pair."""
    return generate_signing_keypair()


@pytest.fixture
def private_key(keypair: tuple[bytes, bytes]) -> bytes:
    return keypair[0]


@pytest.fixture
def public_key(keypair: tuple[bytes, bytes]) -> bytes:
    return keypair[1]
