"""Pytest configuration and shared fixtures.

Nothing here needs a live database or Discord: REST calls go to mocks or
``httpx.MockTransport``, time goes through ``FakeClock``.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing app to use NullPool and skip startup checks
os.environ["TESTING"] = "true"

from src.config import settings

settings.testing = True

from src.main import app
from tests.helpers import FakeClock


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signing_key(monkeypatch) -> Ed25519PrivateKey:
    """Fresh application key; settings get the matching public key."""
    key = Ed25519PrivateKey.generate()
    public_hex = key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()
    monkeypatch.setattr(settings, "discord_public_key", public_hex)
    return key


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
