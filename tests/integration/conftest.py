"""Shared fixtures for integration tests."""

import os

import pytest
import pytest_asyncio

from tzpro.data import ClientConfig, TzproClient

# Skip all integration tests unless RUN_TZPRO_NETWORK_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_TZPRO_NETWORK_TESTS") != "1",
    reason="Requires network access. Set RUN_TZPRO_NETWORK_TESTS=1 to run",
)


@pytest_asyncio.fixture
async def client():
    """Client configured from TZPRO_* environment variables."""
    async with TzproClient(ClientConfig.from_env()) as c:
        yield c
