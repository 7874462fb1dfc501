# SPDX-License-Identifier: MIT
"""Pytest fixtures for registry tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from roast_registry import RegistryConfig, create_app
from roast_registry.auth import Identity, Role
from roast_registry.publish import PublishRequest
from roast_registry.registry import Registry

ADMIN_TOKEN = "test-admin-token"

SAMPLE_TARBALL = b"0123456789abcdef!"  # 17 bytes


def make_request(
    name: str = "json-lib",
    version: str = "1.0.0",
    body: bytes = SAMPLE_TARBALL,
    **kwargs,
) -> PublishRequest:
    """Build a publish request with sensible defaults."""
    return PublishRequest(name=name, version=version, body=body, **kwargs)


@pytest.fixture
def alice() -> Identity:
    return Identity(owner_id="alice-id", name="Alice", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(owner_id="bob-id", name="Bob", email="bob@example.com")


@pytest.fixture
def admin() -> Identity:
    return Identity(owner_id="root-id", name="Root", role=Role.SUPERUSER)


@pytest.fixture
def registry() -> Registry:
    """In-memory registry."""
    return Registry.in_memory(admin_token=ADMIN_TOKEN)


@pytest.fixture
def sql_config(tmp_path: Path) -> RegistryConfig:
    """Configuration for the SQL backend on a temporary SQLite file."""
    config = RegistryConfig()
    config.backend = "sql"
    config.database.url = f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}"
    config.storage.backend = "local"
    config.storage.local_path = str(tmp_path / "tarballs")
    config.auth.admin_token = ADMIN_TOKEN
    return config


@pytest_asyncio.fixture
async def sql_registry(sql_config: RegistryConfig) -> AsyncGenerator[Registry, None]:
    """SQL-backed registry with tables created."""
    registry = Registry.from_config(sql_config)
    await registry.start()
    yield registry
    await registry.close()


@pytest.fixture
def app(registry: Registry):
    """Test FastAPI application over the in-memory registry."""
    config = RegistryConfig()
    config.backend = "memory"
    config.storage.backend = "memory"
    config.auth.admin_token = ADMIN_TOKEN
    return create_app(config, registry=registry)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def alice_token(registry: Registry) -> str:
    """Register Alice and return her API token."""
    _, token = await registry.register_identity("alice@example.com", "Alice")
    return token


@pytest_asyncio.fixture
async def bob_token(registry: Registry) -> str:
    """Register Bob and return his API token."""
    _, token = await registry.register_identity("bob@example.com", "Bob")
    return token
