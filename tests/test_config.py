# SPDX-License-Identifier: MIT
"""Tests for configuration loading and error rendering."""

import pytest

from roast_registry import RegistryConfig
from roast_registry.db import async_url
from roast_registry.middleware.errors import (
    ErrorDetail,
    GoneError,
    InvalidInputError,
    StorageFailureError,
)
from roast_registry.registry import Registry
from roast_registry.store import InMemoryBlobStore, InMemoryPackageStore, LocalBlobStore, SqlPackageStore


class TestRegistryConfig:
    def test_defaults(self):
        config = RegistryConfig()
        assert config.backend == "sql"
        assert config.api_prefix == "/api/v1"
        assert config.storage.backend == "local"
        assert config.auth.admin_token is None

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ROAST_BACKEND", "memory")
        monkeypatch.setenv("ROAST_DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("ROAST_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("ROAST_ADMIN_TOKEN", "secret")
        monkeypatch.setenv("ROAST_LOG_LEVEL", "debug")
        monkeypatch.setenv("ROAST_DEBUG", "true")

        config = RegistryConfig.from_env()

        assert config.backend == "memory"
        assert config.database.url == "sqlite:///./other.db"
        assert config.storage.backend == "memory"
        assert config.auth.admin_token == "secret"
        assert config.log_level == "DEBUG"
        assert config.debug is True

    def test_async_url(self):
        assert async_url("sqlite:///./x.db") == "sqlite+aiosqlite:///./x.db"
        assert async_url("postgresql://u@h/db") == "postgresql+asyncpg://u@h/db"
        assert async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestRegistryFromConfig:
    def test_memory_backends(self):
        config = RegistryConfig()
        config.backend = "memory"
        config.storage.backend = "memory"

        registry = Registry.from_config(config)

        assert isinstance(registry.store, InMemoryPackageStore)
        assert isinstance(registry.blobs, InMemoryBlobStore)
        assert registry.database is None

    def test_sql_backend(self, sql_config: RegistryConfig):
        registry = Registry.from_config(sql_config)

        assert isinstance(registry.store, SqlPackageStore)
        assert isinstance(registry.blobs, LocalBlobStore)
        assert registry.database is not None

    @pytest.mark.parametrize("attr,value", [("backend", "redis"), ("storage.backend", "s3")])
    def test_unknown_backend(self, attr: str, value: str):
        config = RegistryConfig()
        config.backend = "memory"
        if attr == "backend":
            config.backend = value
        else:
            config.storage.backend = value

        with pytest.raises(ValueError):
            Registry.from_config(config)


class TestErrorResponses:
    def test_response_shape(self):
        error = GoneError("json-lib", "1.0.0")
        assert error.status_code == 410
        assert error.to_response() == {
            "error": {
                "code": "VERSION_YANKED",
                "kind": "Gone",
                "message": "Version '1.0.0' of 'json-lib' has been yanked",
            }
        }

    def test_details_included(self):
        error = InvalidInputError("bad", details=[ErrorDetail(field="name", error="too short")])
        assert error.to_response()["error"]["details"] == [{"field": "name", "error": "too short"}]

    def test_storage_failure_is_500(self):
        assert StorageFailureError().status_code == 500
        assert str(StorageFailureError("disk full")) == "disk full"
