# SPDX-License-Identifier: MIT
"""Registry server configuration."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DatabaseConfig:
    """Database connection configuration (used by the "sql" backend)."""

    url: str = "sqlite:///./roast_registry.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass
class StorageConfig:
    """Package tarball storage configuration."""

    backend: str = "local"  # "local" or "memory"
    local_path: str = "./tarballs"


@dataclass
class AuthConfig:
    """Authentication configuration."""

    admin_token: Optional[str] = None


@dataclass
class RegistryConfig:
    """Main registry configuration."""

    # Server settings
    title: str = "Roast Package Registry"
    description: str = "Registry for publishing and discovering Roast packages"
    registry_name: str = "Roast Package Registry"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Metadata backend: "memory" or "sql"
    backend: str = "sql"
    default_license: str = "MIT"

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    # API settings
    api_prefix: str = "/api/v1"
    docs_url: str = "/docs"
    openapi_url: str = "/openapi.json"

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Create configuration from environment variables."""
        import os

        config = cls()

        if backend := os.getenv("ROAST_BACKEND"):
            config.backend = backend
        if registry_name := os.getenv("ROAST_REGISTRY_NAME"):
            config.registry_name = registry_name

        # Database
        if db_url := os.getenv("ROAST_DATABASE_URL"):
            config.database.url = db_url
        config.database.echo = os.getenv("ROAST_DATABASE_ECHO", "").lower() == "true"

        # Storage
        if storage_backend := os.getenv("ROAST_STORAGE_BACKEND"):
            config.storage.backend = storage_backend
        if local_path := os.getenv("ROAST_STORAGE_LOCAL_PATH"):
            config.storage.local_path = local_path

        # Auth
        if admin_token := os.getenv("ROAST_ADMIN_TOKEN"):
            config.auth.admin_token = admin_token

        # Logging and debug
        if log_level := os.getenv("ROAST_LOG_LEVEL"):
            config.log_level = log_level.upper()
        config.debug = os.getenv("ROAST_DEBUG", "").lower() == "true"

        return config
