# SPDX-License-Identifier: MIT
"""Package registry for publishing, searching and downloading Roast packages."""

__version__ = "0.1.0"

from .app import create_app
from .checksum import compute_sha256, verify_checksum
from .config import AuthConfig, DatabaseConfig, RegistryConfig, StorageConfig
from .middleware.errors import (
    ArtifactMissingError,
    ErrorCode,
    ErrorKind,
    ForbiddenError,
    GoneError,
    IdentityExistsError,
    InvalidInputError,
    InvalidVersionError,
    PackageNotFoundError,
    RegistryError,
    StorageFailureError,
    UnauthenticatedError,
    VersionExistsError,
    VersionNotFoundError,
)
from .publish import PublishPipeline, PublishRequest, PublishResult, PublishStage
from .records import DescriptiveUpdate, PackageDefaults, PackageRecord, RegistryStats, VersionRecord
from .registry import Artifact, Registry
from .search import SearchIndex

__all__ = [
    # App factory
    "create_app",
    # Registry
    "Artifact",
    "Registry",
    "PublishPipeline",
    "PublishRequest",
    "PublishResult",
    "PublishStage",
    "SearchIndex",
    # Records
    "DescriptiveUpdate",
    "PackageDefaults",
    "PackageRecord",
    "RegistryStats",
    "VersionRecord",
    # Configuration
    "AuthConfig",
    "DatabaseConfig",
    "RegistryConfig",
    "StorageConfig",
    # Checksum utilities
    "compute_sha256",
    "verify_checksum",
    # Errors
    "ArtifactMissingError",
    "ErrorCode",
    "ErrorKind",
    "ForbiddenError",
    "GoneError",
    "IdentityExistsError",
    "InvalidInputError",
    "InvalidVersionError",
    "PackageNotFoundError",
    "RegistryError",
    "StorageFailureError",
    "UnauthenticatedError",
    "VersionExistsError",
    "VersionNotFoundError",
]
