# SPDX-License-Identifier: MIT
"""Pydantic models for API requests and responses."""

from .package import (
    MetadataUpdateRequest,
    PackageListItem,
    PackageMetadata,
    VersionModel,
)
from .responses import (
    MessageResponse,
    PackageListResponse,
    PublishResponse,
    RegisterRequest,
    RegisterResponse,
    RegistryInfo,
    SearchResponse,
    StatsResponse,
)

__all__ = [
    "MessageResponse",
    "MetadataUpdateRequest",
    "PackageListItem",
    "PackageListResponse",
    "PackageMetadata",
    "PublishResponse",
    "RegisterRequest",
    "RegisterResponse",
    "RegistryInfo",
    "SearchResponse",
    "StatsResponse",
    "VersionModel",
]
