# SPDX-License-Identifier: MIT
"""Pydantic models for API request and response wrappers."""

from pydantic import BaseModel, ConfigDict, Field

from .package import PackageListItem, PackageMetadata


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class PackageListResponse(BaseModel):
    """Response for package listing endpoint."""

    packages: list[PackageListItem]


class SearchResponse(BaseModel):
    """Response for search endpoint."""

    packages: list[PackageMetadata]


class PublishResponse(BaseModel):
    """Response for a successful publish."""

    message: str
    name: str
    version: str
    checksum: str = Field(description="Lowercase hex SHA256 of the stored tarball")
    size: int
    download_url: str


class RegisterRequest(BaseModel):
    """Request body for registering an identity."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)


class RegisterResponse(BaseModel):
    """Response for a successful registration."""

    message: str
    user_id: str
    api_token: str


class StatsResponse(BaseModel):
    """Aggregate registry counters."""

    total_packages: int = Field(ge=0)
    total_downloads: int = Field(ge=0)
    total_versions: int = Field(ge=0)


class RegistryInfo(BaseModel):
    """Registry description served at the API root."""

    name: str
    version: str
    api: str
    endpoints: dict[str, str]
