# SPDX-License-Identifier: MIT
"""Pydantic models for package data."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..publish import download_url
from ..records import DescriptiveUpdate, PackageRecord, VersionRecord


class VersionModel(BaseModel):
    """Version information with its download locator."""

    version: str
    published_at: datetime
    yanked: bool = False
    checksum: str
    size: int
    signature: str | None = None
    publisher_fingerprint: str | None = None
    download_url: str

    @classmethod
    def from_record(cls, record: VersionRecord, download_url: str) -> "VersionModel":
        return cls(
            version=record.version,
            published_at=record.published_at,
            yanked=record.yanked,
            checksum=record.checksum,
            size=record.size,
            signature=record.signature,
            publisher_fingerprint=record.publisher_fingerprint,
            download_url=download_url,
        )


class PackageMetadata(BaseModel):
    """Full package metadata."""

    name: str
    description: str = ""
    authors: list[str] = Field(default_factory=list)
    license: str
    repository: str | None = None
    homepage: str | None = None
    keywords: list[str] = Field(default_factory=list)
    downloads: int = 0
    latest_version: str | None = None
    versions: list[VersionModel] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, package: PackageRecord, api_prefix: str = "/api/v1") -> "PackageMetadata":
        latest = package.latest_version
        return cls(
            name=package.name,
            description=package.description,
            authors=package.authors,
            license=package.license,
            repository=package.repository,
            homepage=package.homepage,
            keywords=package.keywords,
            downloads=package.downloads,
            latest_version=latest.version if latest else None,
            versions=[
                VersionModel.from_record(v, download_url(package.name, v.version, api_prefix))
                for v in package.versions
            ],
            created_at=package.created_at,
            updated_at=package.updated_at,
        )


class PackageListItem(BaseModel):
    """Brief package information for listing."""

    name: str
    description: str = ""
    latest: str = Field(description='Newest non-yanked version, or "none"')

    @classmethod
    def from_record(cls, package: PackageRecord) -> "PackageListItem":
        latest = package.latest_version
        return cls(
            name=package.name,
            description=package.description,
            latest=latest.version if latest else "none",
        )


class MetadataUpdateRequest(BaseModel):
    """Partial update of descriptive package fields."""

    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    authors: list[str] | None = None
    license: str | None = Field(default=None, min_length=1)
    repository: str | None = None
    homepage: str | None = None
    keywords: list[str] | None = None

    @field_validator("description", "authors", "license", "keywords")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    def to_update(self) -> DescriptiveUpdate:
        """Convert to a store update; explicit nulls clear the field."""
        changes = self.model_dump(exclude_unset=True)
        return DescriptiveUpdate(**changes)
