# SPDX-License-Identifier: MIT
"""Core record types for packages and versions."""

from __future__ import annotations

import copy
import enum
import re
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from typing import Any, Optional

PACKAGE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

DESCRIPTIVE_FIELDS = ("description", "authors", "license", "repository", "homepage", "keywords")


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def is_valid_package_name(name: str) -> bool:
    """Check a package name against the registry naming rule."""
    return isinstance(name, str) and PACKAGE_NAME_PATTERN.match(name) is not None


@dataclass
class VersionRecord:
    """One published version of a package.

    Only ``yanked`` may change after creation.
    """

    version: str
    checksum: str
    size: int
    published_at: datetime = field(default_factory=utc_now)
    yanked: bool = False
    signature: Optional[str] = None
    publisher_fingerprint: Optional[str] = None


@dataclass
class PackageDefaults:
    """Descriptive fields used when a publish creates a new package."""

    description: str = ""
    authors: list[str] = field(default_factory=list)
    license: str = "MIT"
    keywords: list[str] = field(default_factory=list)
    repository: Optional[str] = None
    homepage: Optional[str] = None


class _Unset(enum.Enum):
    """Marker for a field a partial update leaves alone."""

    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset.UNSET

# Descriptive fields that may be cleared back to None
NULLABLE_FIELDS = ("repository", "homepage")


@dataclass
class DescriptiveUpdate:
    """Partial update of a package's descriptive fields.

    Fields left as UNSET are not touched. ``repository`` and ``homepage``
    may be set to None to clear them; the other fields cannot be cleared.
    """

    description: Optional[str] = UNSET
    authors: Optional[list[str]] = UNSET
    license: Optional[str] = UNSET
    repository: Optional[str] = UNSET
    homepage: Optional[str] = UNSET
    keywords: Optional[list[str]] = UNSET

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) is None and f.name not in NULLABLE_FIELDS:
                raise ValueError(f"{f.name} cannot be cleared")

    def changes(self) -> dict:
        """Return only the fields that were provided, None included."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}


@dataclass
class PackageRecord:
    """Metadata for one package name and all its versions."""

    name: str
    description: str = ""
    authors: list[str] = field(default_factory=list)
    license: str = "MIT"
    repository: Optional[str] = None
    homepage: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    downloads: int = 0
    versions: list[VersionRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_defaults(cls, name: str, defaults: PackageDefaults) -> "PackageRecord":
        now = utc_now()
        return cls(
            name=name,
            description=defaults.description,
            authors=list(defaults.authors),
            license=defaults.license,
            repository=defaults.repository,
            homepage=defaults.homepage,
            keywords=list(defaults.keywords),
            created_at=now,
            updated_at=now,
        )

    @property
    def latest_version(self) -> Optional[VersionRecord]:
        """Newest version that has not been yanked."""
        for version in self.versions:
            if not version.yanked:
                return version
        return None

    def find_version(self, version: str) -> Optional[VersionRecord]:
        for record in self.versions:
            if record.version == version:
                return record
        return None

    def snapshot(self) -> "PackageRecord":
        """Return a deep copy safe to hand to readers."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class RegistryStats:
    """Aggregate registry counters."""

    total_packages: int = 0
    total_downloads: int = 0
    total_versions: int = 0
