# SPDX-License-Identifier: MIT
"""In-memory package store."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..locks import KeyedLock
from ..middleware.errors import PackageNotFoundError, VersionExistsError, VersionNotFoundError
from ..records import (
    DescriptiveUpdate,
    PackageDefaults,
    PackageRecord,
    RegistryStats,
    VersionRecord,
    utc_now,
)
from ..version import sort_versions_desc
from .base import PackageStore

logger = logging.getLogger(__name__)


class InMemoryPackageStore(PackageStore):
    """Package store backed by a dict, with one lock per package name.

    Readers get deep copies, so they never observe a record while a
    writer is halfway through changing it.
    """

    def __init__(self) -> None:
        self._packages: dict[str, PackageRecord] = {}
        self._locks = KeyedLock()

    def _require(self, name: str) -> PackageRecord:
        package = self._packages.get(name)
        if package is None:
            raise PackageNotFoundError(name)
        return package

    async def get(self, name: str) -> PackageRecord:
        return self._require(name).snapshot()

    async def list(self) -> list[PackageRecord]:
        packages = [p.snapshot() for p in self._packages.values()]
        packages.sort(key=lambda p: p.updated_at, reverse=True)
        return packages

    async def create_or_append_version(
        self,
        name: str,
        version: VersionRecord,
        defaults: PackageDefaults,
    ) -> bool:
        async with self._locks.acquire(name):
            package = self._packages.get(name)
            created = package is None
            if package is None:
                package = PackageRecord.from_defaults(name, defaults)
            elif package.find_version(version.version) is not None:
                raise VersionExistsError(name, version.version)

            package.versions = sort_versions_desc(
                [*package.versions, replace(version)], key=lambda v: v.version
            )
            package.updated_at = utc_now()
            self._packages[name] = package
            return created

    async def release_version(self, name: str, version: str, checksum: str) -> None:
        async with self._locks.acquire(name):
            package = self._packages.get(name)
            if package is None:
                return
            record = package.find_version(version)
            if record is None or record.checksum != checksum:
                return
            package.versions = [v for v in package.versions if v is not record]
            if not package.versions:
                del self._packages[name]
                logger.info("Released %s %s and removed empty package", name, version)
            else:
                package.updated_at = utc_now()
                logger.info("Released %s %s", name, version)

    async def set_yanked(self, name: str, version: str, yanked: bool) -> None:
        async with self._locks.acquire(name):
            package = self._require(name)
            record = package.find_version(version)
            if record is None:
                raise VersionNotFoundError(name, version)
            record.yanked = yanked
            package.updated_at = utc_now()

    async def increment_downloads(self, name: str) -> None:
        async with self._locks.acquire(name):
            self._require(name).downloads += 1

    async def update_descriptive_fields(self, name: str, update: DescriptiveUpdate) -> None:
        async with self._locks.acquire(name):
            package = self._require(name)
            for field_name, value in update.changes().items():
                setattr(package, field_name, list(value) if isinstance(value, list) else value)
            package.updated_at = utc_now()

    async def stats(self) -> RegistryStats:
        packages = list(self._packages.values())
        return RegistryStats(
            total_packages=len(packages),
            total_downloads=sum(p.downloads for p in packages),
            total_versions=sum(len(p.versions) for p in packages),
        )
