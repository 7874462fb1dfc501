# SPDX-License-Identifier: MIT
"""SQLAlchemy-backed package store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..db import Database
from ..db.models import Package, Version
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


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _version_to_record(row: Version) -> VersionRecord:
    return VersionRecord(
        version=row.version,
        checksum=row.checksum,
        size=row.size,
        published_at=_aware(row.published_at),
        yanked=row.yanked,
        signature=row.signature,
        publisher_fingerprint=row.publisher_fingerprint,
    )


def _package_to_record(row: Package) -> PackageRecord:
    versions = [_version_to_record(v) for v in sorted(row.versions, key=lambda v: v.id)]
    return PackageRecord(
        name=row.name,
        description=row.description or "",
        authors=list(row.authors or []),
        license=row.license,
        repository=row.repository,
        homepage=row.homepage,
        keywords=list(row.keywords or []),
        downloads=row.downloads,
        versions=sort_versions_desc(versions, key=lambda v: v.version),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SqlPackageStore(PackageStore):
    """Package store persisted through SQLAlchemy.

    Mutations on one name are serialized in-process by a keyed lock; the
    ``uq_package_version`` constraint backs that up across processes. An
    append that loses a cross-process race to create the package row is
    retried once against the row the other process inserted.
    """

    def __init__(self, database: Database) -> None:
        self.database = database
        self._locks = KeyedLock()

    async def get(self, name: str) -> PackageRecord:
        async with self.database.session() as session:
            query = select(Package).options(selectinload(Package.versions)).where(Package.name == name)
            result = await session.execute(query)
            package = result.scalar_one_or_none()
            if package is None:
                raise PackageNotFoundError(name)
            return _package_to_record(package)

    async def list(self) -> list[PackageRecord]:
        async with self.database.session() as session:
            query = (
                select(Package)
                .options(selectinload(Package.versions))
                .order_by(Package.updated_at.desc(), Package.name)
            )
            result = await session.execute(query)
            return [_package_to_record(p) for p in result.scalars().all()]

    async def _find_package(self, session: AsyncSession, name: str) -> Optional[Package]:
        result = await session.execute(select(Package).where(Package.name == name))
        return result.scalar_one_or_none()

    async def _has_version(self, name: str, version: str) -> bool:
        async with self.database.session() as session:
            result = await session.execute(
                select(Version.id).where(Version.package_name == name, Version.version == version)
            )
            return result.scalar_one_or_none() is not None

    async def _insert_version(self, name: str, version: VersionRecord, defaults: PackageDefaults) -> bool:
        async with self.database.session() as session:
            package = await self._find_package(session, name)
            now = utc_now()
            created = package is None

            if package is None:
                package = Package(
                    name=name,
                    description=defaults.description,
                    authors=list(defaults.authors),
                    license=defaults.license,
                    repository=defaults.repository,
                    homepage=defaults.homepage,
                    keywords=list(defaults.keywords),
                    downloads=0,
                    created_at=now,
                    updated_at=now,
                )
                session.add(package)
            else:
                existing = await session.execute(
                    select(Version.id).where(
                        Version.package_name == name,
                        Version.version == version.version,
                    )
                )
                if existing.scalar_one_or_none() is not None:
                    raise VersionExistsError(name, version.version)
                package.updated_at = now

            session.add(
                Version(
                    package_name=name,
                    version=version.version,
                    published_at=version.published_at,
                    yanked=version.yanked,
                    checksum=version.checksum,
                    size=version.size,
                    signature=version.signature,
                    publisher_fingerprint=version.publisher_fingerprint,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise
            return created

    async def create_or_append_version(
        self,
        name: str,
        version: VersionRecord,
        defaults: PackageDefaults,
    ) -> bool:
        async with self._locks.acquire(name):
            attempts = 2
            while True:
                attempts -= 1
                try:
                    return await self._insert_version(name, version, defaults)
                except IntegrityError as e:
                    if await self._has_version(name, version.version):
                        raise VersionExistsError(name, version.version) from e
                    if attempts == 0:
                        raise
                    # another process inserted the package row first
                    logger.info("Package %s was created concurrently, appending %s", name, version.version)

    async def release_version(self, name: str, version: str, checksum: str) -> None:
        async with self._locks.acquire(name):
            async with self.database.session() as session:
                query = select(Package).options(selectinload(Package.versions)).where(Package.name == name)
                package = (await session.execute(query)).scalar_one_or_none()
                if package is None:
                    return
                row = next(
                    (v for v in package.versions if v.version == version and v.checksum == checksum),
                    None,
                )
                if row is None:
                    return
                package.versions.remove(row)
                if not package.versions:
                    await session.delete(package)
                else:
                    package.updated_at = utc_now()
                await session.commit()
                logger.info("Released %s %s", name, version)

    async def set_yanked(self, name: str, version: str, yanked: bool) -> None:
        async with self._locks.acquire(name):
            async with self.database.session() as session:
                package = await session.get(Package, name)
                if package is None:
                    raise PackageNotFoundError(name)
                result = await session.execute(
                    select(Version).where(Version.package_name == name, Version.version == version)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    raise VersionNotFoundError(name, version)
                row.yanked = yanked
                package.updated_at = utc_now()
                await session.commit()

    async def increment_downloads(self, name: str) -> None:
        async with self._locks.acquire(name):
            async with self.database.session() as session:
                result = await session.execute(
                    update(Package)
                    .where(Package.name == name)
                    .values(downloads=Package.downloads + 1)
                )
                if result.rowcount == 0:
                    raise PackageNotFoundError(name)
                await session.commit()

    async def update_descriptive_fields(self, name: str, update: DescriptiveUpdate) -> None:
        async with self._locks.acquire(name):
            async with self.database.session() as session:
                package = await session.get(Package, name)
                if package is None:
                    raise PackageNotFoundError(name)
                for field_name, value in update.changes().items():
                    setattr(package, field_name, list(value) if isinstance(value, list) else value)
                package.updated_at = utc_now()
                await session.commit()

    async def stats(self) -> RegistryStats:
        async with self.database.session() as session:
            packages = (await session.execute(select(func.count()).select_from(Package))).scalar()
            downloads = (await session.execute(select(func.sum(Package.downloads)))).scalar()
            versions = (await session.execute(select(func.count()).select_from(Version))).scalar()
            return RegistryStats(
                total_packages=packages or 0,
                total_downloads=downloads or 0,
                total_versions=versions or 0,
            )
