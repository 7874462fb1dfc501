# SPDX-License-Identifier: MIT
"""Registry facade composing the store, blobs, ownership and search."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .auth.identities import IdentityStore, InMemoryIdentityStore, SqlIdentityStore
from .auth.identity import Identity
from .auth.tokens import Authenticator
from .checksum import verify_checksum
from .config import RegistryConfig
from .db import Database
from .downloads import DownloadCounter
from .middleware.errors import (
    ArtifactMissingError,
    GoneError,
    StorageFailureError,
    VersionNotFoundError,
)
from .ownership import InMemoryOwnershipRegistry, OwnershipRegistry, SqlOwnershipRegistry
from .publish import PublishPipeline, PublishRequest, PublishResult, download_url
from .records import DescriptiveUpdate, PackageRecord, RegistryStats
from .search import SearchIndex
from .store.base import PackageStore
from .store.blobs import (
    BlobNotFoundError,
    BlobStore,
    BlobStoreError,
    InMemoryBlobStore,
    LocalBlobStore,
    blob_key,
)
from .store.memory import InMemoryPackageStore
from .store.sql import SqlPackageStore

logger = logging.getLogger(__name__)


@dataclass
class Artifact:
    """Bytes of a stored version plus the integrity data to surface."""

    name: str
    version: str
    data: bytes
    checksum: str
    size: int

    @property
    def filename(self) -> str:
        return f"{self.name}-{self.version}.tar.gz"


class Registry:
    """Entry point for every registry operation."""

    def __init__(
        self,
        store: PackageStore,
        blobs: BlobStore,
        owners: OwnershipRegistry,
        identities: IdentityStore,
        admin_token: Optional[str] = None,
        api_prefix: str = "/api/v1",
        default_license: str = "MIT",
        database: Optional[Database] = None,
    ) -> None:
        self.store = store
        self.blobs = blobs
        self.owners = owners
        self.identities = identities
        self.api_prefix = api_prefix
        self.database = database
        self.authenticator = Authenticator(identities, admin_token=admin_token)
        self.index = SearchIndex(store)
        self.counter = DownloadCounter(store)
        self.pipeline = PublishPipeline(
            store, blobs, owners, api_prefix=api_prefix, default_license=default_license
        )

    @classmethod
    def in_memory(cls, admin_token: Optional[str] = None, api_prefix: str = "/api/v1") -> "Registry":
        """Build a registry on the reference in-memory backends."""
        return cls(
            store=InMemoryPackageStore(),
            blobs=InMemoryBlobStore(),
            owners=InMemoryOwnershipRegistry(),
            identities=InMemoryIdentityStore(),
            admin_token=admin_token,
            api_prefix=api_prefix,
        )

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "Registry":
        """Build a registry from configuration. Call ``start()`` before use."""
        if config.storage.backend == "local":
            blobs: BlobStore = LocalBlobStore(config.storage.local_path)
        elif config.storage.backend == "memory":
            blobs = InMemoryBlobStore()
        else:
            raise ValueError(f"Unknown storage backend: {config.storage.backend}")

        common = dict(
            blobs=blobs,
            admin_token=config.auth.admin_token,
            api_prefix=config.api_prefix,
            default_license=config.default_license,
        )
        if config.backend == "memory":
            return cls(
                store=InMemoryPackageStore(),
                owners=InMemoryOwnershipRegistry(),
                identities=InMemoryIdentityStore(),
                **common,
            )
        if config.backend == "sql":
            database = Database.from_config(config.database)
            return cls(
                store=SqlPackageStore(database),
                owners=SqlOwnershipRegistry(database),
                identities=SqlIdentityStore(database),
                database=database,
                **common,
            )
        raise ValueError(f"Unknown metadata backend: {config.backend}")

    async def start(self) -> None:
        if self.database is not None:
            await self.database.create_all()

    async def close(self) -> None:
        await self.counter.drain()
        await self.store.close()
        if self.database is not None:
            await self.database.dispose()

    # Read paths

    async def get_package(self, name: str) -> PackageRecord:
        """Return package metadata and count the read as a download.

        The counter update is scheduled in the background; the returned
        record reflects the count before this read.
        """
        package = await self.store.get(name)
        self.counter.schedule(name)
        return package

    async def list_packages(self) -> list[PackageRecord]:
        return await self.store.list()

    async def search(self, query: str) -> list[PackageRecord]:
        return await self.index.search(query)

    async def stats(self) -> RegistryStats:
        return await self.store.stats()

    def download_url(self, name: str, version: str) -> str:
        return download_url(name, version, self.api_prefix)

    async def download(self, name: str, version: str) -> Artifact:
        """Fetch the artifact for a version.

        Raises:
            PackageNotFoundError: If the package does not exist
            VersionNotFoundError: If the version does not exist
            GoneError: If the version has been yanked
            ArtifactMissingError: If the metadata exists but the blob does not
            StorageFailureError: If the blob could not be read or fails checksum verification
        """
        package = await self.store.get(name)
        record = package.find_version(version)
        if record is None:
            raise VersionNotFoundError(name, version)
        if record.yanked:
            raise GoneError(name, version)

        try:
            data = await self.blobs.get(blob_key(name, version))
        except BlobNotFoundError:
            logger.error("Blob missing for %s@%s although metadata exists", name, version)
            raise ArtifactMissingError(name, version) from None
        except BlobStoreError as e:
            raise StorageFailureError("Failed to read package tarball") from e

        if not verify_checksum(data, record.checksum):
            logger.error("Checksum mismatch for %s@%s: stored tarball differs from its record", name, version)
            raise StorageFailureError("Stored package tarball failed checksum verification")

        return Artifact(name=name, version=version, data=data, checksum=record.checksum, size=record.size)

    # Write paths

    async def publish(self, identity: Optional[Identity], request: PublishRequest) -> PublishResult:
        return await self.pipeline.publish(identity, request)

    async def set_yanked(self, identity: Identity, name: str, version: str, yanked: bool) -> None:
        """Yank or unyank a version.

        Raises:
            PackageNotFoundError: If the package does not exist
            VersionNotFoundError: If the version does not exist
            ForbiddenError: If the caller may not modify the package
        """
        package = await self.store.get(name)
        if package.find_version(version) is None:
            raise VersionNotFoundError(name, version)
        await self.owners.authorize(identity, name)
        await self.store.set_yanked(name, version, yanked)
        logger.info("%s %s@%s by %s", "Yanked" if yanked else "Unyanked", name, version, identity.owner_id)

    async def update_metadata(self, identity: Identity, name: str, update: DescriptiveUpdate) -> PackageRecord:
        """Apply a partial descriptive update and return the new record."""
        await self.store.get(name)
        await self.owners.authorize(identity, name)
        await self.store.update_descriptive_fields(name, update)
        logger.info("Updated %s metadata fields %s by %s", name, sorted(update.changes()), identity.owner_id)
        return await self.store.get(name)

    async def register_identity(self, email: str, name: str) -> tuple[Identity, str]:
        return await self.identities.register(email, name)
