# SPDX-License-Identifier: MIT
"""Publish pipeline.

A publish moves through these stages, failing fast at each step:

    RECEIVED -> AUTHENTICATED -> VALIDATED -> CHECKSUM_COMPUTED
             -> SLOT_RESERVED -> BLOB_WRITTEN -> COMMITTED

Validation happens before any write. The version slot is reserved in the
package store before the blob is written, so a lost race never leaves an
orphaned blob. If the blob write fails, the reservation is released again
and the caller may retry the whole publish.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .auth.identity import Identity
from .checksum import compute_sha256
from .locks import KeyedLock
from .middleware.errors import (
    ErrorDetail,
    InvalidInputError,
    InvalidVersionError,
    StorageFailureError,
    UnauthenticatedError,
)
from .ownership import OwnershipRegistry
from .records import PackageDefaults, VersionRecord, is_valid_package_name, utc_now
from .store.base import PackageStore
from .store.blobs import BlobStore, BlobStoreError, blob_key
from .version import is_valid_version

logger = logging.getLogger(__name__)

DEFAULT_LICENSE = "MIT"


def download_url(name: str, version: str, api_prefix: str = "/api/v1") -> str:
    """Build the canonical download locator for a version."""
    return f"{api_prefix}/packages/{name}/{version}/download"


class PublishStage(str, enum.Enum):
    """Stages of a publish, in order."""

    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    VALIDATED = "validated"
    CHECKSUM_COMPUTED = "checksum_computed"
    SLOT_RESERVED = "slot_reserved"
    BLOB_WRITTEN = "blob_written"
    COMMITTED = "committed"


@dataclass
class PublishRequest:
    """Input to a publish."""

    name: str
    version: str
    body: bytes
    description: str = ""
    signature: Optional[str] = None
    fingerprint: Optional[str] = None


@dataclass
class PublishResult:
    """Outcome of a successful publish."""

    name: str
    version: str
    checksum: str
    size: int
    download_url: str
    created: bool

    @property
    def message(self) -> str:
        return f"Published {self.name}@{self.version}"


def validate_request(request: PublishRequest) -> None:
    """Check name, version and body.

    Raises:
        InvalidInputError: If the name is malformed or the body is empty
        InvalidVersionError: If the version does not match the grammar
    """
    if not request.body:
        raise InvalidInputError("Empty package tarball")

    if not request.name or not request.version:
        raise InvalidInputError("Missing X-Package-Name or X-Package-Version header")

    if not is_valid_package_name(request.name):
        raise InvalidInputError(
            "Invalid package name. Must start with lowercase letter and contain only "
            "lowercase letters, numbers, underscores, and hyphens.",
            details=[ErrorDetail(field="name", error="Must match ^[a-z][a-z0-9_-]*$", value=request.name)],
        )

    if not is_valid_version(request.version):
        raise InvalidVersionError(request.version)


class PublishPipeline:
    """Runs a publish from received request to committed version."""

    def __init__(
        self,
        store: PackageStore,
        blobs: BlobStore,
        owners: OwnershipRegistry,
        api_prefix: str = "/api/v1",
        default_license: str = DEFAULT_LICENSE,
    ) -> None:
        self.store = store
        self.blobs = blobs
        self.owners = owners
        self.api_prefix = api_prefix
        self.default_license = default_license
        # Authorization, reservation and ownership grant for one name
        # happen under one lock so two first-time publishers of a new
        # name cannot both be authorized.
        self._locks = KeyedLock()

    async def _discard_blob(self, key: str) -> None:
        """Remove whatever a failed write left under a reserved key.

        The slot was reserved by this publish, so any blob under the key is
        an orphan.
        """
        try:
            await self.blobs.delete(key)
        except BlobStoreError as e:
            logger.error("Could not discard blob %s after failed write: %s", key, e)

    def _advance(self, request: PublishRequest, stage: PublishStage) -> PublishStage:
        logger.debug("publish %s@%s: %s", request.name, request.version, stage.value)
        return stage

    async def publish(self, identity: Optional[Identity], request: PublishRequest) -> PublishResult:
        """Publish a new version.

        Raises:
            UnauthenticatedError: If no identity was resolved
            InvalidInputError: If name or body is invalid
            InvalidVersionError: If version is invalid
            ForbiddenError: If the package exists and the caller may not modify it
            VersionExistsError: If the version was already published
            StorageFailureError: If the artifact could not be stored
        """
        self._advance(request, PublishStage.RECEIVED)

        if identity is None:
            raise UnauthenticatedError()
        self._advance(request, PublishStage.AUTHENTICATED)

        validate_request(request)
        self._advance(request, PublishStage.VALIDATED)

        async with self._locks.acquire(request.name):
            if await self.store.exists(request.name):
                await self.owners.authorize(identity, request.name)

            checksum = compute_sha256(request.body)
            self._advance(request, PublishStage.CHECKSUM_COMPUTED)

            record = VersionRecord(
                version=request.version,
                checksum=checksum,
                size=len(request.body),
                published_at=utc_now(),
                yanked=False,
                signature=request.signature or None,
                publisher_fingerprint=request.fingerprint or None,
            )
            defaults = PackageDefaults(
                description=request.description or "",
                authors=[identity.name],
                license=self.default_license,
                keywords=[],
            )
            created = await self.store.create_or_append_version(request.name, record, defaults)
            self._advance(request, PublishStage.SLOT_RESERVED)

            key = blob_key(request.name, request.version)
            try:
                await self.blobs.put(
                    key,
                    request.body,
                    {
                        "checksum": checksum,
                        "publisher": identity.owner_id,
                        "published_at": record.published_at.isoformat(),
                    },
                )
            except BlobStoreError as e:
                logger.error("Blob write failed for %s@%s: %s", request.name, request.version, e)
                await self._discard_blob(key)
                await self.store.release_version(request.name, request.version, checksum)
                raise StorageFailureError("Failed to store package tarball") from e
            self._advance(request, PublishStage.BLOB_WRITTEN)

            if created:
                await self.owners.grant(identity.owner_id, request.name)
            self._advance(request, PublishStage.COMMITTED)

        logger.info(
            "Published %s@%s by %s (%d bytes, sha256=%s)",
            request.name,
            request.version,
            identity.owner_id,
            record.size,
            checksum,
        )
        return PublishResult(
            name=request.name,
            version=request.version,
            checksum=checksum,
            size=record.size,
            download_url=download_url(request.name, request.version, self.api_prefix),
            created=created,
        )
