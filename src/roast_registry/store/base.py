# SPDX-License-Identifier: MIT
"""Abstract package metadata store."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..middleware.errors import PackageNotFoundError
from ..records import DescriptiveUpdate, PackageDefaults, PackageRecord, RegistryStats, VersionRecord


class PackageStore(ABC):
    """Single authority over package and version records.

    Implementations must serialize mutations per package name and must
    never let two callers both insert the same version of a package.
    Operations on different names must not contend with each other.
    Names are assumed to be validated by the caller.
    """

    @abstractmethod
    async def get(self, name: str) -> PackageRecord:
        """Return a snapshot of the package.

        Raises:
            PackageNotFoundError: If no such package exists
        """

    @abstractmethod
    async def list(self) -> list[PackageRecord]:
        """Return snapshots of every package, most recently updated first."""

    @abstractmethod
    async def create_or_append_version(
        self,
        name: str,
        version: VersionRecord,
        defaults: PackageDefaults,
    ) -> bool:
        """Insert a version, creating the package from ``defaults`` if needed.

        Returns:
            True if the package was created by this call

        Raises:
            VersionExistsError: If the version string is already present
        """

    @abstractmethod
    async def release_version(self, name: str, version: str, checksum: str) -> None:
        """Remove a version reserved by a publish that could not complete.

        Only removes the version if its checksum matches. A package left
        with no versions is removed as well.
        """

    @abstractmethod
    async def set_yanked(self, name: str, version: str, yanked: bool) -> None:
        """Set the yank flag. Setting it to its current value is not an error.

        Raises:
            PackageNotFoundError: If no such package exists
            VersionNotFoundError: If the package has no such version
        """

    @abstractmethod
    async def increment_downloads(self, name: str) -> None:
        """Add one to the package download counter.

        Raises:
            PackageNotFoundError: If no such package exists
        """

    @abstractmethod
    async def update_descriptive_fields(self, name: str, update: DescriptiveUpdate) -> None:
        """Apply a partial update to descriptive fields.

        Raises:
            PackageNotFoundError: If no such package exists
        """

    @abstractmethod
    async def stats(self) -> RegistryStats:
        """Return aggregate counters."""

    async def exists(self, name: str) -> bool:
        try:
            await self.get(name)
        except PackageNotFoundError:
            return False
        return True

    async def close(self) -> None:
        """Release any resources held by the store."""
