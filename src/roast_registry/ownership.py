# SPDX-License-Identifier: MIT
"""Which identities may mutate which packages."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from .auth.identity import Identity, Role
from .db import Database
from .db.models import Owner
from .middleware.errors import ForbiddenError

logger = logging.getLogger(__name__)


def can_mutate(identity: Identity, owns: bool) -> bool:
    """Authorization rule for publish, yank and metadata updates."""
    return identity.role is Role.SUPERUSER or owns


class OwnershipRegistry(ABC):
    """Relation of (owner_id, package_name) pairs."""

    @abstractmethod
    async def grant(self, owner_id: str, package_name: str) -> None:
        """Record ownership. Granting twice is a no-op."""

    @abstractmethod
    async def revoke(self, owner_id: str, package_name: str) -> None:
        """Drop ownership. Revoking a missing grant is a no-op."""

    @abstractmethod
    async def owns_any(self, owner_id: str, package_name: str) -> bool:
        """Return True if the identity owns the package."""

    @abstractmethod
    async def packages_for(self, owner_id: str) -> list[str]:
        """Return the package names owned by an identity, sorted."""

    async def authorize(self, identity: Identity, package_name: str) -> None:
        """Raise ForbiddenError unless the identity may mutate the package."""
        if identity.role is Role.SUPERUSER:
            return
        if not can_mutate(identity, await self.owns_any(identity.owner_id, package_name)):
            logger.warning("Denied %s mutation of %s", identity.owner_id, package_name)
            raise ForbiddenError()


class InMemoryOwnershipRegistry(OwnershipRegistry):
    """Ownership relation held in a set."""

    def __init__(self) -> None:
        self._pairs: set[tuple[str, str]] = set()

    async def grant(self, owner_id: str, package_name: str) -> None:
        self._pairs.add((owner_id, package_name))

    async def revoke(self, owner_id: str, package_name: str) -> None:
        self._pairs.discard((owner_id, package_name))

    async def owns_any(self, owner_id: str, package_name: str) -> bool:
        return (owner_id, package_name) in self._pairs

    async def packages_for(self, owner_id: str) -> list[str]:
        return sorted(name for owner, name in self._pairs if owner == owner_id)


class SqlOwnershipRegistry(OwnershipRegistry):
    """Ownership relation persisted in the owners table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def grant(self, owner_id: str, package_name: str) -> None:
        async with self.database.session() as session:
            if await self._find(session, owner_id, package_name) is not None:
                return
            session.add(Owner(owner_id=owner_id, package_name=package_name))
            try:
                await session.commit()
            except IntegrityError:
                # lost a race with an identical grant
                await session.rollback()

    async def revoke(self, owner_id: str, package_name: str) -> None:
        async with self.database.session() as session:
            await session.execute(
                delete(Owner).where(Owner.owner_id == owner_id, Owner.package_name == package_name)
            )
            await session.commit()

    async def owns_any(self, owner_id: str, package_name: str) -> bool:
        async with self.database.session() as session:
            return await self._find(session, owner_id, package_name) is not None

    async def packages_for(self, owner_id: str) -> list[str]:
        async with self.database.session() as session:
            result = await session.execute(
                select(Owner.package_name).where(Owner.owner_id == owner_id).order_by(Owner.package_name)
            )
            return list(result.scalars().all())

    @staticmethod
    async def _find(session, owner_id: str, package_name: str):
        result = await session.execute(
            select(Owner.id).where(Owner.owner_id == owner_id, Owner.package_name == package_name)
        )
        return result.scalar_one_or_none()
