# SPDX-License-Identifier: MIT
"""Identity registration and token lookup."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..db import Database
from ..db.models import APIToken, User
from ..middleware.errors import IdentityExistsError, InvalidInputError
from .identity import Identity, Role
from .tokens import generate_api_token, hash_token

logger = logging.getLogger(__name__)


def _validate_registration(email: str, name: str) -> None:
    if not email or not name:
        raise InvalidInputError("Missing email or name")


class IdentityStore(ABC):
    """Stores registered identities and their API tokens."""

    @abstractmethod
    async def register(self, email: str, name: str) -> tuple[Identity, str]:
        """Register a new identity.

        Returns:
            Tuple of (identity, plaintext API token)

        Raises:
            InvalidInputError: If email or name is empty
            IdentityExistsError: If the email is already registered
        """

    @abstractmethod
    async def resolve_token(self, token: str) -> Optional[Identity]:
        """Return the identity owning a token, or None."""


class InMemoryIdentityStore(IdentityStore):
    """Identity store held in dicts."""

    def __init__(self) -> None:
        self._by_id: dict[str, Identity] = {}
        self._by_email: dict[str, str] = {}
        self._tokens: dict[str, str] = {}

    async def register(self, email: str, name: str) -> tuple[Identity, str]:
        _validate_registration(email, name)
        if email in self._by_email:
            raise IdentityExistsError(email)

        identity = Identity(owner_id=str(uuid.uuid4()), name=name, email=email)
        token, token_hash = generate_api_token()
        self._by_id[identity.owner_id] = identity
        self._by_email[email] = identity.owner_id
        self._tokens[token_hash] = identity.owner_id
        logger.info("Registered identity %s", identity.owner_id)
        return identity, token

    async def resolve_token(self, token: str) -> Optional[Identity]:
        owner_id = self._tokens.get(hash_token(token))
        if owner_id is None:
            return None
        return self._by_id.get(owner_id)


class SqlIdentityStore(IdentityStore):
    """Identity store persisted in the users and api_tokens tables."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def register(self, email: str, name: str) -> tuple[Identity, str]:
        _validate_registration(email, name)
        async with self.database.session() as session:
            existing = await session.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                raise IdentityExistsError(email)

            user = User(id=str(uuid.uuid4()), email=email, name=name, role=Role.OWNER.value)
            token, token_hash = generate_api_token()
            session.add(user)
            session.add(APIToken(token_hash=token_hash, user_id=user.id))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise IdentityExistsError(email) from e

        logger.info("Registered identity %s", user.id)
        return Identity(owner_id=user.id, name=name, email=email), token

    async def resolve_token(self, token: str) -> Optional[Identity]:
        async with self.database.session() as session:
            query = (
                select(User)
                .join(APIToken, APIToken.user_id == User.id)
                .where(APIToken.token_hash == hash_token(token))
            )
            user = (await session.execute(query)).scalar_one_or_none()
            if user is None:
                return None
            return Identity(owner_id=user.id, name=user.name, email=user.email, role=Role(user.role))
