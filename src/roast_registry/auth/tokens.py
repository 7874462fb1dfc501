# SPDX-License-Identifier: MIT
"""Bearer token authentication."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import TYPE_CHECKING, Annotated, Optional

from fastapi import Header, Request

from ..middleware.errors import UnauthenticatedError
from .identity import Identity, Role

if TYPE_CHECKING:
    from .identities import IdentityStore

TOKEN_PREFIX = "rst_"

ADMIN_IDENTITY = Identity(owner_id="admin", name="Admin", email="admin@roast-lang.org", role=Role.SUPERUSER)


def generate_api_token() -> tuple[str, str]:
    """Generate a new API token.

    Returns:
        Tuple of (token, token_hash) where token is the plaintext token
        to give to the user and token_hash is what gets stored.
    """
    token = f"{TOKEN_PREFIX}{secrets.token_urlsafe(32)}"
    return token, hash_token(token)


def hash_token(token: str) -> str:
    """Hash a token for comparison with stored hash."""
    return hashlib.sha256(token.encode()).hexdigest()


def parse_authorization_header(auth_header: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The extracted token or None if header is missing or not a bearer token.
    """
    if not auth_header:
        return None

    auth_header = auth_header.strip()
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
        return token or None

    return None


class Authenticator:
    """Resolves bearer tokens to identities.

    The configured admin token resolves to a SUPERUSER identity; every
    other token is looked up in the identity store.
    """

    def __init__(self, identities: "IdentityStore", admin_token: Optional[str] = None) -> None:
        self.identities = identities
        self.admin_token = admin_token

    async def authenticate(self, token: str | None) -> Identity:
        """Resolve a token to an identity.

        Raises:
            UnauthenticatedError: If the token is missing or unknown
        """
        if not token:
            raise UnauthenticatedError("Authentication required")

        if self.admin_token and hmac.compare_digest(token.encode(), self.admin_token.encode()):
            return ADMIN_IDENTITY

        identity = await self.identities.resolve_token(token)
        if identity is None:
            raise UnauthenticatedError("Invalid authentication token")
        return identity


async def get_current_identity(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """FastAPI dependency resolving the caller from the Authorization header.

    Raises:
        UnauthenticatedError: If no valid authentication is provided
    """
    authenticator: Authenticator = request.app.state.registry.authenticator
    return await authenticator.authenticate(parse_authorization_header(authorization))
