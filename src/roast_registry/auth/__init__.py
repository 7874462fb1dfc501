# SPDX-License-Identifier: MIT
"""Authentication handlers."""

from .identity import Identity, Role
from .tokens import (
    ADMIN_IDENTITY,
    Authenticator,
    generate_api_token,
    get_current_identity,
    hash_token,
    parse_authorization_header,
)
from .identities import IdentityStore, InMemoryIdentityStore, SqlIdentityStore

__all__ = [
    "ADMIN_IDENTITY",
    "Authenticator",
    "Identity",
    "IdentityStore",
    "InMemoryIdentityStore",
    "Role",
    "SqlIdentityStore",
    "generate_api_token",
    "get_current_identity",
    "hash_token",
    "parse_authorization_header",
]
