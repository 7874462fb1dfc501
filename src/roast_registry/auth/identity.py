# SPDX-License-Identifier: MIT
"""Resolved caller identities."""

import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    """Authorization role attached to an identity."""

    OWNER = "owner"
    SUPERUSER = "superuser"


@dataclass(frozen=True)
class Identity:
    """An authenticated caller.

    Attributes:
        owner_id: Stable identifier used in ownership records
        name: Display name, used as the default author of new packages
        email: Contact address
        role: OWNER for ordinary users, SUPERUSER for administrators
    """

    owner_id: str
    name: str
    email: str = ""
    role: Role = Role.OWNER

    @property
    def is_superuser(self) -> bool:
        return self.role is Role.SUPERUSER
