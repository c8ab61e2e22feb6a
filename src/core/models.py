"""Core domain models shared across the API, services and user client."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Principal(BaseModel):
    """The authenticated caller, as forwarded by the gateway."""

    customer_id: str
    roles: frozenset[Role] = Field(default_factory=frozenset)

    def has_any(self, *roles: Role) -> bool:
        return any(role in self.roles for role in roles)

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @classmethod
    def from_headers(cls, user_id: str, roles_header: str | None) -> "Principal":
        """Build a principal from ``X-User-Id`` / ``X-User-Roles`` header values.

        Unknown role names are ignored; ``ROLE_`` prefixes and dashes are
        normalised so ``role_admin`` and ``admin`` both map to ``Role.ADMIN``.
        """
        roles: set[Role] = set()
        for raw in (roles_header or "").split(","):
            name = raw.strip().upper().replace("-", "_")
            if name.startswith("ROLE_"):
                name = name[len("ROLE_"):]
            if name in Role.__members__:
                roles.add(Role[name])
        return cls(customer_id=user_id, roles=frozenset(roles))


class UserProfile(BaseModel):
    """A customer profile as stored in Keycloak."""

    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dni: Optional[str] = None
    cellphone: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    photo: Optional[str] = None
