"""FastAPI dependency injection."""

from __future__ import annotations

from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.models import Principal, Role
from src.db.engine import get_session_factory
from src.users.keycloak import KeycloakClient, get_keycloak_client


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session


async def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_roles: Optional[str] = Header(default=None),
) -> Principal:
    """The caller identity forwarded by the gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    return Principal.from_headers(x_user_id.strip(), x_user_roles)


def require_roles(*roles: Role) -> Callable[..., Principal]:
    async def checker(principal: Principal = Depends(get_principal)) -> Principal:
        if not principal.has_any(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return principal

    return checker


require_customer = require_roles(Role.USER, Role.ADMIN)
require_admin = require_roles(Role.ADMIN)


def get_user_client() -> KeycloakClient:
    return get_keycloak_client()
