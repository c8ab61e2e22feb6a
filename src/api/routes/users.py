"""Customer profile endpoints backed by Keycloak."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from src.api.dependencies import get_user_client, require_customer
from src.api.schemas import UserProfileUpdateRequest
from src.core.models import Principal, UserProfile
from src.users.keycloak import KeycloakClient

router = APIRouter(prefix="/user")


@router.get("/profile", response_model=UserProfile)
async def get_profile(
    principal: Principal = Depends(require_customer),
    client: KeycloakClient = Depends(get_user_client),
) -> UserProfile:
    return await client.get_user(principal.customer_id)


@router.get("/kcprofile")
async def get_keycloak_profile(
    principal: Principal = Depends(require_customer),
    client: KeycloakClient = Depends(get_user_client),
) -> dict[str, Any]:
    """The raw Keycloak user representation."""
    return await client.get_user_representation(principal.customer_id)


@router.put("/profile", response_model=UserProfile)
async def update_profile(
    request: UserProfileUpdateRequest,
    principal: Principal = Depends(require_customer),
    client: KeycloakClient = Depends(get_user_client),
) -> UserProfile:
    return await client.update_user(principal.customer_id, request)
