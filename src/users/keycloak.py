"""Keycloak user lookups through the admin REST API.

An admin token is fetched with the client-credentials grant for every call;
profile fields that Keycloak keeps as custom attributes (``dni``,
``cellphone``, ...) are stored as single-element lists.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from src.api.schemas import UserProfileUpdateRequest
from src.core.config import Settings, get_settings
from src.core.exceptions import ResourceNotFoundError, UserServiceError, UserServiceUnavailable
from src.core.logging import get_logger
from src.core.models import UserProfile

logger = get_logger("users.keycloak")

PROFILE_ATTRIBUTES = ("dni", "cellphone", "state", "city", "address", "photo")


def _first_attribute(attributes: dict[str, Any], name: str) -> str | None:
    values = attributes.get(name)
    if isinstance(values, list):
        return values[0] if values else None
    return values


def to_profile(representation: dict[str, Any]) -> UserProfile:
    """Map a Keycloak user representation to a ``UserProfile``."""
    attributes = representation.get("attributes") or {}
    return UserProfile(
        id=representation["id"],
        username=representation.get("username"),
        email=representation.get("email"),
        first_name=representation.get("firstName"),
        last_name=representation.get("lastName"),
        **{name: _first_attribute(attributes, name) for name in PROFILE_ATTRIBUTES},
    )


class KeycloakClient:
    """Thin async client over the Keycloak admin API."""

    def __init__(self, settings: Settings | None = None, timeout: float = 10.0) -> None:
        self._settings = settings or get_settings()
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._settings.keycloak_url and self._settings.keycloak_client_secret)

    @property
    def _base(self) -> str:
        return self._settings.keycloak_url.rstrip("/")

    def _user_url(self, user_id: str) -> str:
        realm = self._settings.keycloak_realm
        return f"{self._base}/admin/realms/{realm}/users/{quote(user_id, safe='')}"

    async def _admin_token(self, client: httpx.AsyncClient) -> str:
        url = f"{self._base}/realms/{self._settings.keycloak_realm}/protocol/openid-connect/token"
        response = await client.post(
            url,
            data={
                "grant_type": "client_credentials",
                "client_id": self._settings.keycloak_client_id,
                "client_secret": self._settings.keycloak_client_secret,
            },
        )
        if response.status_code != 200:
            logger.error("keycloak_token_failed", status_code=response.status_code)
            raise UserServiceError(f"Keycloak token request returned {response.status_code}")
        return response.json()["access_token"]

    async def _request(self, method: str, user_id: str, **kwargs: Any) -> httpx.Response:
        if not self.configured:
            logger.warning("keycloak_not_configured")
            raise UserServiceUnavailable(
                "User service not configured. Set WINE_KEYCLOAK_URL and "
                "WINE_KEYCLOAK_CLIENT_SECRET in .env."
            )
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                token = await self._admin_token(client)
                response = await client.request(
                    method,
                    self._user_url(user_id),
                    headers={"Authorization": f"Bearer {token}"},
                    **kwargs,
                )
        except httpx.HTTPError as e:
            logger.error("keycloak_http_error", error=str(e))
            raise UserServiceUnavailable(f"User service unreachable: {e}") from e

        if response.status_code == 404:
            raise ResourceNotFoundError(f"User not found with ID: {user_id}")
        if response.status_code >= 400:
            logger.error(
                "keycloak_request_failed",
                method=method,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise UserServiceError(f"Keycloak returned {response.status_code}")
        return response

    async def get_user_representation(self, user_id: str) -> dict[str, Any]:
        response = await self._request("GET", user_id)
        return response.json()

    async def get_user(self, user_id: str) -> UserProfile:
        return to_profile(await self.get_user_representation(user_id))

    async def update_user(self, user_id: str, changes: UserProfileUpdateRequest) -> UserProfile:
        """Apply the non-null fields of ``changes`` and return the new profile.

        Keycloak replaces ``attributes`` wholesale, so the current attributes
        are read first and merged.
        """
        current = await self.get_user_representation(user_id)
        fields = changes.model_dump(exclude_none=True)

        payload: dict[str, Any] = {}
        for name, key in (("email", "email"), ("first_name", "firstName"), ("last_name", "lastName")):
            if name in fields:
                payload[key] = fields[name]

        attributes = dict(current.get("attributes") or {})
        for name in PROFILE_ATTRIBUTES:
            if name in fields:
                attributes[name] = [fields[name]]
        payload["attributes"] = attributes

        await self._request("PUT", user_id, json=payload)
        logger.info("keycloak_user_updated", user_id=user_id, fields=sorted(fields))
        return to_profile({**current, **payload})


_client: KeycloakClient | None = None


def get_keycloak_client() -> KeycloakClient:
    global _client
    if _client is None:
        _client = KeycloakClient()
    return _client
