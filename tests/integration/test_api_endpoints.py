"""Integration tests for FastAPI API endpoints.

Uses httpx.AsyncClient with the FastAPI app, overriding DB dependencies
to use in-memory SQLite.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.dependencies import get_db_session, get_user_client
from src.core.exceptions import ResourceNotFoundError, UserServiceUnavailable
from src.core.models import UserProfile
from src.users.keycloak import KeycloakClient

CUSTOMER = {"X-User-Id": "customer-1", "X-User-Roles": "user"}
OTHER = {"X-User-Id": "customer-2", "X-User-Roles": "user"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Roles": "admin"}


# ── Test fixtures ───────────────────────────────────────────────


@pytest.fixture
def mock_user_client():
    client = MagicMock(spec=KeycloakClient)
    client.get_user = AsyncMock(
        return_value=UserProfile(id="customer-1", username="jdoe", city="Mendoza")
    )
    client.get_user_representation = AsyncMock(return_value={"id": "customer-1"})
    client.update_user = AsyncMock(
        return_value=UserProfile(id="customer-1", username="jdoe", city="Cordoba")
    )
    return client


@pytest.fixture
async def client(session_factory, mock_user_client):
    """Create a test client with overridden dependencies."""
    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_user_client] = lambda: mock_user_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Health & metrics ────────────────────────────────────────────


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_returns_ok(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": "wine-commerce"}


class TestMetricsEndpoint:
    @pytest.mark.asyncio
    async def test_metrics_format(self, client, catalog):
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        assert "text/plain" in resp.headers["content-type"]
        assert "wine_products_total 3" in resp.text
        assert "wine_orders_total 0" in resp.text
        assert "wine_uptime_seconds" in resp.text


# ── Authorization ───────────────────────────────────────────────


class TestAuthorization:
    @pytest.mark.asyncio
    async def test_missing_identity_is_401(self, client):
        resp = await client.get("/api/v1/order/all")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_customer_on_admin_route_is_403(self, client):
        resp = await client.get("/api/v1/order/all-admin", headers=CUSTOMER)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_role_is_403(self, client):
        resp = await client.get(
            "/api/v1/cart/all", headers={"X-User-Id": "x", "X-User-Roles": "guest"}
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_catalog_reads_are_public(self, client, catalog):
        resp = await client.get("/api/v1/product/all")
        assert resp.status_code == 200
        assert len(resp.json()) == 3

    @pytest.mark.asyncio
    async def test_catalog_writes_need_admin(self, client):
        resp = await client.post("/api/v1/winery/create", json={"name": "X"}, headers=CUSTOMER)
        assert resp.status_code == 403


# ── Catalog ─────────────────────────────────────────────────────


class TestCatalogEndpoints:
    @pytest.mark.asyncio
    async def test_taxonomy_crud(self, client):
        resp = await client.post("/api/v1/type/create", json={"name": "Rose"}, headers=ADMIN)
        assert resp.status_code == 201
        type_id = resp.json()["id"]

        resp = await client.put(
            "/api/v1/type/update", json={"id": type_id, "name": "Rosado"}, headers=ADMIN
        )
        assert resp.json()["name"] == "Rosado"

        resp = await client.get(f"/api/v1/type/id/{type_id}")
        assert resp.json() == {"id": type_id, "name": "Rosado"}

        resp = await client.delete(f"/api/v1/type/delete/{type_id}", headers=ADMIN)
        assert resp.status_code == 204

        resp = await client.get(f"/api/v1/type/id/{type_id}")
        assert resp.status_code == 404
        assert resp.json()["detail"] == f"Type not found with ID: {type_id}"

    @pytest.mark.asyncio
    async def test_blank_taxonomy_name_is_400(self, client):
        resp = await client.post("/api/v1/variety/create", json={"name": ""}, headers=ADMIN)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_product_create_and_filters(self, client, catalog):
        payload = {
            "name": "Torrontes",
            "description": "Floral",
            "image": "t.png",
            "year": 2022,
            "price": 12.0,
            "stock": 40,
            "id_winery": catalog.winery.id,
            "id_variety": catalog.variety.id,
            "id_type": catalog.sparkling.id,
        }
        resp = await client.post("/api/v1/product/create", json=payload, headers=ADMIN)
        assert resp.status_code == 201

        resp = await client.get(f"/api/v1/product/type/{catalog.sparkling.id}")
        assert {p["name"] for p in resp.json()} == {"Brut Nature", "Torrontes"}

        resp = await client.get("/api/v1/product/winery/999")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_random_products(self, client, catalog):
        resp = await client.get("/api/v1/product/random")
        assert resp.status_code == 200
        assert len(resp.json()) == 3


# ── Orders, details and carts ───────────────────────────────────


class TestOrderEndpoints:
    async def _create_order(self, client, catalog, quantity=2):
        return await client.post(
            "/api/v1/order/create",
            json={
                "shipping_address": "Calle 1",
                "order_email": "c@example.com",
                "order_details": [{"id_product": catalog.malbec.id, "quantity": quantity}],
            },
            headers=CUSTOMER,
        )

    @pytest.mark.asyncio
    async def test_create_order_reserves_stock(self, client, catalog):
        resp = await self._create_order(client, catalog)
        assert resp.status_code == 201
        body = resp.json()
        assert body["id_customer"] == "customer-1"
        assert body["total_price"] == 40.0

        resp = await client.get(f"/api/v1/product/id/{catalog.malbec.id}")
        assert resp.json()["stock"] == 8

    @pytest.mark.asyncio
    async def test_insufficient_stock_is_400(self, client, catalog):
        resp = await self._create_order(client, catalog, quantity=11)
        assert resp.status_code == 400
        assert "Insufficient stock" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_other_customer_cannot_delete(self, client, catalog):
        order_id = (await self._create_order(client, catalog)).json()["id"]
        resp = await client.delete(f"/api/v1/order/delete/{order_id}", headers=OTHER)
        assert resp.status_code == 403

        resp = await client.delete(f"/api/v1/order/delete/{order_id}", headers=CUSTOMER)
        assert resp.status_code == 204

    @pytest.mark.asyncio
    async def test_detail_update_and_last_line_delete(self, client, catalog):
        order_id = (await self._create_order(client, catalog)).json()["id"]

        resp = await client.get(f"/api/v1/order-details/all/order-id/{order_id}", headers=CUSTOMER)
        detail_id = resp.json()[0]["id"]

        resp = await client.put(
            "/api/v1/order-details/update",
            json={"id": detail_id, "id_order": order_id, "quantity": 3},
            headers=CUSTOMER,
        )
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 3

        resp = await client.delete(f"/api/v1/order-details/delete/{detail_id}", headers=CUSTOMER)
        assert resp.status_code == 204

        resp = await client.get("/api/v1/order/all", headers=CUSTOMER)
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_list_details_without_orders(self, client):
        resp = await client.get("/api/v1/order-details/all", headers=CUSTOMER)
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_admin_force_delete_detail(self, client, catalog):
        resp = await client.post(
            "/api/v1/order/create",
            json={
                "shipping_address": "Calle 1",
                "order_email": "c@example.com",
                "order_details": [
                    {"id_product": catalog.malbec.id, "quantity": 2},
                    {"id_product": catalog.brut.id, "quantity": 1},
                ],
            },
            headers=CUSTOMER,
        )
        order_id = resp.json()["id"]
        resp = await client.get(f"/api/v1/order-details/all/order-id/{order_id}", headers=CUSTOMER)
        detail_id = resp.json()[0]["id"]

        resp = await client.delete(
            f"/api/v1/order-details/force-delete-admin/{detail_id}", headers=CUSTOMER
        )
        assert resp.status_code == 403

        resp = await client.delete(
            f"/api/v1/order-details/force-delete-admin/{detail_id}", headers=ADMIN
        )
        assert resp.status_code == 204

        resp = await client.get(f"/api/v1/product/id/{catalog.malbec.id}")
        assert resp.json()["stock"] == 10
        resp = await client.get("/api/v1/order/all", headers=CUSTOMER)
        assert resp.json()[0]["total_price"] == 15.0

    @pytest.mark.asyncio
    async def test_admin_sees_all_orders(self, client, catalog):
        await self._create_order(client, catalog)
        resp = await client.get("/api/v1/order/all-admin", headers=ADMIN)
        assert resp.status_code == 200
        assert len(resp.json()) == 1


class TestCartEndpoints:
    @pytest.mark.asyncio
    async def test_cart_lifecycle(self, client, catalog):
        resp = await client.post(
            "/api/v1/cart/create",
            json={"id_product": catalog.brut.id, "quantity": 2},
            headers=CUSTOMER,
        )
        assert resp.status_code == 201
        cart_id = resp.json()["id"]

        resp = await client.put(
            "/api/v1/cart/update", json={"id": cart_id, "quantity": 5}, headers=CUSTOMER
        )
        assert resp.status_code == 400

        resp = await client.delete("/api/v1/cart/clean", headers=CUSTOMER)
        assert resp.status_code == 204

        resp = await client.get("/api/v1/cart/all", headers=CUSTOMER)
        assert resp.json() == []


# ── Reports & users ─────────────────────────────────────────────


class TestReportEndpoints:
    @pytest.mark.asyncio
    async def test_low_stock_requires_admin(self, client, catalog):
        resp = await client.get("/api/v1/report/low-stock", headers=CUSTOMER)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_low_stock(self, client, catalog):
        resp = await client.get("/api/v1/report/low-stock?threshold=4", headers=ADMIN)
        assert resp.status_code == 200
        assert [i["product_name"] for i in resp.json()] == ["Brut Nature"]

    @pytest.mark.asyncio
    async def test_top_products(self, client, catalog):
        for lines in (
            [{"id_product": catalog.malbec.id, "quantity": 1}],
            [
                {"id_product": catalog.malbec.id, "quantity": 2},
                {"id_product": catalog.brut.id, "quantity": 1},
            ],
        ):
            resp = await client.post(
                "/api/v1/order/create",
                json={
                    "shipping_address": "Calle 1",
                    "order_email": "c@example.com",
                    "order_details": lines,
                },
                headers=CUSTOMER,
            )
            assert resp.status_code == 201

        resp = await client.get("/api/v1/report/top-products?limit=1", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json() == [
            {
                "product_id": catalog.malbec.id,
                "product_name": "Malbec Reserva",
                "order_details_count": 2,
                "units_sold": 3,
            }
        ]

    @pytest.mark.asyncio
    async def test_markdown_report(self, client, catalog):
        resp = await client.get("/api/v1/report/stock/markdown", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        assert "# Stock & Sales Report" in resp.text


class TestUserEndpoints:
    @pytest.mark.asyncio
    async def test_get_profile(self, client, mock_user_client):
        resp = await client.get("/api/v1/user/profile", headers=CUSTOMER)
        assert resp.status_code == 200
        assert resp.json()["city"] == "Mendoza"
        mock_user_client.get_user.assert_awaited_once_with("customer-1")

    @pytest.mark.asyncio
    async def test_update_profile(self, client, mock_user_client):
        resp = await client.put("/api/v1/user/profile", json={"city": "Cordoba"}, headers=CUSTOMER)
        assert resp.status_code == 200
        assert resp.json()["city"] == "Cordoba"

    @pytest.mark.asyncio
    async def test_missing_user_is_404(self, client, mock_user_client):
        mock_user_client.get_user.side_effect = ResourceNotFoundError("User not found")
        resp = await client.get("/api/v1/user/profile", headers=CUSTOMER)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_user_service_down_is_503(self, client, mock_user_client):
        mock_user_client.get_user_representation.side_effect = UserServiceUnavailable("down")
        resp = await client.get("/api/v1/user/kcprofile", headers=CUSTOMER)
        assert resp.status_code == 503
