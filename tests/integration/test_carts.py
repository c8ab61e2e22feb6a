"""Integration tests for src/services/carts.py."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from src.api.schemas import AdminCartWriteRequest, CartCreateRequest, CartUpdateRequest
from src.core.exceptions import (
    BadRequestError,
    InsufficientStockError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from src.db import repository
from src.db.models import CartItem
from src.services import carts


class TestCreateCart:
    @pytest.mark.asyncio
    async def test_snapshots_price_and_leaves_stock(self, db_session, catalog, customer):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=3)
        )
        assert cart.id_customer == "customer-1"
        assert cart.price == 20.0
        assert cart.quantity == 3
        assert catalog.malbec.stock == 10

    @pytest.mark.asyncio
    async def test_held_quantity_counts_against_stock(self, db_session, catalog, customer):
        await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.brut.id, quantity=2)
        )
        with pytest.raises(InsufficientStockError):
            await carts.create_cart(
                db_session, customer, CartCreateRequest(id_product=catalog.brut.id, quantity=2)
            )
        assert await repository.count_carts_by_customer(db_session, "customer-1") == 1

    @pytest.mark.asyncio
    async def test_other_customers_holdings_ignored(
        self, db_session, catalog, customer, other_customer
    ):
        await carts.create_cart(
            db_session, other_customer, CartCreateRequest(id_product=catalog.brut.id, quantity=3)
        )
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.brut.id, quantity=3)
        )
        assert cart.quantity == 3

    @pytest.mark.asyncio
    async def test_cart_limit(self, db_session, catalog, customer):
        settings = MagicMock()
        settings.cart_limit = 2
        with patch("src.services.carts.get_settings", return_value=settings):
            for _ in range(2):
                await carts.create_cart(
                    db_session,
                    customer,
                    CartCreateRequest(id_product=catalog.malbec.id, quantity=1),
                )
            with pytest.raises(BadRequestError, match="limit of 2 items"):
                await carts.create_cart(
                    db_session,
                    customer,
                    CartCreateRequest(id_product=catalog.malbec.id, quantity=1),
                )

    @pytest.mark.asyncio
    async def test_missing_product(self, db_session, catalog, customer):
        with pytest.raises(ResourceNotFoundError):
            await carts.create_cart(
                db_session, customer, CartCreateRequest(id_product=999, quantity=1)
            )

    @pytest.mark.asyncio
    async def test_invalid_quantity(self, db_session, catalog, customer):
        with pytest.raises(BadRequestError):
            await carts.create_cart(
                db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=0)
            )


class TestUpdateCart:
    @pytest.mark.asyncio
    async def test_update_quantity(self, db_session, catalog, customer):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.cabernet.id, quantity=1)
        )
        updated = await carts.update_cart(
            db_session, customer, CartUpdateRequest(id=cart.id, quantity=5)
        )
        assert updated.quantity == 5

    @pytest.mark.asyncio
    async def test_update_beyond_stock(self, db_session, catalog, customer):
        first = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.cabernet.id, quantity=2)
        )
        await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.cabernet.id, quantity=2)
        )
        with pytest.raises(InsufficientStockError):
            await carts.update_cart(
                db_session, customer, CartUpdateRequest(id=first.id, quantity=4)
            )

    @pytest.mark.asyncio
    async def test_other_customer_forbidden(
        self, db_session, catalog, customer, other_customer
    ):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        with pytest.raises(UnauthorizedAccessError):
            await carts.update_cart(
                db_session, other_customer, CartUpdateRequest(id=cart.id, quantity=2)
            )


class TestDeleteCart:
    @pytest.mark.asyncio
    async def test_delete_own_line(self, db_session, catalog, customer):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        await carts.delete_cart(db_session, customer, cart.id)
        assert await repository.count_rows(db_session, CartItem) == 0

    @pytest.mark.asyncio
    async def test_delete_other_customers_line(
        self, db_session, catalog, customer, other_customer
    ):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        with pytest.raises(UnauthorizedAccessError):
            await carts.delete_cart(db_session, other_customer, cart.id)

    @pytest.mark.asyncio
    async def test_clean_cart_only_touches_caller(
        self, db_session, catalog, customer, other_customer
    ):
        for product in (catalog.malbec, catalog.cabernet):
            await carts.create_cart(
                db_session, customer, CartCreateRequest(id_product=product.id, quantity=1)
            )
        await carts.create_cart(
            db_session, other_customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )

        removed = await carts.clean_cart(db_session, customer)

        assert removed == 2
        assert await carts.list_carts(db_session, customer) == []
        assert len(await carts.list_carts(db_session, other_customer)) == 1


class TestAdminCarts:
    @pytest.mark.asyncio
    async def test_admin_create_and_get(self, db_session, catalog):
        cart = await carts.admin_create_cart(
            db_session,
            AdminCartWriteRequest(
                id_customer="customer-7", id_product=catalog.malbec.id, price=18.0, quantity=2
            ),
        )
        fetched = await carts.admin_get_cart(db_session, cart.id)
        assert fetched.price == 18.0

    @pytest.mark.asyncio
    async def test_admin_create_requires_customer(self, db_session, catalog):
        with pytest.raises(BadRequestError):
            await carts.admin_create_cart(
                db_session,
                AdminCartWriteRequest(
                    id_customer="  ", id_product=catalog.malbec.id, price=18.0, quantity=2
                ),
            )

    @pytest.mark.asyncio
    async def test_admin_create_over_stock(self, db_session, catalog):
        with pytest.raises(InsufficientStockError):
            await carts.admin_create_cart(
                db_session,
                AdminCartWriteRequest(
                    id_customer="c", id_product=catalog.brut.id, price=15.0, quantity=4
                ),
            )

    @pytest.mark.asyncio
    async def test_admin_get_missing(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await carts.admin_get_cart(db_session, 5)

    @pytest.mark.asyncio
    async def test_admin_update_rewrites_line(self, db_session, catalog, customer):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        updated = await carts.admin_update_cart(
            db_session,
            AdminCartWriteRequest(
                id=cart.id,
                id_customer="customer-2",
                id_product=catalog.cabernet.id,
                price=30.0,
                quantity=4,
            ),
        )
        assert updated.id_customer == "customer-2"
        assert updated.id_product == catalog.cabernet.id
        assert updated.price == 30.0
        assert updated.quantity == 4
        assert catalog.cabernet.stock == 5

    @pytest.mark.asyncio
    async def test_admin_update_over_stock_changes_nothing(self, db_session, catalog, customer):
        cart = await carts.create_cart(
            db_session, customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        with pytest.raises(InsufficientStockError):
            await carts.admin_update_cart(
                db_session,
                AdminCartWriteRequest(
                    id=cart.id,
                    id_customer="customer-1",
                    id_product=catalog.brut.id,
                    price=15.0,
                    quantity=4,
                ),
            )
        await db_session.refresh(cart)
        assert cart.id_product == catalog.malbec.id
        assert cart.quantity == 1

    @pytest.mark.asyncio
    async def test_admin_update_requires_id(self, db_session, catalog):
        with pytest.raises(BadRequestError):
            await carts.admin_update_cart(
                db_session,
                AdminCartWriteRequest(
                    id_customer="c", id_product=catalog.malbec.id, price=1.0, quantity=1
                ),
            )

    @pytest.mark.asyncio
    async def test_admin_delete_any_customers_line(self, db_session, catalog, other_customer):
        cart = await carts.create_cart(
            db_session, other_customer, CartCreateRequest(id_product=catalog.malbec.id, quantity=1)
        )
        await carts.admin_delete_cart(db_session, cart.id)
        assert await repository.count_rows(db_session, CartItem) == 0

    @pytest.mark.asyncio
    async def test_admin_delete_missing(self, db_session):
        with pytest.raises(ResourceNotFoundError):
            await carts.admin_delete_cart(db_session, 31)
