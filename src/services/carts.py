"""Cart service.

Carts never touch stock; they only check that what a customer holds for a
product still fits within that product's current stock.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import AdminCartWriteRequest, CartCreateRequest, CartUpdateRequest
from src.core.config import get_settings
from src.core.exceptions import (
    BadRequestError,
    InsufficientStockError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from src.core.logging import get_logger
from src.core.models import Principal
from src.db import repository
from src.db.models import CartItem
from src.services.orders import require_product, validate_quantity

logger = get_logger("carts")


async def _require_cart(session: AsyncSession, cart_id: int) -> CartItem:
    cart = await repository.get_by_id(session, CartItem, cart_id)
    if cart is None:
        raise ResourceNotFoundError(f"Cart not found with ID: {cart_id}")
    return cart


def _ensure_owner(cart: CartItem, principal: Principal, message: str) -> None:
    if cart.id_customer != principal.customer_id:
        raise UnauthorizedAccessError(message)


def _validate_admin_cart(request: AdminCartWriteRequest) -> None:
    if request.id_customer is None or not request.id_customer.strip():
        raise BadRequestError("Customer ID must not be null or empty")
    if request.id_product is None:
        raise BadRequestError("Product ID must not be null")
    if request.price is None or request.price < 0:
        raise BadRequestError("Price must not be null and must be greater than or equal to 0")
    validate_quantity(request.quantity)


# ── Queries ─────────────────────────────────────────────────────


async def admin_list_carts(session: AsyncSession) -> list[CartItem]:
    return await repository.list_all(session, CartItem)


async def list_carts(session: AsyncSession, principal: Principal) -> list[CartItem]:
    return await repository.list_carts_by_customer(session, principal.customer_id)


async def admin_get_cart(session: AsyncSession, cart_id: int) -> CartItem:
    return await _require_cart(session, cart_id)


# ── Commands ────────────────────────────────────────────────────


async def admin_create_cart(session: AsyncSession, request: AdminCartWriteRequest) -> CartItem:
    _validate_admin_cart(request)
    async with repository.transaction(session):
        product = await require_product(session, request.id_product)
        if request.quantity > product.stock:
            raise InsufficientStockError(f"Insufficient stock for product: {product.name}")
        cart = await repository.add(
            session,
            CartItem(
                id_customer=request.id_customer,
                id_product=product.id,
                price=request.price,
                quantity=request.quantity,
            ),
        )
    logger.info("cart_created_by_admin", cart_id=cart.id, customer=cart.id_customer)
    return cart


async def create_cart(
    session: AsyncSession, principal: Principal, request: CartCreateRequest
) -> CartItem:
    """Add a product line to the caller's cart at the product's current price."""
    if request.id_product is None:
        raise BadRequestError("Product ID must not be null")
    quantity = validate_quantity(request.quantity)
    cart_limit = get_settings().cart_limit

    async with repository.transaction(session):
        lines = await repository.count_carts_by_customer(session, principal.customer_id)
        if lines >= cart_limit:
            raise BadRequestError(
                "You can't add another item to your cart because you reached "
                f"your limit of {cart_limit} items."
            )
        product = await require_product(session, request.id_product)
        held = await repository.sum_cart_quantity(session, principal.customer_id, product.id)
        if held + quantity > product.stock:
            raise InsufficientStockError(f"Insufficient stock for product: {product.name}")
        cart = await repository.add(
            session,
            CartItem(
                id_customer=principal.customer_id,
                id_product=product.id,
                price=product.price,
                quantity=quantity,
            ),
        )
    logger.info(
        "cart_item_added",
        cart_id=cart.id,
        customer=principal.customer_id,
        product_id=product.id,
        quantity=quantity,
    )
    return cart


async def admin_update_cart(session: AsyncSession, request: AdminCartWriteRequest) -> CartItem:
    if request.id is None:
        raise BadRequestError("Cart ID must not be null")
    _validate_admin_cart(request)
    async with repository.transaction(session):
        cart = await _require_cart(session, request.id)
        product = await require_product(session, request.id_product)
        if request.quantity > product.stock:
            raise InsufficientStockError(f"Insufficient stock for product: {product.name}")
        cart.id_customer = request.id_customer
        cart.id_product = product.id
        cart.price = request.price
        cart.quantity = request.quantity
        await session.flush()
    logger.info("cart_updated_by_admin", cart_id=cart.id)
    return cart


async def update_cart(
    session: AsyncSession, principal: Principal, request: CartUpdateRequest
) -> CartItem:
    """Change the quantity of one of the caller's cart lines."""
    if request.id is None:
        raise BadRequestError("Cart ID must not be null")
    quantity = validate_quantity(request.quantity)
    async with repository.transaction(session):
        cart = await _require_cart(session, request.id)
        _ensure_owner(cart, principal, "You do not have permission to update this cart.")
        product = await require_product(session, cart.id_product)
        held_elsewhere = await repository.sum_cart_quantity(
            session, principal.customer_id, product.id, exclude_cart_id=cart.id
        )
        if held_elsewhere + quantity > product.stock:
            raise InsufficientStockError(f"Insufficient stock for product: {product.name}")
        cart.quantity = quantity
        await session.flush()
    logger.info("cart_item_updated", cart_id=cart.id, quantity=quantity)
    return cart


async def admin_delete_cart(session: AsyncSession, cart_id: int) -> None:
    async with repository.transaction(session):
        cart = await _require_cart(session, cart_id)
        await repository.remove(session, cart)
    logger.info("cart_deleted_by_admin", cart_id=cart_id)


async def delete_cart(session: AsyncSession, principal: Principal, cart_id: int) -> None:
    async with repository.transaction(session):
        cart = await _require_cart(session, cart_id)
        _ensure_owner(cart, principal, "You do not have permission to delete this cart.")
        await repository.remove(session, cart)
    logger.info("cart_item_deleted", cart_id=cart_id, customer=principal.customer_id)


async def clean_cart(session: AsyncSession, principal: Principal) -> int:
    async with repository.transaction(session):
        removed = await repository.delete_carts_for_customer(session, principal.customer_id)
    logger.info("cart_cleaned", customer=principal.customer_id, removed=removed)
    return removed
