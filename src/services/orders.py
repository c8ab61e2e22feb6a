"""Order service: order lifecycle and the stock it reserves.

Creating an order takes stock from every product it lists; deleting an order
gives that stock back. Each operation runs in one transaction, so a failure on
any line leaves products and orders exactly as they were.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import (
    AdminOrderWriteRequest,
    OrderCreateRequest,
    OrderUpdateRequest,
)
from src.core.cache import get_catalog_cache
from src.core.exceptions import (
    BadRequestError,
    InsufficientStockError,
    ResourceNotFoundError,
    UnauthorizedAccessError,
)
from src.core.logging import get_logger
from src.core.models import Principal
from src.db import repository
from src.db.models import Order, OrderDetail, Product

logger = get_logger("orders")


# ── Shared helpers (also used by order_details) ─────────────────


async def require_order(session: AsyncSession, order_id: int) -> Order:
    order = await repository.get_by_id(session, Order, order_id)
    if order is None:
        raise ResourceNotFoundError(f"Order not found with ID: {order_id}")
    return order


async def require_product(session: AsyncSession, product_id: int) -> Product:
    product = await repository.get_by_id(session, Product, product_id)
    if product is None:
        raise ResourceNotFoundError(f"Product not found with ID: {product_id}")
    return product


def ensure_owner(order: Order, principal: Principal, message: str) -> None:
    if order.id_customer != principal.customer_id:
        raise UnauthorizedAccessError(message)


def validate_quantity(quantity: int | None) -> int:
    if quantity is None or quantity <= 0:
        raise BadRequestError("Quantity must not be null and must be greater than 0")
    return quantity


def take_stock(product: Product, quantity: int) -> None:
    """Decrement ``product.stock`` or raise without touching it."""
    if quantity > product.stock:
        logger.warning(
            "stock_insufficient",
            product_id=product.id,
            requested=quantity,
            available=product.stock,
        )
        raise InsufficientStockError(f"Insufficient stock for product: {product.name}")
    product.stock -= quantity


async def restore_stock(session: AsyncSession, detail: OrderDetail, *, strict: bool = True) -> None:
    """Return a detail's quantity to its product.

    With ``strict=False`` a missing product is skipped instead of raising.
    """
    product = await repository.get_by_id(session, Product, detail.id_product)
    if product is None:
        if strict:
            raise ResourceNotFoundError(f"Product not found with ID: {detail.id_product}")
        logger.warning("restore_stock_product_missing", detail_id=detail.id)
        return
    product.stock += detail.quantity


# ── Queries ─────────────────────────────────────────────────────


async def admin_list_orders(session: AsyncSession) -> list[Order]:
    return await repository.list_all(session, Order)


async def list_orders(session: AsyncSession, principal: Principal) -> list[Order]:
    return await repository.list_orders_by_customer(session, principal.customer_id)


async def admin_get_order(session: AsyncSession, order_id: int) -> Order:
    return await require_order(session, order_id)


# ── Commands ────────────────────────────────────────────────────


async def admin_create_order(session: AsyncSession, request: AdminOrderWriteRequest) -> Order:
    """Store an order row as given. No lines are created and stock is untouched."""
    _validate_admin_order(request)
    async with repository.transaction(session):
        order = await repository.add(
            session,
            Order(
                id_customer=request.id_customer,
                total_price=request.total_price,
                shipping_address=request.shipping_address,
                order_email=request.order_email,
            ),
        )
    logger.info("order_created_by_admin", order_id=order.id, customer=order.id_customer)
    return order


async def create_order(
    session: AsyncSession, principal: Principal, request: OrderCreateRequest
) -> Order:
    """Place an order for the caller, reserving stock for every line.

    Lines are processed in request order. Two lines for the same product both
    draw from that product's stock, so the second sees what the first left.
    """
    if not request.order_details:
        raise BadRequestError("An order must contain at least one line")

    async with repository.transaction(session):
        order = await repository.add(
            session,
            Order(
                id_customer=principal.customer_id,
                total_price=0.0,
                shipping_address=request.shipping_address,
                order_email=request.order_email,
            ),
        )

        total = 0.0
        for line in request.order_details:
            quantity = validate_quantity(line.quantity)
            product = await require_product(session, line.id_product)
            take_stock(product, quantity)
            detail = OrderDetail(
                id_order=order.id,
                id_product=product.id,
                price=product.price,
                quantity=quantity,
            )
            session.add(detail)
            total += detail.amount

        order.total_price = total
        await session.flush()

    get_catalog_cache().invalidate()
    logger.info(
        "order_created",
        order_id=order.id,
        customer=principal.customer_id,
        lines=len(request.order_details),
        total_price=order.total_price,
    )
    return order


async def admin_update_order(session: AsyncSession, request: AdminOrderWriteRequest) -> Order:
    if request.id is None:
        raise BadRequestError("Order ID must not be null")
    _validate_admin_order(request)
    async with repository.transaction(session):
        order = await require_order(session, request.id)
        order.id_customer = request.id_customer
        order.total_price = request.total_price
        order.shipping_address = request.shipping_address
        order.order_email = request.order_email
        await session.flush()
    logger.info("order_updated_by_admin", order_id=order.id)
    return order


async def update_order(
    session: AsyncSession, principal: Principal, request: OrderUpdateRequest
) -> Order:
    """Change where an order ships and which address is notified."""
    async with repository.transaction(session):
        order = await require_order(session, request.id)
        ensure_owner(order, principal, "Order does not belong to the logged-in user")
        order.shipping_address = request.shipping_address
        order.order_email = request.order_email
        await session.flush()
    logger.info("order_updated", order_id=order.id, customer=principal.customer_id)
    return order


async def admin_delete_order(session: AsyncSession, order_id: int) -> None:
    async with repository.transaction(session):
        order = await require_order(session, order_id)
        await _delete_with_details(session, order)
    get_catalog_cache().invalidate()
    logger.info("order_deleted_by_admin", order_id=order_id)


async def delete_order(session: AsyncSession, principal: Principal, order_id: int) -> None:
    async with repository.transaction(session):
        order = await require_order(session, order_id)
        ensure_owner(order, principal, "You are not authorized to delete this order")
        await _delete_with_details(session, order)
    get_catalog_cache().invalidate()
    logger.info("order_deleted", order_id=order_id, customer=principal.customer_id)


async def _delete_with_details(session: AsyncSession, order: Order) -> None:
    details = await repository.list_details_by_order(session, order.id)
    for detail in details:
        await restore_stock(session, detail)
        await session.delete(detail)
    await session.flush()
    await repository.remove(session, order)


def _validate_admin_order(request: AdminOrderWriteRequest) -> None:
    if (
        request.id_customer is None
        or request.total_price is None
        or request.shipping_address is None
        or request.order_email is None
    ):
        raise BadRequestError("The received request does not have the correct format.")
    if request.total_price < 0:
        raise BadRequestError("Total price must be greater than or equal to 0")
