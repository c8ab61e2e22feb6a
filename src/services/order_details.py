"""Order detail service: line-item edits that keep totals and stock in step.

Every write here keeps the line quantity in step with product stock, and
recomputes the parent order's ``total_price`` from its lines. Removing an order's
last line removes the order as well.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import (
    AdminOrderDetailWriteRequest,
    OrderDetailAddRequest,
    OrderDetailUpdateRequest,
)
from src.core.cache import get_catalog_cache
from src.core.exceptions import BadRequestError, InsufficientStockError, ResourceNotFoundError
from src.core.logging import get_logger
from src.core.models import Principal
from src.db import repository
from src.db.models import Order, OrderDetail
from src.services.orders import (
    ensure_owner,
    require_order,
    require_product,
    restore_stock,
    take_stock,
    validate_quantity,
)

logger = get_logger("order_details")


async def _recompute_total(session: AsyncSession, order: Order) -> None:
    order.total_price = await repository.sum_order_amount(session, order.id)
    await session.flush()


async def _require_detail(session: AsyncSession, detail_id: int) -> OrderDetail:
    detail = await repository.get_by_id(session, OrderDetail, detail_id)
    if detail is None:
        raise ResourceNotFoundError(f"OrderDetails not found with ID: {detail_id}")
    return detail


# ── Queries ─────────────────────────────────────────────────────


async def admin_list_details(session: AsyncSession) -> list[OrderDetail]:
    return await repository.list_all(session, OrderDetail)


async def list_details(session: AsyncSession, principal: Principal) -> list[OrderDetail]:
    orders = await repository.list_orders_by_customer(session, principal.customer_id)
    return await repository.list_details_by_orders(session, [o.id for o in orders])


async def list_details_for_order(
    session: AsyncSession, principal: Principal, order_id: int
) -> list[OrderDetail]:
    order = await require_order(session, order_id)
    ensure_owner(order, principal, "You are not authorized to view the details of this order")
    return await repository.list_details_by_order(session, order_id)


async def admin_get_detail(session: AsyncSession, detail_id: int) -> OrderDetail:
    return await _require_detail(session, detail_id)


# ── Create ──────────────────────────────────────────────────────


async def admin_create_detail(
    session: AsyncSession, request: AdminOrderDetailWriteRequest
) -> OrderDetail:
    """Attach a line with an explicit price to any order."""
    _validate_admin_detail(request)
    async with repository.transaction(session):
        order = await require_order(session, request.id_order)
        product = await require_product(session, request.id_product)
        take_stock(product, request.quantity)
        detail = await repository.add(
            session,
            OrderDetail(
                id_order=order.id,
                id_product=product.id,
                price=request.price,
                quantity=request.quantity,
            ),
        )
        await _recompute_total(session, order)
    get_catalog_cache().invalidate()
    logger.info("order_detail_created_by_admin", detail_id=detail.id, order_id=order.id)
    return detail


async def add_detail_to_order(
    session: AsyncSession, principal: Principal, request: OrderDetailAddRequest
) -> OrderDetail:
    """Add a line to one of the caller's orders at the product's current price."""
    quantity = validate_quantity(request.quantity)
    async with repository.transaction(session):
        order = await require_order(session, request.id_order)
        ensure_owner(order, principal, "You are not authorized to add details to this order")
        product = await require_product(session, request.id_product)
        take_stock(product, quantity)
        detail = await repository.add(
            session,
            OrderDetail(
                id_order=order.id,
                id_product=product.id,
                price=product.price,
                quantity=quantity,
            ),
        )
        await _recompute_total(session, order)
    get_catalog_cache().invalidate()
    logger.info(
        "order_detail_added",
        detail_id=detail.id,
        order_id=order.id,
        product_id=product.id,
        quantity=quantity,
    )
    return detail


# ── Update ──────────────────────────────────────────────────────


async def update_detail(
    session: AsyncSession, principal: Principal, request: OrderDetailUpdateRequest
) -> OrderDetail:
    """Change the quantity of one of the caller's lines.

    The line keeps its original unit price. Stock moves by ``old - new`` and
    the order total is recomputed from its lines.
    """
    new_quantity = validate_quantity(request.quantity)
    async with repository.transaction(session):
        detail = await _require_detail(session, request.id)
        order = await require_order(session, detail.id_order)
        ensure_owner(order, principal, "Order does not belong to the logged-in user")
        if detail.id_order != request.id_order:
            raise BadRequestError("Order ID does not match the order details")

        product = await require_product(session, detail.id_product)
        old_quantity = detail.quantity
        new_stock = product.stock + old_quantity - new_quantity
        if new_stock < 0:
            raise InsufficientStockError(f"Not enough stock for product: {product.name}")

        product.stock = new_stock
        detail.quantity = new_quantity
        await _recompute_total(session, order)
    get_catalog_cache().invalidate()
    logger.info(
        "order_detail_updated",
        detail_id=detail.id,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        order_total=order.total_price,
    )
    return detail


async def admin_update_detail(
    session: AsyncSession, request: AdminOrderDetailWriteRequest
) -> OrderDetail:
    """Rewrite a line completely; it may move to another order or product.

    The old quantity returns to the old product before the new one is taken,
    so moving within the same product nets out. Both orders get their totals
    recomputed.
    """
    if request.id is None:
        raise BadRequestError("OrderDetails ID must not be null")
    _validate_admin_detail(request)
    async with repository.transaction(session):
        detail = await _require_detail(session, request.id)
        old_order = await require_order(session, detail.id_order)
        old_product = await require_product(session, detail.id_product)
        new_order = await require_order(session, request.id_order)
        new_product = await require_product(session, request.id_product)

        old_product.stock += detail.quantity

        if new_product.stock - request.quantity < 0:
            raise InsufficientStockError(f"Not enough stock for product: {new_product.name}")
        new_product.stock -= request.quantity

        detail.id_order = new_order.id
        detail.id_product = new_product.id
        detail.price = request.price
        detail.quantity = request.quantity
        await _recompute_total(session, new_order)

        if old_order.id != new_order.id:
            await _recompute_total(session, old_order)
            await _drop_if_empty(session, old_order)
    get_catalog_cache().invalidate()
    logger.info("order_detail_updated_by_admin", detail_id=detail.id)
    return detail


# ── Delete ──────────────────────────────────────────────────────


async def delete_detail(session: AsyncSession, principal: Principal, detail_id: int) -> None:
    async with repository.transaction(session):
        detail = await _require_detail(session, detail_id)
        order = await require_order(session, detail.id_order)
        ensure_owner(order, principal, "You are not authorized to delete details of this order")
        await _remove_line(session, detail, order)
    get_catalog_cache().invalidate()
    logger.info("order_detail_deleted", detail_id=detail_id, customer=principal.customer_id)


async def admin_delete_detail(session: AsyncSession, detail_id: int) -> None:
    async with repository.transaction(session):
        detail = await _require_detail(session, detail_id)
        order = await require_order(session, detail.id_order)
        await _remove_line(session, detail, order)
    get_catalog_cache().invalidate()
    logger.info("order_detail_deleted_by_admin", detail_id=detail_id)


async def admin_force_delete_detail(session: AsyncSession, detail_id: int) -> None:
    """Delete a line even when its order or product row is already gone."""
    async with repository.transaction(session):
        detail = await _require_detail(session, detail_id)
        order = await repository.get_by_id(session, Order, detail.id_order)
        if order is None:
            logger.warning("force_delete_order_missing", detail_id=detail_id)
            await restore_stock(session, detail, strict=False)
            await repository.remove(session, detail)
        else:
            await _remove_line(session, detail, order, strict=False)
    get_catalog_cache().invalidate()
    logger.info("order_detail_force_deleted", detail_id=detail_id)


async def _remove_line(
    session: AsyncSession, detail: OrderDetail, order: Order, *, strict: bool = True
) -> None:
    await restore_stock(session, detail, strict=strict)
    remaining = await repository.count_details_for_order(session, order.id)
    await repository.remove(session, detail)
    if remaining <= 1:
        await repository.remove(session, order)
        logger.info("order_removed_with_last_line", order_id=order.id)
    else:
        await _recompute_total(session, order)


async def _drop_if_empty(session: AsyncSession, order: Order) -> None:
    if await repository.count_details_for_order(session, order.id) == 0:
        await repository.remove(session, order)
        logger.info("order_removed_with_last_line", order_id=order.id)


def _validate_admin_detail(request: AdminOrderDetailWriteRequest) -> None:
    if (
        request.id_order is None
        or request.id_product is None
        or request.price is None
        or request.quantity is None
    ):
        raise BadRequestError("The received request does not have the correct format.")
    if request.price < 0:
        raise BadRequestError("Price must be greater than or equal to 0")
    validate_quantity(request.quantity)
