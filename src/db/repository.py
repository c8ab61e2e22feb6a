"""Data access layer for catalog, order and cart rows.

Functions here never commit. Services wrap each operation in
:func:`transaction` so that multi-row changes land together or not at all.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Base, CartItem, Order, OrderDetail, Product

ModelT = TypeVar("ModelT", bound=Base)


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


# ── Generic helpers ─────────────────────────────────────────────


async def get_by_id(
    session: AsyncSession, model: type[ModelT], row_id: int
) -> ModelT | None:
    return await session.get(model, row_id)


async def list_all(session: AsyncSession, model: type[ModelT]) -> list[ModelT]:
    result = await session.execute(select(model).order_by(model.id))
    return list(result.scalars().all())


async def add(session: AsyncSession, row: ModelT) -> ModelT:
    session.add(row)
    await session.flush()
    return row


async def remove(session: AsyncSession, row: Base) -> None:
    await session.delete(row)
    await session.flush()


async def count_rows(session: AsyncSession, model: type[Base]) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


# ── Products ────────────────────────────────────────────────────


async def list_products(
    session: AsyncSession,
    *,
    winery_id: Optional[int] = None,
    variety_id: Optional[int] = None,
    type_id: Optional[int] = None,
) -> list[Product]:
    stmt = select(Product).order_by(Product.id)
    if winery_id is not None:
        stmt = stmt.where(Product.id_winery == winery_id)
    if variety_id is not None:
        stmt = stmt.where(Product.id_variety == variety_id)
    if type_id is not None:
        stmt = stmt.where(Product.id_type == type_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def random_products(session: AsyncSession, limit: int) -> list[Product]:
    stmt = select(Product).order_by(func.random()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_products_referencing(
    session: AsyncSession,
    *,
    winery_id: Optional[int] = None,
    variety_id: Optional[int] = None,
    type_id: Optional[int] = None,
) -> int:
    stmt = select(func.count(Product.id))
    if winery_id is not None:
        stmt = stmt.where(Product.id_winery == winery_id)
    if variety_id is not None:
        stmt = stmt.where(Product.id_variety == variety_id)
    if type_id is not None:
        stmt = stmt.where(Product.id_type == type_id)
    result = await session.execute(stmt)
    return result.scalar_one()


async def count_details_for_product(session: AsyncSession, product_id: int) -> int:
    stmt = select(func.count(OrderDetail.id)).where(OrderDetail.id_product == product_id)
    result = await session.execute(stmt)
    return result.scalar_one()


async def delete_carts_for_product(session: AsyncSession, product_id: int) -> None:
    await session.execute(delete(CartItem).where(CartItem.id_product == product_id))


# ── Orders & details ────────────────────────────────────────────


async def list_orders_by_customer(session: AsyncSession, customer_id: str) -> list[Order]:
    stmt = select(Order).where(Order.id_customer == customer_id).order_by(Order.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_details_by_order(session: AsyncSession, order_id: int) -> list[OrderDetail]:
    stmt = select(OrderDetail).where(OrderDetail.id_order == order_id).order_by(OrderDetail.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_details_by_orders(
    session: AsyncSession, order_ids: Sequence[int]
) -> list[OrderDetail]:
    if not order_ids:
        return []
    stmt = (
        select(OrderDetail)
        .where(OrderDetail.id_order.in_(order_ids))
        .order_by(OrderDetail.id)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_details_for_order(session: AsyncSession, order_id: int) -> int:
    stmt = select(func.count(OrderDetail.id)).where(OrderDetail.id_order == order_id)
    result = await session.execute(stmt)
    return result.scalar_one()


async def sum_order_amount(session: AsyncSession, order_id: int) -> float:
    """Σ(price × quantity) over an order's lines, summed in line order."""
    await session.flush()
    details = await list_details_by_order(session, order_id)
    return sum((d.amount for d in details), 0.0)


# ── Carts ───────────────────────────────────────────────────────


async def list_carts_by_customer(session: AsyncSession, customer_id: str) -> list[CartItem]:
    stmt = select(CartItem).where(CartItem.id_customer == customer_id).order_by(CartItem.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_carts_by_customer(session: AsyncSession, customer_id: str) -> int:
    stmt = select(func.count(CartItem.id)).where(CartItem.id_customer == customer_id)
    result = await session.execute(stmt)
    return result.scalar_one()


async def sum_cart_quantity(
    session: AsyncSession,
    customer_id: str,
    product_id: int,
    *,
    exclude_cart_id: Optional[int] = None,
) -> int:
    """Total quantity of ``product_id`` across a customer's cart lines."""
    stmt = select(func.coalesce(func.sum(CartItem.quantity), 0)).where(
        CartItem.id_customer == customer_id,
        CartItem.id_product == product_id,
    )
    if exclude_cart_id is not None:
        stmt = stmt.where(CartItem.id != exclude_cart_id)
    result = await session.execute(stmt)
    return int(result.scalar_one())


async def delete_carts_for_customer(session: AsyncSession, customer_id: str) -> int:
    result = await session.execute(delete(CartItem).where(CartItem.id_customer == customer_id))
    return result.rowcount or 0
