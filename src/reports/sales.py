"""Sales and stock analytics over products and order details.

``year`` and ``type_id`` filters treat ``None`` and ``0`` as "any".
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Select, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import (
    LowStockItem,
    ProductQuantityItem,
    ProductSalesItem,
    ProductStockItem,
    TopProductItem,
    TypeQuantityItem,
    TypeSummary,
)
from src.core.exceptions import ResourceNotFoundError
from src.db.models import OrderDetail, Product, WineType
from src.reports.generator import generate_stock_report

_units = func.coalesce(func.sum(OrderDetail.quantity), 0)


def _filter(stmt: Select, year: Optional[int], type_id: Optional[int]) -> Select:
    if year:
        stmt = stmt.where(Product.year == year)
    if type_id:
        stmt = stmt.where(Product.id_type == type_id)
    return stmt


async def low_stock(session: AsyncSession, threshold: int) -> list[LowStockItem]:
    stmt = (
        select(Product.id, Product.name, Product.stock)
        .where(Product.stock < threshold)
        .order_by(Product.stock, Product.id)
    )
    rows = (await session.execute(stmt)).all()
    return [LowStockItem(product_id=r.id, product_name=r.name, stock=r.stock) for r in rows]


async def top_products(session: AsyncSession, limit: int = 10) -> list[TopProductItem]:
    """Products that appear in the most order lines, ties broken by units sold."""
    lines = func.count(OrderDetail.id)
    stmt = (
        select(Product.id, Product.name, lines.label("lines"), _units.label("units"))
        .join(OrderDetail, OrderDetail.id_product == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(desc("lines"), desc("units"), Product.id)
        .limit(limit)
    )
    rows = (await session.execute(stmt)).all()
    return [
        TopProductItem(
            product_id=r.id,
            product_name=r.name,
            order_details_count=r.lines,
            units_sold=r.units,
        )
        for r in rows
    ]


async def type_summary(session: AsyncSession, type_id: int) -> TypeSummary:
    wine_type = await session.get(WineType, type_id)
    if wine_type is None:
        raise ResourceNotFoundError(f"Type not found with ID: {type_id}")
    stmt = (
        select(func.count(OrderDetail.id), _units)
        .select_from(OrderDetail)
        .join(Product, OrderDetail.id_product == Product.id)
        .where(Product.id_type == type_id)
    )
    lines, units = (await session.execute(stmt)).one()
    return TypeSummary(
        type_id=wine_type.id,
        type_name=wine_type.name,
        order_details_count=lines,
        units_sold=units,
    )


async def best_sellers(
    session: AsyncSession, year: Optional[int] = None, type_id: Optional[int] = None
) -> list[ProductQuantityItem]:
    stmt = (
        select(Product.id, Product.name, _units.label("units"))
        .join(OrderDetail, OrderDetail.id_product == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(desc("units"), Product.id)
    )
    rows = (await session.execute(_filter(stmt, year, type_id))).all()
    return [
        ProductQuantityItem(product_id=r.id, product_name=r.name, units_sold=r.units)
        for r in rows
    ]


async def type_best_sellers(
    session: AsyncSession, year: Optional[int] = None, type_id: Optional[int] = None
) -> list[TypeQuantityItem]:
    stmt = (
        select(WineType.id, WineType.name, _units.label("units"))
        .select_from(Product)
        .join(OrderDetail, OrderDetail.id_product == Product.id)
        .join(WineType, Product.id_type == WineType.id)
        .group_by(WineType.id, WineType.name)
        .order_by(desc("units"), WineType.id)
    )
    rows = (await session.execute(_filter(stmt, year, type_id))).all()
    return [TypeQuantityItem(type_id=r.id, type_name=r.name, units_sold=r.units) for r in rows]


async def sales_totals(
    session: AsyncSession, year: Optional[int] = None, type_id: Optional[int] = None
) -> list[ProductSalesItem]:
    """Revenue per product, priced at what each line was actually sold for."""
    revenue = func.coalesce(func.sum(OrderDetail.quantity * OrderDetail.price), 0.0)
    stmt = (
        select(Product.id, Product.name, revenue.label("revenue"))
        .join(OrderDetail, OrderDetail.id_product == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(desc("revenue"), Product.id)
    )
    rows = (await session.execute(_filter(stmt, year, type_id))).all()
    return [
        ProductSalesItem(product_id=r.id, product_name=r.name, total_sales=float(r.revenue))
        for r in rows
    ]


async def stock_levels(
    session: AsyncSession, year: Optional[int] = None, type_id: Optional[int] = None
) -> list[ProductStockItem]:
    stmt = select(Product.id, Product.name, Product.year, Product.stock).order_by(Product.id)
    rows = (await session.execute(_filter(stmt, year, type_id))).all()
    return [
        ProductStockItem(product_id=r.id, product_name=r.name, year=r.year, stock=r.stock)
        for r in rows
    ]


async def render_stock_report(
    session: AsyncSession,
    threshold: int,
    year: Optional[int] = None,
    type_id: Optional[int] = None,
) -> str:
    return generate_stock_report(
        stock=await stock_levels(session, year, type_id),
        low_stock=await low_stock(session, threshold),
        best_sellers=await best_sellers(session, year, type_id),
        sales=await sales_totals(session, year, type_id),
        threshold=threshold,
        year=year,
        type_id=type_id,
    )
