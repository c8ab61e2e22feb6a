"""Sales and stock report endpoints (admin only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin
from src.api.schemas import (
    LowStockItem,
    ProductQuantityItem,
    ProductSalesItem,
    ProductStockItem,
    TopProductItem,
    TypeQuantityItem,
    TypeSummary,
)
from src.core.config import get_settings
from src.reports import sales

router = APIRouter(prefix="/report", dependencies=[Depends(require_admin)])


@router.get("/low-stock", response_model=list[LowStockItem])
async def low_stock(
    threshold: Optional[int] = Query(default=None, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    if threshold is None:
        threshold = get_settings().low_stock_threshold
    return await sales.low_stock(session, threshold)


@router.get("/top-products", response_model=list[TopProductItem])
async def top_products(
    limit: Optional[int] = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_db_session),
):
    return await sales.top_products(session, limit or get_settings().top_products_limit)


@router.get("/type-summary/{type_id}", response_model=TypeSummary)
async def type_summary(type_id: int, session: AsyncSession = Depends(get_db_session)):
    return await sales.type_summary(session, type_id)


@router.get("/best-sellers", response_model=list[ProductQuantityItem])
async def best_sellers(
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
):
    return await sales.best_sellers(session, year, type_id)


@router.get("/type-best-sellers", response_model=list[TypeQuantityItem])
async def type_best_sellers(
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
):
    return await sales.type_best_sellers(session, year, type_id)


@router.get("/sales", response_model=list[ProductSalesItem])
async def sales_totals(
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
):
    return await sales.sales_totals(session, year, type_id)


@router.get("/stock", response_model=list[ProductStockItem])
async def stock_levels(
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
):
    return await sales.stock_levels(session, year, type_id)


@router.get("/stock/markdown", response_class=PlainTextResponse)
async def stock_report(
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    session: AsyncSession = Depends(get_db_session),
) -> PlainTextResponse:
    """The stock and sales report as markdown."""
    content = await sales.render_stock_report(
        session, get_settings().low_stock_threshold, year, type_id
    )
    return PlainTextResponse(content=content, media_type="text/markdown")
