"""Prometheus-compatible metrics endpoint.

Exposes catalog and order counters in Prometheus text format for scraping.
The metrics are formatted by hand.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session
from src.core.cache import get_catalog_cache
from src.db.models import CartItem, Order, Product
from src.db.repository import count_rows

router = APIRouter()

_start_time = time.time()


@router.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics(
    session: AsyncSession = Depends(get_db_session),
) -> PlainTextResponse:
    """Expose application metrics in Prometheus text format."""

    products = await count_rows(session, Product)
    orders = await count_rows(session, Order)
    cart_lines = await count_rows(session, CartItem)
    cache = get_catalog_cache()
    uptime = time.time() - _start_time

    lines = [
        "# HELP wine_products_total Number of products in the catalog",
        "# TYPE wine_products_total gauge",
        f"wine_products_total {products}",
        "",
        "# HELP wine_orders_total Number of stored orders",
        "# TYPE wine_orders_total gauge",
        f"wine_orders_total {orders}",
        "",
        "# HELP wine_cart_lines_total Number of open cart lines",
        "# TYPE wine_cart_lines_total gauge",
        f"wine_cart_lines_total {cart_lines}",
        "",
        "# HELP wine_catalog_cache_hits_total Catalog cache hits",
        "# TYPE wine_catalog_cache_hits_total counter",
        f"wine_catalog_cache_hits_total {cache.hits}",
        "",
        "# HELP wine_catalog_cache_misses_total Catalog cache misses",
        "# TYPE wine_catalog_cache_misses_total counter",
        f"wine_catalog_cache_misses_total {cache.misses}",
        "",
        "# HELP wine_uptime_seconds API server uptime in seconds",
        "# TYPE wine_uptime_seconds gauge",
        f"wine_uptime_seconds {uptime:.1f}",
        "",
    ]

    return PlainTextResponse(
        content="\n".join(lines),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
