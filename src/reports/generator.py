"""Stock report generator, a Jinja2-based markdown renderer.

Takes already-computed report rows (see ``src.reports.sales``) and lays them
out as a markdown document for the admin reports endpoint.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from src.api.schemas import (
    LowStockItem,
    ProductQuantityItem,
    ProductSalesItem,
    ProductStockItem,
)

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _fmt_timestamp(value: Any) -> str:
    """Format a timestamp for display."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S UTC")
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return dt.strftime("%Y-%m-%d %H:%M:%S UTC")
        except ValueError:
            return value
    return str(value)


def _fmt_money(value: Any) -> str:
    """Format an amount with two decimals and thousands separators."""
    if value is None:
        return "N/A"
    try:
        return f"${float(value):,.2f}"
    except (TypeError, ValueError):
        return str(value)


def _fmt_filter(value: Optional[int]) -> str:
    """Render a year/type filter, where 0 or None means any."""
    return str(value) if value else "any"


def _get_jinja_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["fmt_timestamp"] = _fmt_timestamp
    env.filters["fmt_money"] = _fmt_money
    env.filters["fmt_filter"] = _fmt_filter
    return env


def generate_stock_report(
    *,
    stock: Sequence[ProductStockItem],
    low_stock: Sequence[LowStockItem],
    best_sellers: Sequence[ProductQuantityItem],
    sales: Sequence[ProductSalesItem],
    threshold: int,
    year: Optional[int] = None,
    type_id: Optional[int] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the stock and sales report as markdown.

    Args:
        stock: Current stock per product.
        low_stock: Products below ``threshold``.
        best_sellers: Products ranked by units sold.
        sales: Products ranked by revenue.
        threshold: The low-stock threshold used for ``low_stock``.
        year: Year filter applied to the other sections, if any.
        type_id: Wine type filter applied to the other sections, if any.
        generated_at: Report timestamp; defaults to now.

    Returns:
        A formatted markdown string.
    """
    template = _get_jinja_env().get_template("stock_report.md.j2")
    context = {
        "generated_at": generated_at or datetime.now(timezone.utc),
        "year": year,
        "type_id": type_id,
        "threshold": threshold,
        "stock": list(stock),
        "low_stock": list(low_stock),
        "best_sellers": list(best_sellers),
        "sales": list(sales),
        "total_units": sum(item.units_sold for item in best_sellers),
        "total_revenue": sum(item.total_sales for item in sales),
        "total_stock": sum(item.stock for item in stock),
    }
    return template.render(**context)
