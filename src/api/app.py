"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.exceptions import CommerceError
from src.core.logging import configure_logging, get_logger
from src.db.engine import dispose_engine, get_engine
from src.db.models import Base

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables on startup, dispose engine on shutdown."""
    settings = get_settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    logger.info("api_starting")

    # Create tables (in production, use Alembic migrations instead)
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_ready")

    yield

    await dispose_engine()
    logger.info("api_shutdown")


async def commerce_error_handler(request: Request, exc: CommerceError) -> JSONResponse:
    level = "error" if exc.status_code >= 500 else "info"
    getattr(logger, level)(
        "request_rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error=type(exc).__name__,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Wine Commerce",
        description="Wine marketplace: catalog, orders, carts and customer profiles",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(CommerceError, commerce_error_handler)

    # Register routes
    from src.api.routes import (
        carts,
        health,
        metrics,
        order_details,
        orders,
        products,
        reports,
        taxonomy,
        users,
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["metrics"])
    app.include_router(products.router, prefix="/api/v1", tags=["products"])
    app.include_router(taxonomy.type_router, prefix="/api/v1", tags=["types"])
    app.include_router(taxonomy.variety_router, prefix="/api/v1", tags=["varieties"])
    app.include_router(taxonomy.winery_router, prefix="/api/v1", tags=["wineries"])
    app.include_router(orders.router, prefix="/api/v1", tags=["orders"])
    app.include_router(order_details.router, prefix="/api/v1", tags=["order-details"])
    app.include_router(carts.router, prefix="/api/v1", tags=["carts"])
    app.include_router(reports.router, prefix="/api/v1", tags=["reports"])
    app.include_router(users.router, prefix="/api/v1", tags=["users"])

    return app
