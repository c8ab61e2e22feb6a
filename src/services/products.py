"""Product catalog service."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import ProductResponse, ProductView, ProductWriteRequest
from src.core.cache import get_catalog_cache
from src.core.config import get_settings
from src.core.exceptions import BadRequestError, ResourceNotFoundError
from src.core.logging import get_logger
from src.db import repository
from src.db.models import Product, Variety, Winery, WineType

logger = get_logger("products")


def to_view(product: Product) -> ProductView:
    return ProductView(
        id=product.id,
        name=product.name,
        description=product.description,
        image=product.image,
        year=product.year,
        price=product.price,
        stock=product.stock,
        winery=product.winery.name,
        variety=product.variety.name,
        type=product.type.name,
    )


def _validate(request: ProductWriteRequest, *, require_id: bool) -> None:
    if require_id and request.id is None:
        raise BadRequestError("Product ID must not be null")
    for field_name in ("name", "description", "image"):
        value = getattr(request, field_name)
        if value is None or not value.strip():
            raise BadRequestError(f"Product {field_name} must not be null or empty")
    for field_name in ("year", "price", "stock"):
        value = getattr(request, field_name)
        if value is None or value < 0:
            raise BadRequestError(
                f"Product {field_name} must not be null and must be a positive number"
            )
    if request.id_winery is None:
        raise BadRequestError("Winery ID must not be null")
    if request.id_variety is None:
        raise BadRequestError("Variety ID must not be null")
    if request.id_type is None:
        raise BadRequestError("Type ID must not be null")


async def _apply(session: AsyncSession, product: Product, request: ProductWriteRequest) -> None:
    """Copy validated fields onto ``product`` after checking its taxonomy exists."""
    for model, row_id, label in (
        (Winery, request.id_winery, "Winery"),
        (Variety, request.id_variety, "Variety"),
        (WineType, request.id_type, "Type"),
    ):
        if await repository.get_by_id(session, model, row_id) is None:
            raise ResourceNotFoundError(f"{label} not found with ID: {row_id}")

    product.name = request.name.strip()
    product.description = request.description
    product.image = request.image
    product.year = request.year
    product.price = request.price
    product.stock = request.stock
    product.id_winery = request.id_winery
    product.id_variety = request.id_variety
    product.id_type = request.id_type


async def _load_views(session: AsyncSession, **filters: Optional[int]) -> list[ProductView]:
    products = await repository.list_products(session, **filters)
    return [to_view(p) for p in products]


async def list_products(session: AsyncSession) -> list[ProductView]:
    return await get_catalog_cache().get_or_load(
        "products:all", lambda: _load_views(session)
    )


async def get_product(session: AsyncSession, product_id: int) -> ProductView:
    product = await repository.get_by_id(session, Product, product_id)
    if product is None:
        raise ResourceNotFoundError(f"Product not found with ID: {product_id}")
    return to_view(product)


async def products_by_winery(session: AsyncSession, winery_id: int) -> list[ProductView]:
    views = await get_catalog_cache().get_or_load(
        f"products:winery:{winery_id}", lambda: _load_views(session, winery_id=winery_id)
    )
    if not views:
        raise ResourceNotFoundError(f"No products found for Winery ID: {winery_id}")
    return views


async def products_by_variety(session: AsyncSession, variety_id: int) -> list[ProductView]:
    views = await get_catalog_cache().get_or_load(
        f"products:variety:{variety_id}", lambda: _load_views(session, variety_id=variety_id)
    )
    if not views:
        raise ResourceNotFoundError(f"No products found for Variety ID: {variety_id}")
    return views


async def products_by_type(session: AsyncSession, type_id: int) -> list[ProductView]:
    views = await get_catalog_cache().get_or_load(
        f"products:type:{type_id}", lambda: _load_views(session, type_id=type_id)
    )
    if not views:
        raise ResourceNotFoundError(f"No products found for Type ID: {type_id}")
    return views


async def random_products(session: AsyncSession) -> list[ProductView]:
    # Not cached: every call should reshuffle
    limit = get_settings().random_products_limit
    products = await repository.random_products(session, limit)
    if not products:
        raise ResourceNotFoundError("No random products found in the database.")
    return [to_view(p) for p in products]


async def create_product(session: AsyncSession, request: ProductWriteRequest) -> ProductResponse:
    _validate(request, require_id=False)
    async with repository.transaction(session):
        product = Product()
        await _apply(session, product, request)
        await repository.add(session, product)
        await session.refresh(product)
    get_catalog_cache().invalidate()
    logger.info("product_created", product_id=product.id, name=product.name)
    return ProductResponse.model_validate(product)


async def update_product(session: AsyncSession, request: ProductWriteRequest) -> ProductResponse:
    _validate(request, require_id=True)
    async with repository.transaction(session):
        product = await repository.get_by_id(session, Product, request.id)
        if product is None:
            raise ResourceNotFoundError(f"Product not found with ID: {request.id}")
        await _apply(session, product, request)
        await session.flush()
        await session.refresh(product)
    get_catalog_cache().invalidate()
    logger.info("product_updated", product_id=product.id)
    return ProductResponse.model_validate(product)


async def delete_product(session: AsyncSession, product_id: int) -> None:
    async with repository.transaction(session):
        product = await repository.get_by_id(session, Product, product_id)
        if product is None:
            raise ResourceNotFoundError(f"Product not found with ID: {product_id}")
        if await repository.count_details_for_product(session, product_id):
            raise BadRequestError(
                f"Product {product_id} appears in existing orders and cannot be deleted"
            )
        await repository.delete_carts_for_product(session, product_id)
        await repository.remove(session, product)
    get_catalog_cache().invalidate()
    logger.info("product_deleted", product_id=product_id)
