"""Taxonomy service: wineries, grape varieties and wine types.

The three entities share one shape (id + name), so every operation takes the
model class and resolves its label and product foreign key from ``_META``.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import TaxonomyCreateRequest, TaxonomyResponse, TaxonomyUpdateRequest
from src.core.cache import get_catalog_cache
from src.core.exceptions import BadRequestError, ResourceNotFoundError
from src.core.logging import get_logger
from src.db import repository
from src.db.models import Variety, Winery, WineType

logger = get_logger("catalog")

TaxonomyModel = type[Winery] | type[Variety] | type[WineType]

# label, keyword used by repository.count_products_referencing
_META: dict[type, tuple[str, str]] = {
    Winery: ("Winery", "winery_id"),
    Variety: ("Variety", "variety_id"),
    WineType: ("Type", "type_id"),
}


def _label(model: TaxonomyModel) -> str:
    return _META[model][0]


def _validate_name(model: TaxonomyModel, name: str | None) -> str:
    if name is None or not name.strip():
        raise BadRequestError(f"{_label(model)} name must not be null or empty")
    return name.strip()


async def _require(session: AsyncSession, model: TaxonomyModel, row_id: int):
    row = await repository.get_by_id(session, model, row_id)
    if row is None:
        raise ResourceNotFoundError(f"{_label(model)} not found with ID: {row_id}")
    return row


async def list_taxonomy(session: AsyncSession, model: TaxonomyModel) -> list[TaxonomyResponse]:
    async def load() -> list[TaxonomyResponse]:
        rows = await repository.list_all(session, model)
        return [TaxonomyResponse.model_validate(r) for r in rows]

    return await get_catalog_cache().get_or_load(f"{_label(model).lower()}:all", load)


async def get_taxonomy(
    session: AsyncSession, model: TaxonomyModel, row_id: int
) -> TaxonomyResponse:
    row = await _require(session, model, row_id)
    return TaxonomyResponse.model_validate(row)


async def create_taxonomy(
    session: AsyncSession, model: TaxonomyModel, request: TaxonomyCreateRequest
) -> TaxonomyResponse:
    name = _validate_name(model, request.name)
    async with repository.transaction(session):
        row = await repository.add(session, model(name=name))
    get_catalog_cache().invalidate()
    logger.info("taxonomy_created", kind=_label(model), id=row.id, name=name)
    return TaxonomyResponse.model_validate(row)


async def update_taxonomy(
    session: AsyncSession, model: TaxonomyModel, request: TaxonomyUpdateRequest
) -> TaxonomyResponse:
    name = _validate_name(model, request.name)
    async with repository.transaction(session):
        row = await _require(session, model, request.id)
        row.name = name
        await session.flush()
    get_catalog_cache().invalidate()
    logger.info("taxonomy_updated", kind=_label(model), id=row.id)
    return TaxonomyResponse.model_validate(row)


async def delete_taxonomy(session: AsyncSession, model: TaxonomyModel, row_id: int) -> None:
    async with repository.transaction(session):
        row = await _require(session, model, row_id)
        in_use = await repository.count_products_referencing(
            session, **{_META[model][1]: row_id}
        )
        if in_use:
            raise BadRequestError(
                f"{_label(model)} {row_id} is still referenced by {in_use} product(s)"
            )
        await repository.remove(session, row)
    get_catalog_cache().invalidate()
    logger.info("taxonomy_deleted", kind=_label(model), id=row_id)
