"""Winery, variety and type endpoints.

The three entities expose the same routes, so one router is built per model.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin
from src.api.schemas import TaxonomyCreateRequest, TaxonomyResponse, TaxonomyUpdateRequest
from src.db.models import Variety, Winery, WineType
from src.services import catalog
from src.services.catalog import TaxonomyModel


def build_router(model: TaxonomyModel, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix)

    @router.get("/all", response_model=list[TaxonomyResponse])
    async def list_all(session: AsyncSession = Depends(get_db_session)):
        return await catalog.list_taxonomy(session, model)

    @router.get("/id/{row_id}", response_model=TaxonomyResponse)
    async def get_one(row_id: int, session: AsyncSession = Depends(get_db_session)):
        return await catalog.get_taxonomy(session, model, row_id)

    @router.post(
        "/create",
        response_model=TaxonomyResponse,
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_admin)],
    )
    async def create(
        request: TaxonomyCreateRequest, session: AsyncSession = Depends(get_db_session)
    ):
        return await catalog.create_taxonomy(session, model, request)

    @router.put("/update", response_model=TaxonomyResponse, dependencies=[Depends(require_admin)])
    async def update(
        request: TaxonomyUpdateRequest, session: AsyncSession = Depends(get_db_session)
    ):
        return await catalog.update_taxonomy(session, model, request)

    @router.delete(
        "/delete/{row_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        dependencies=[Depends(require_admin)],
    )
    async def delete(row_id: int, session: AsyncSession = Depends(get_db_session)):
        await catalog.delete_taxonomy(session, model, row_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


winery_router = build_router(Winery, "/winery")
variety_router = build_router(Variety, "/variety")
type_router = build_router(WineType, "/type")
