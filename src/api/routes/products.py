"""Product catalog endpoints. Reads are public; writes need the admin role."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin
from src.api.schemas import ProductResponse, ProductView, ProductWriteRequest
from src.services import products

router = APIRouter(prefix="/product")


@router.get("/all", response_model=list[ProductView])
async def list_products(session: AsyncSession = Depends(get_db_session)):
    return await products.list_products(session)


@router.get("/id/{product_id}", response_model=ProductView)
async def get_product(product_id: int, session: AsyncSession = Depends(get_db_session)):
    return await products.get_product(session, product_id)


@router.get("/random", response_model=list[ProductView])
async def random_products(session: AsyncSession = Depends(get_db_session)):
    return await products.random_products(session)


@router.get("/winery/{winery_id}", response_model=list[ProductView])
async def products_by_winery(winery_id: int, session: AsyncSession = Depends(get_db_session)):
    return await products.products_by_winery(session, winery_id)


@router.get("/variety/{variety_id}", response_model=list[ProductView])
async def products_by_variety(variety_id: int, session: AsyncSession = Depends(get_db_session)):
    return await products.products_by_variety(session, variety_id)


@router.get("/type/{type_id}", response_model=list[ProductView])
async def products_by_type(type_id: int, session: AsyncSession = Depends(get_db_session)):
    return await products.products_by_type(session, type_id)


@router.post(
    "/create",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_product(
    request: ProductWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await products.create_product(session, request)


@router.put("/update", response_model=ProductResponse, dependencies=[Depends(require_admin)])
async def update_product(
    request: ProductWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await products.update_product(session, request)


@router.delete(
    "/delete/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_product(product_id: int, session: AsyncSession = Depends(get_db_session)):
    await products.delete_product(session, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
