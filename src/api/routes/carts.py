"""Shopping cart endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin, require_customer
from src.api.schemas import (
    AdminCartWriteRequest,
    CartCreateRequest,
    CartResponse,
    CartUpdateRequest,
)
from src.core.models import Principal
from src.services import carts

router = APIRouter(prefix="/cart")


@router.get("/all-admin", response_model=list[CartResponse], dependencies=[Depends(require_admin)])
async def admin_list_carts(session: AsyncSession = Depends(get_db_session)):
    return await carts.admin_list_carts(session)


@router.get("/all", response_model=list[CartResponse])
async def list_carts(
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await carts.list_carts(session, principal)


@router.get("/id/{cart_id}", response_model=CartResponse, dependencies=[Depends(require_admin)])
async def admin_get_cart(cart_id: int, session: AsyncSession = Depends(get_db_session)):
    return await carts.admin_get_cart(session, cart_id)


@router.post(
    "/create-admin",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def admin_create_cart(
    request: AdminCartWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await carts.admin_create_cart(session, request)


@router.post("/create", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def create_cart(
    request: CartCreateRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await carts.create_cart(session, principal, request)


@router.put("/update-admin", response_model=CartResponse, dependencies=[Depends(require_admin)])
async def admin_update_cart(
    request: AdminCartWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await carts.admin_update_cart(session, request)


@router.put("/update", response_model=CartResponse)
async def update_cart(
    request: CartUpdateRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await carts.update_cart(session, principal, request)


@router.delete(
    "/delete-admin/{cart_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def admin_delete_cart(cart_id: int, session: AsyncSession = Depends(get_db_session)):
    await carts.admin_delete_cart(session, cart_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/delete/{cart_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cart(
    cart_id: int,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    await carts.delete_cart(session, principal, cart_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/clean", status_code=status.HTTP_204_NO_CONTENT)
async def clean_cart(
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    await carts.clean_cart(session, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
