"""Order endpoints.

``*-admin`` routes act on any order; the others are scoped to the caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin, require_customer
from src.api.schemas import (
    AdminOrderWriteRequest,
    OrderCreateRequest,
    OrderResponse,
    OrderUpdateRequest,
)
from src.core.models import Principal
from src.services import orders

router = APIRouter(prefix="/order")


@router.get("/all-admin", response_model=list[OrderResponse], dependencies=[Depends(require_admin)])
async def admin_list_orders(session: AsyncSession = Depends(get_db_session)):
    return await orders.admin_list_orders(session)


@router.get("/all", response_model=list[OrderResponse])
async def list_orders(
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await orders.list_orders(session, principal)


@router.get("/id/{order_id}", response_model=OrderResponse, dependencies=[Depends(require_admin)])
async def admin_get_order(order_id: int, session: AsyncSession = Depends(get_db_session)):
    return await orders.admin_get_order(session, order_id)


@router.post(
    "/create-admin",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def admin_create_order(
    request: AdminOrderWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await orders.admin_create_order(session, request)


@router.post("/create", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await orders.create_order(session, principal, request)


@router.put("/update-admin", response_model=OrderResponse, dependencies=[Depends(require_admin)])
async def admin_update_order(
    request: AdminOrderWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await orders.admin_update_order(session, request)


@router.put("/update", response_model=OrderResponse)
async def update_order(
    request: OrderUpdateRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await orders.update_order(session, principal, request)


@router.delete(
    "/delete-admin/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def admin_delete_order(order_id: int, session: AsyncSession = Depends(get_db_session)):
    await orders.admin_delete_order(session, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/delete/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: int,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    await orders.delete_order(session, principal, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
