"""Order detail (line item) endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db_session, require_admin, require_customer
from src.api.schemas import (
    AdminOrderDetailWriteRequest,
    OrderDetailAddRequest,
    OrderDetailResponse,
    OrderDetailUpdateRequest,
)
from src.core.models import Principal
from src.services import order_details

router = APIRouter(prefix="/order-details")


@router.get(
    "/all-admin", response_model=list[OrderDetailResponse], dependencies=[Depends(require_admin)]
)
async def admin_list_details(session: AsyncSession = Depends(get_db_session)):
    return await order_details.admin_list_details(session)


@router.get("/all", response_model=list[OrderDetailResponse])
async def list_details(
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await order_details.list_details(session, principal)


@router.get("/all/order-id/{order_id}", response_model=list[OrderDetailResponse])
async def list_details_for_order(
    order_id: int,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await order_details.list_details_for_order(session, principal, order_id)


@router.get(
    "/id/{detail_id}", response_model=OrderDetailResponse, dependencies=[Depends(require_admin)]
)
async def admin_get_detail(detail_id: int, session: AsyncSession = Depends(get_db_session)):
    return await order_details.admin_get_detail(session, detail_id)


@router.post(
    "/create-admin",
    response_model=OrderDetailResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def admin_create_detail(
    request: AdminOrderDetailWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await order_details.admin_create_detail(session, request)


@router.post(
    "/create-to-existing-order",
    response_model=OrderDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_detail_to_order(
    request: OrderDetailAddRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await order_details.add_detail_to_order(session, principal, request)


@router.put(
    "/update-admin", response_model=OrderDetailResponse, dependencies=[Depends(require_admin)]
)
async def admin_update_detail(
    request: AdminOrderDetailWriteRequest, session: AsyncSession = Depends(get_db_session)
):
    return await order_details.admin_update_detail(session, request)


@router.put("/update", response_model=OrderDetailResponse)
async def update_detail(
    request: OrderDetailUpdateRequest,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    return await order_details.update_detail(session, principal, request)


@router.delete(
    "/force-delete-admin/{detail_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def admin_force_delete_detail(
    detail_id: int, session: AsyncSession = Depends(get_db_session)
):
    await order_details.admin_force_delete_detail(session, detail_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/delete-admin/{detail_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def admin_delete_detail(detail_id: int, session: AsyncSession = Depends(get_db_session)):
    await order_details.admin_delete_detail(session, detail_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/delete/{detail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_detail(
    detail_id: int,
    principal: Principal = Depends(require_customer),
    session: AsyncSession = Depends(get_db_session),
):
    await order_details.delete_detail(session, principal, detail_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
