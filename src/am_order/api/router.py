# src/am_order/api/router.py
"""am_order REST endpoints.

POST /orders                       — buyer places an order (reserves stock)
GET  /orders/buyer                 — buyer's own orders, newest first
GET  /orders/seller                — seller's own orders, newest first
GET  /orders/{order_id}            — order detail (participants only)
PUT  /orders/{order_id}/status     — seller advances the status one step
PUT  /orders/{order_id}/cancel     — buyer or seller cancels (releases stock)
"""
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.enums import OrderStatus
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import Principal, get_current_principal
from src.am_order.application.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    UpdateStatusRequest,
)
from src.am_order.application.service import OrderLifecycleService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderLifecycleService()


def _wrap(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=201)
async def create_order(
    req: CreateOrderRequest,
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.create_order(db, principal, req)
    return _wrap(request, order.model_dump(mode="json"), "Order created successfully")


@router.get("/buyer")
async def list_buyer_orders(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: OrderStatus | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    result = await _service.list_buyer_orders(
        db, principal, status.value if status else None, limit, cursor
    )
    return _wrap(request, result.model_dump(mode="json"))


@router.get("/seller")
async def list_seller_orders(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: OrderStatus | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (order ID)"),
) -> ApiResponse:
    result = await _service.list_seller_orders(
        db, principal, status.value if status else None, limit, cursor
    )
    return _wrap(request, result.model_dump(mode="json"))


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.get_order(db, principal, order_id)
    return _wrap(request, order.model_dump(mode="json"))


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    req: UpdateStatusRequest,
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.advance_status(db, principal, order_id, req)
    return _wrap(request, order.model_dump(mode="json"), "Order status updated successfully")


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    req: Annotated[CancelOrderRequest | None, Body()] = None,
) -> ApiResponse:
    order = await _service.cancel_order(db, principal, order_id, req or CancelOrderRequest())
    return _wrap(request, order.model_dump(mode="json"), "Order cancelled successfully")
