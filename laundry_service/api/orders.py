from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from laundry_service.api.deps import get_current_actor, get_order_service, require_customer
from laundry_service.core.security import Actor, CustomerActor
from laundry_service.schemas.order import (
    OrderCancel,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    TimelineResponse,
)
from laundry_service.services.order import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    customer: CustomerActor = Depends(require_customer),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.create_order(customer, order_data)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    customer: CustomerActor = Depends(require_customer),
    service: OrderService = Depends(get_order_service)
) -> OrderListResponse:
    return await service.list_orders(customer, status, page, limit)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.get_order(actor, order_id)


@router.get("/{order_id}/timeline", response_model=TimelineResponse)
async def get_order_timeline(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service)
) -> TimelineResponse:
    return await service.get_timeline(actor, order_id)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    cancel_data: OrderCancel,
    actor: Actor = Depends(get_current_actor),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.cancel_order(actor, order_id, cancel_data.reason)


@router.post("/{order_id}/confirm-delivery", response_model=OrderResponse)
async def confirm_delivery(
    order_id: str,
    customer: CustomerActor = Depends(require_customer),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.confirm_delivery(customer, order_id)
