from typing import Optional

from fastapi import APIRouter, Depends, Query

from laundry_service.api.deps import get_catalog_service, get_order_service, get_review_service, require_laundry
from laundry_service.core.security import LaundryActor
from laundry_service.schemas.catalog import PricingResponse, PricingUpsert, ServiceAvailabilityUpdate, ServiceResponse
from laundry_service.schemas.order import OrderListResponse, OrderResponse, OrderStatusUpdate
from laundry_service.schemas.review import ReviewReply, ReviewResponse
from laundry_service.services.catalog import CatalogService
from laundry_service.services.order import OrderService
from laundry_service.services.review import ReviewService

router = APIRouter(prefix="/laundry", tags=["laundry"])


@router.get("/orders", response_model=OrderListResponse)
async def list_laundry_orders(
    status: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    laundry: LaundryActor = Depends(require_laundry),
    service: OrderService = Depends(get_order_service)
) -> OrderListResponse:
    return await service.list_orders(laundry, status, page, limit)


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    laundry: LaundryActor = Depends(require_laundry),
    service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    return await service.update_status(laundry, order_id, update)


@router.put("/services/{service_id}/pricing", response_model=PricingResponse)
async def upsert_service_pricing(
    service_id: str,
    pricing_data: PricingUpsert,
    laundry: LaundryActor = Depends(require_laundry),
    service: CatalogService = Depends(get_catalog_service)
) -> PricingResponse:
    return await service.upsert_pricing(laundry, service_id, pricing_data)


@router.put("/services/{service_id}/availability", response_model=ServiceResponse)
async def set_service_availability(
    service_id: str,
    availability: ServiceAvailabilityUpdate,
    laundry: LaundryActor = Depends(require_laundry),
    service: CatalogService = Depends(get_catalog_service)
) -> ServiceResponse:
    return await service.set_service_availability(laundry, service_id, availability.is_available)


@router.post("/reviews/{review_id}/reply", response_model=ReviewResponse)
async def reply_to_review(
    review_id: str,
    reply_data: ReviewReply,
    laundry: LaundryActor = Depends(require_laundry),
    service: ReviewService = Depends(get_review_service)
) -> ReviewResponse:
    return await service.reply_to_review(laundry, review_id, reply_data.reply)
