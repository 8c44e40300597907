from fastapi import APIRouter, Depends, Query, status

from laundry_service.api.deps import get_current_actor, get_review_service, require_customer
from laundry_service.core.security import Actor, CustomerActor
from laundry_service.schemas.review import LaundryReviewsResponse, OrderReviewResponse, ReviewCreate, ReviewResponse
from laundry_service.services.review import ReviewService

router = APIRouter(tags=["reviews"])


@router.post("/orders/{order_id}/review", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    order_id: str,
    review_data: ReviewCreate,
    customer: CustomerActor = Depends(require_customer),
    service: ReviewService = Depends(get_review_service)
) -> ReviewResponse:
    return await service.create_review(customer, order_id, review_data)


@router.get("/orders/{order_id}/review", response_model=OrderReviewResponse)
async def get_order_review(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    service: ReviewService = Depends(get_review_service)
) -> OrderReviewResponse:
    return await service.get_order_review(actor, order_id)


@router.get("/laundries/{laundry_id}/reviews", response_model=LaundryReviewsResponse)
async def list_laundry_reviews(
    laundry_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    service: ReviewService = Depends(get_review_service)
) -> LaundryReviewsResponse:
    return await service.list_laundry_reviews(laundry_id, page, limit)
