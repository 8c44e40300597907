from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from laundry_service.schemas.order import Pagination


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)
    service_rating: Optional[int] = Field(default=None, ge=1, le=5)
    delivery_rating: Optional[int] = Field(default=None, ge=1, le=5)
    value_rating: Optional[int] = Field(default=None, ge=1, le=5)
    images: List[str] = Field(default_factory=list, max_length=5)


class ReviewReply(BaseModel):
    reply: str = Field(min_length=1, max_length=1000)


class ReviewResponse(BaseModel):
    id: str
    order_id: str
    customer_id: str
    laundry_id: str
    rating: int
    service_rating: Optional[int] = None
    delivery_rating: Optional[int] = None
    value_rating: Optional[int] = None
    comment: Optional[str] = None
    images: List[str] = []
    laundry_reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderReviewResponse(BaseModel):
    review: Optional[ReviewResponse] = None
    can_review: bool


class RatingSummary(BaseModel):
    average_rating: float
    total_reviews: int
    distribution: Dict[int, int]


class LaundryReviewsResponse(BaseModel):
    reviews: List[ReviewResponse]
    summary: RatingSummary
    pagination: Pagination
