from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from laundry_service.models.order import OrderStatus, OrderType

CANCEL_REASON_MIN_LENGTH = 10


class OrderItemCreate(BaseModel):
    service_id: str
    clothing_item_id: str
    quantity: int = Field(default=1, ge=1)
    weight_kg: Optional[Decimal] = Field(default=None, ge=Decimal("0.1"), max_digits=8, decimal_places=2)
    special_notes: Optional[str] = Field(default=None, max_length=200)


class OrderCreate(BaseModel):
    laundry_id: str
    order_type: OrderType = OrderType.STANDARD
    pickup_address: str = Field(min_length=10, max_length=500)
    pickup_latitude: float = Field(ge=-90, le=90)
    pickup_longitude: float = Field(ge=-180, le=180)
    pickup_date: datetime
    pickup_time_slot: Optional[str] = Field(default=None, max_length=50)
    pickup_notes: Optional[str] = Field(default=None, max_length=200)
    delivery_address: Optional[str] = Field(default=None, max_length=500)
    delivery_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    delivery_longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    delivery_notes: Optional[str] = Field(default=None, max_length=200)
    items: List[OrderItemCreate] = Field(min_length=1)
    promo_code: Optional[str] = Field(default=None, max_length=50)
    special_instructions: Optional[str] = Field(default=None, max_length=500)

    @field_validator("promo_code")
    @classmethod
    def normalize_promo_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(default=None, max_length=500)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def cancellation_reason_length(self) -> "OrderStatusUpdate":
        # notes become the cancellation reason
        if (
            self.status == OrderStatus.CANCELLED
            and self.notes is not None
            and len(self.notes.strip()) < CANCEL_REASON_MIN_LENGTH
        ):
            raise ValueError(f"Cancellation reason must be at least {CANCEL_REASON_MIN_LENGTH} characters")
        return self


class OrderCancel(BaseModel):
    reason: str = Field(min_length=CANCEL_REASON_MIN_LENGTH, max_length=500)


class OrderItemResponse(BaseModel):
    laundry_service_id: str
    clothing_item_id: str
    quantity: int
    weight_kg: Optional[float] = None
    unit_price: float
    price_unit: str
    total_price: float
    special_notes: Optional[str] = None

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    amount: float
    payment_method: str
    payment_status: str
    paid_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TimelineEntryResponse(BaseModel):
    event: str
    title: str
    description: Optional[str] = None
    icon: str
    timestamp: datetime

    model_config = {"from_attributes": True}


class StatusHistoryResponse(BaseModel):
    from_status: Optional[str] = None
    to_status: str
    changed_by: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    laundry_id: str
    status: str
    order_type: str
    payment_method: str
    pickup_address: str
    pickup_latitude: float
    pickup_longitude: float
    pickup_date: datetime
    pickup_time_slot: Optional[str] = None
    delivery_address: str
    delivery_latitude: float
    delivery_longitude: float
    expected_delivery_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None
    subtotal: float
    delivery_fee: float
    express_fee: float
    discount: float
    total_amount: float
    promo_code: Optional[str] = None
    special_instructions: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    accepted_at: Optional[datetime] = None
    pickup_scheduled_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    processing_started_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    out_for_delivery_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse]
    payment: Optional[PaymentResponse] = None
    status_history: List[StatusHistoryResponse] = []

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=(total + limit - 1) // limit,
            has_more=page * limit < total
        )


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    pagination: Pagination


class TimelineResponse(BaseModel):
    order_id: str
    timeline: List[TimelineEntryResponse]
