from datetime import datetime
from typing import ClassVar, Dict, Type
from pydantic import BaseModel


class LifecycleEvent(BaseModel):
    event_type: ClassVar[str]


class OrderCreatedEvent(LifecycleEvent):
    event_type: ClassVar[str] = "order.created"

    order_id: str
    order_number: str
    customer_id: str
    laundry_id: str
    items_count: int
    total_amount: float
    created_at: datetime


class OrderStatusChangedEvent(LifecycleEvent):
    event_type: ClassVar[str] = "order.status_changed"

    order_id: str
    order_number: str
    customer_id: str
    laundry_id: str
    from_status: str
    to_status: str
    changed_by: str
    notes: str | None = None
    changed_at: datetime


class OrderCancelledEvent(LifecycleEvent):
    event_type: ClassVar[str] = "order.cancelled"

    order_id: str
    order_number: str
    customer_id: str
    laundry_id: str
    from_status: str
    cancelled_by: str
    reason: str
    cancelled_at: datetime


class ReviewCreatedEvent(LifecycleEvent):
    event_type: ClassVar[str] = "review.created"

    review_id: str
    order_id: str
    order_number: str
    customer_id: str
    laundry_id: str
    rating: int
    created_at: datetime


EVENT_TYPES: Dict[str, Type[LifecycleEvent]] = {
    event.event_type: event
    for event in (OrderCreatedEvent, OrderStatusChangedEvent, OrderCancelledEvent, ReviewCreatedEvent)
}
