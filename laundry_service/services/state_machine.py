"""Order lifecycle.

PENDING -> ACCEPTED -> PICKUP_SCHEDULED -> PICKED_UP -> PROCESSING -> READY
-> OUT_FOR_DELIVERY -> DELIVERED -> COMPLETED, with REJECTED and CANCELLED as
alternate terminal states. Transitions only ever move forward.

The machine mutates the in-session ``Order`` and its child collections; the
caller flushes and commits them as one unit. A refused transition raises
before anything is touched.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from laundry_service.core.errors import CancellationNotAllowed, InvalidStatusTransition
from laundry_service.core.security import Actor
from laundry_service.models.order import (
    Order,
    OrderStatus,
    OrderStatusHistory,
    OrderTimeline,
    PaymentMethod,
    PaymentStatus,
)

logger = logging.getLogger(__name__)

S = OrderStatus

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    S.PENDING: frozenset({S.ACCEPTED, S.REJECTED, S.CANCELLED}),
    S.ACCEPTED: frozenset({S.PICKUP_SCHEDULED, S.CANCELLED}),
    S.PICKUP_SCHEDULED: frozenset({S.PICKED_UP, S.CANCELLED}),
    S.PICKED_UP: frozenset({S.PROCESSING, S.CANCELLED}),
    S.PROCESSING: frozenset({S.READY}),
    S.READY: frozenset({S.OUT_FOR_DELIVERY}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED}),
    S.DELIVERED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REJECTED: frozenset(),
}

CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset({S.PENDING, S.ACCEPTED, S.PICKUP_SCHEDULED, S.PICKED_UP})
TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({S.COMPLETED, S.CANCELLED, S.REJECTED})
ACTIVE_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {S.PENDING, S.ACCEPTED, S.PICKUP_SCHEDULED, S.PICKED_UP, S.PROCESSING, S.READY, S.OUT_FOR_DELIVERY}
)

STATUS_TIMESTAMPS: Dict[OrderStatus, str] = {
    S.ACCEPTED: "accepted_at",
    S.PICKUP_SCHEDULED: "pickup_scheduled_at",
    S.PICKED_UP: "picked_up_at",
    S.PROCESSING: "processing_started_at",
    S.READY: "ready_at",
    S.OUT_FOR_DELIVERY: "out_for_delivery_at",
    S.DELIVERED: "delivered_at",
    S.COMPLETED: "completed_at",
    S.CANCELLED: "cancelled_at",
    S.REJECTED: "rejected_at",
}


@dataclass(frozen=True)
class TimelineEvent:
    event: str
    title: str
    icon: str
    description: str


TIMELINE_EVENTS: Dict[OrderStatus, TimelineEvent] = {
    S.PENDING: TimelineEvent("ORDER_PLACED", "Order Placed", "shopping-cart", "Order has been placed successfully"),
    S.ACCEPTED: TimelineEvent("ORDER_ACCEPTED", "Order Accepted", "check-circle", "Your order has been accepted by the laundry"),
    S.REJECTED: TimelineEvent("ORDER_REJECTED", "Order Rejected", "x-circle", "Your order has been rejected"),
    S.PICKUP_SCHEDULED: TimelineEvent("PICKUP_SCHEDULED", "Pickup Scheduled", "calendar", "Pickup has been scheduled"),
    S.PICKED_UP: TimelineEvent("PICKED_UP", "Clothes Picked Up", "truck", "Your clothes have been picked up"),
    S.PROCESSING: TimelineEvent("PROCESSING", "Processing Started", "loader", "Your clothes are being processed"),
    S.READY: TimelineEvent("READY", "Ready for Delivery", "package", "Your clothes are ready for delivery"),
    S.OUT_FOR_DELIVERY: TimelineEvent("OUT_FOR_DELIVERY", "Out for Delivery", "truck", "Your clothes are on the way"),
    S.DELIVERED: TimelineEvent("DELIVERED", "Delivered", "check", "Your clothes have been delivered"),
    S.COMPLETED: TimelineEvent("COMPLETED", "Order Completed", "check-circle", "Order completed successfully"),
    S.CANCELLED: TimelineEvent("ORDER_CANCELLED", "Order Cancelled", "x", "Order has been cancelled"),
}


def next_statuses(current: str) -> List[str]:
    return sorted(status.value for status in TRANSITIONS.get(OrderStatus(current), frozenset()))


def can_transition(from_status: str, to_status: str) -> bool:
    return OrderStatus(to_status) in TRANSITIONS.get(OrderStatus(from_status), frozenset())


def is_terminal(status: str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


class OrderStateMachine:
    def record_creation(self, order: Order, changed_by: str, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        self._append_event(
            order,
            from_status=None,
            to_status=S.PENDING,
            changed_by=changed_by,
            notes="Order created",
            description=None,
            now=now
        )

    def transition(
        self,
        order: Order,
        to_status: OrderStatus,
        changed_by: str,
        notes: Optional[str] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> str:
        """Move ``order`` to ``to_status`` and return the status it left."""
        from_status = order.status
        to_status = OrderStatus(to_status)

        if not can_transition(from_status, to_status):
            raise InvalidStatusTransition(from_status, to_status.value, next_statuses(from_status))

        now = now or datetime.now(timezone.utc)
        order.status = to_status.value
        order.updated_at = now
        setattr(order, STATUS_TIMESTAMPS[to_status], now)

        if to_status == S.DELIVERED:
            order.actual_delivery_date = now
            if order.payment_method == PaymentMethod.COD.value and order.payment is not None:
                order.payment.payment_status = PaymentStatus.COMPLETED.value
                order.payment.paid_at = now

        self._append_event(order, from_status, to_status, changed_by, notes, description, now)

        logger.info(f"Order {order.order_number} moved from {from_status} to {to_status.value} by {changed_by}")
        return from_status

    def cancel(self, order: Order, actor: Actor, reason: str, now: Optional[datetime] = None) -> str:
        if OrderStatus(order.status) not in CANCELLABLE_STATUSES:
            raise CancellationNotAllowed(order.status)

        from_status = self.transition(
            order,
            S.CANCELLED,
            changed_by=actor.id,
            notes=reason,
            description=f"Cancelled by {actor.role.lower()}: {reason}",
            now=now
        )
        order.cancellation_reason = reason
        order.cancelled_by = actor.role
        return from_status

    def _append_event(
        self,
        order: Order,
        from_status: Optional[str],
        to_status: OrderStatus,
        changed_by: str,
        notes: Optional[str],
        description: Optional[str],
        now: datetime
    ) -> None:
        template = TIMELINE_EVENTS[to_status]
        order.timeline.append(OrderTimeline(
            event=template.event,
            title=template.title,
            icon=template.icon,
            description=description or notes or template.description,
            timestamp=now
        ))
        order.status_history.append(OrderStatusHistory(
            from_status=from_status,
            to_status=to_status.value,
            changed_by=changed_by,
            notes=notes,
            created_at=now
        ))
