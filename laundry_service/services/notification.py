import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import run_in_transaction
from laundry_service.core.errors import NotFoundError
from laundry_service.core.security import Actor, Role
from laundry_service.models.notification import Notification, NotificationType
from laundry_service.models.order import OrderStatus
from laundry_service.repositories.notification import NotificationRepository
from laundry_service.schemas.events import (
    EVENT_TYPES,
    OrderCancelledEvent,
    OrderCreatedEvent,
    OrderStatusChangedEvent,
    ReviewCreatedEvent,
)
from laundry_service.schemas.notification import NotificationListResponse, NotificationResponse
from laundry_service.schemas.order import Pagination

logger = logging.getLogger(__name__)

# (title, body) per status the customer hears about; body takes the order number
CUSTOMER_STATUS_MESSAGES: Dict[str, Tuple[str, str]] = {
    OrderStatus.ACCEPTED.value: ("Order Accepted! ✅", "Your laundry has accepted your order #{order_number}"),
    OrderStatus.REJECTED.value: ("Order Not Accepted", "Unfortunately, your laundry couldn't accept your order #{order_number}"),
    OrderStatus.PICKUP_SCHEDULED.value: ("Pickup Scheduled 📅", "Your clothes will be picked up soon for order #{order_number}"),
    OrderStatus.PICKED_UP.value: ("Clothes Picked Up 🚚", "Your clothes have been picked up for order #{order_number}"),
    OrderStatus.PROCESSING.value: ("Processing Started 🧺", "Your laundry has started processing your order #{order_number}"),
    OrderStatus.READY.value: ("Ready for Delivery! ✨", "Your clothes are ready! Order #{order_number} will be delivered soon"),
    OrderStatus.OUT_FOR_DELIVERY.value: ("Out for Delivery 🚚", "Your order #{order_number} is on the way!"),
    OrderStatus.DELIVERED.value: ("Delivered! 🎉", "Your order #{order_number} has been delivered. Please rate your experience!"),
    OrderStatus.COMPLETED.value: ("Order Completed", "Thanks for your review of order #{order_number}"),
}


def recipient(actor: Actor) -> Dict[str, str]:
    if actor.role == Role.CUSTOMER.value:
        return {"user_id": actor.id}
    return {"laundry_id": actor.id}

class NotificationService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repository = NotificationRepository(session)

    async def handle_event(self, event_type: str, payload: Dict[str, Any]) -> List[Notification]:
        """Store the in-app notifications a lifecycle event produces."""
        event_class = EVENT_TYPES.get(event_type)
        if event_class is None:
            logger.debug(f"Ignoring event {event_type}: no notifications for it")
            return []

        event = event_class.model_validate(payload)

        async def operation() -> List[Notification]:
            notifications = []
            for notification in self._build(event):
                notifications.append(await self.repository.create(notification))
            return notifications

        notifications = await run_in_transaction(self.session, operation)
        logger.info(f"Stored {len(notifications)} notifications for {event_type}")
        return notifications

    async def list_notifications(
        self,
        actor: Actor,
        unread_only: bool = False,
        page: int = 1,
        limit: int = 20
    ) -> NotificationListResponse:
        scope = recipient(actor)
        notifications = await self.repository.list_for_recipient(
            unread_only=unread_only, page=page, limit=limit, **scope
        )
        total = await self.repository.count_for_recipient(unread_only=unread_only, **scope)
        unread_count = await self.repository.count_for_recipient(unread_only=True, **scope)

        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=unread_count,
            pagination=Pagination.build(page, limit, total)
        )

    async def mark_read(self, actor: Actor, notification_ids: List[str], mark_all: bool = False) -> int:
        """Mark the actor's notifications as read. Ids owned by someone else are skipped."""
        if not mark_all and not notification_ids:
            return 0

        async def operation() -> int:
            return await self.repository.mark_read(
                datetime.now(timezone.utc),
                notification_ids=None if mark_all else notification_ids,
                **recipient(actor)
            )

        updated = await run_in_transaction(self.session, operation)
        logger.info(f"Marked {updated} notifications read for {actor.role} {actor.id}")
        return updated

    async def mark_one_read(self, actor: Actor, notification_id: str) -> NotificationResponse:
        async def operation() -> Notification:
            scope = recipient(actor)
            notification = await self.repository.get_for_recipient(notification_id, **scope)
            if notification is None:
                raise NotFoundError("Notification not found")
            if not notification.is_read:
                await self.repository.mark_read(
                    datetime.now(timezone.utc), notification_ids=[notification_id], **scope
                )
            return notification

        notification = await run_in_transaction(self.session, operation)
        return NotificationResponse.model_validate(notification)

    def _build(self, event) -> List[Notification]:
        if isinstance(event, OrderCreatedEvent):
            return [self._notification(
                laundry_id=event.laundry_id,
                type=NotificationType.ORDER_UPDATE,
                title="New Order Received 🎊",
                body=f"A customer placed an order with {event.items_count} items. Order #{event.order_number}",
                data={"order_id": event.order_id, "order_number": event.order_number}
            )]

        if isinstance(event, OrderStatusChangedEvent):
            message = CUSTOMER_STATUS_MESSAGES.get(event.to_status)
            if message is None:
                return []
            title, body = message
            return [self._notification(
                user_id=event.customer_id,
                type=NotificationType.ORDER_UPDATE,
                title=title,
                body=body.format(order_number=event.order_number),
                data={"order_id": event.order_id, "status": event.to_status}
            )]

        if isinstance(event, OrderCancelledEvent):
            data = {"order_id": event.order_id, "status": OrderStatus.CANCELLED.value}
            if event.cancelled_by == Role.CUSTOMER.value:
                return [self._notification(
                    laundry_id=event.laundry_id,
                    type=NotificationType.ORDER_UPDATE,
                    title="Order Cancelled",
                    body=f"Order #{event.order_number} was cancelled by the customer: {event.reason}",
                    data=data
                )]
            return [self._notification(
                user_id=event.customer_id,
                type=NotificationType.ORDER_UPDATE,
                title="Order Cancelled",
                body=f"Your order #{event.order_number} was cancelled by the laundry: {event.reason}",
                data=data
            )]

        if isinstance(event, ReviewCreatedEvent):
            return [self._notification(
                laundry_id=event.laundry_id,
                type=NotificationType.REVIEW,
                title=f"New {event.rating}⭐ Review",
                body=f"A customer left a review for order #{event.order_number}",
                data={"order_id": event.order_id, "review_id": event.review_id}
            )]

        return []

    @staticmethod
    def _notification(
        type: NotificationType,
        title: str,
        body: str,
        data: Dict[str, Any],
        user_id: Optional[str] = None,
        laundry_id: Optional[str] = None
    ) -> Notification:
        return Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            laundry_id=laundry_id,
            type=type.value,
            title=title,
            body=body,
            data=data,
            is_read=False,
            created_at=datetime.now(timezone.utc)
        )
