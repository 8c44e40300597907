import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import run_in_transaction
from laundry_service.core.errors import (
    InvalidStatusTransition,
    LaundryNotFound,
    LaundryServiceError,
    OrderNotFound,
    PermissionDenied,
)
from laundry_service.core.security import Actor, CustomerActor, Role
from laundry_service.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from laundry_service.repositories.laundry import CatalogRepository, LaundryRepository
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.outbox import OutboxRepository
from laundry_service.repositories.promo import PromoRepository
from laundry_service.repositories.review import ReviewRepository
from laundry_service.schemas.events import OrderCancelledEvent, OrderCreatedEvent, OrderStatusChangedEvent
from laundry_service.schemas.order import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    Pagination,
    TimelineEntryResponse,
    TimelineResponse,
)
from laundry_service.services.pricing import PricingCalculator, estimate_delivery, to_money
from laundry_service.services.promo import PromoEvaluator
from laundry_service.services.state_machine import ACTIVE_STATUSES, OrderStateMachine, next_statuses
from laundry_service.services.stats import StatsService

logger = logging.getLogger(__name__)

ORDER_AGGREGATE = "Order"
LAUNDRY_CANCEL_REASON = "Cancelled by the laundry"


def format_order_number(created_at: datetime, sequence: int) -> str:
    return f"ORD-{created_at:%Y%m%d}-{sequence:04d}"


def status_changed_event(order: Order, from_status: str, changed_by: str, notes: Optional[str]) -> OrderStatusChangedEvent:
    return OrderStatusChangedEvent(
        order_id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        laundry_id=order.laundry_id,
        from_status=from_status,
        to_status=order.status,
        changed_by=changed_by,
        notes=notes,
        changed_at=order.updated_at
    )


class OrderService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repository = OrderRepository(session)
        self.outbox_repository = OutboxRepository(session)
        self.laundry_repository = LaundryRepository(session)
        catalog_repository = CatalogRepository(session)
        self.pricing = PricingCalculator(catalog_repository)
        self.promos = PromoEvaluator(PromoRepository(session), self.repository)
        self.state_machine = OrderStateMachine()
        self.stats = StatsService(
            self.laundry_repository,
            self.repository,
            ReviewRepository(session),
            catalog_repository
        )

    async def create_order(self, customer: CustomerActor, order_data: OrderCreate) -> OrderResponse:
        async def operation() -> Order:
            laundry = await self.laundry_repository.get_active(order_data.laundry_id)
            if laundry is None:
                raise LaundryNotFound(order_data.laundry_id)

            quote = await self.pricing.quote(laundry, order_data.order_type, order_data.items)

            discount = Decimal("0.00")
            if order_data.promo_code:
                promo_quote = await self.promos.apply(
                    order_data.promo_code, quote.subtotal, customer.id, laundry.id
                )
                discount = to_money(promo_quote.discount)

            total_amount = max(
                quote.subtotal + quote.delivery_fee + quote.express_fee - discount,
                Decimal("0.00")
            )
            now = datetime.now(timezone.utc)
            order_id = str(uuid.uuid4())

            order = Order(
                id=order_id,
                order_number=await self._next_order_number(now),
                customer_id=customer.id,
                laundry_id=laundry.id,
                status=OrderStatus.PENDING.value,
                order_type=order_data.order_type.value,
                payment_method=PaymentMethod.COD.value,
                pickup_address=order_data.pickup_address,
                pickup_latitude=order_data.pickup_latitude,
                pickup_longitude=order_data.pickup_longitude,
                pickup_date=order_data.pickup_date,
                pickup_time_slot=order_data.pickup_time_slot,
                pickup_notes=order_data.pickup_notes,
                delivery_address=order_data.delivery_address or order_data.pickup_address,
                delivery_latitude=(
                    order_data.delivery_latitude
                    if order_data.delivery_latitude is not None else order_data.pickup_latitude
                ),
                delivery_longitude=(
                    order_data.delivery_longitude
                    if order_data.delivery_longitude is not None else order_data.pickup_longitude
                ),
                delivery_notes=order_data.delivery_notes,
                expected_delivery_date=estimate_delivery(
                    order_data.pickup_date, quote.estimated_hours, order_data.order_type
                ),
                subtotal=quote.subtotal,
                delivery_fee=quote.delivery_fee,
                express_fee=quote.express_fee,
                discount=discount,
                total_amount=total_amount,
                promo_code=order_data.promo_code,
                special_instructions=order_data.special_instructions,
                created_at=now,
                updated_at=now,
                items=[
                    OrderItem(
                        position=position,
                        laundry_service_id=line.service_id,
                        clothing_item_id=line.clothing_item_id,
                        quantity=line.quantity,
                        weight_kg=line.weight_kg,
                        unit_price=line.unit_price,
                        price_unit=line.price_unit,
                        total_price=line.total_price,
                        special_notes=line.special_notes
                    )
                    for position, line in enumerate(quote.lines)
                ],
                timeline=[],
                status_history=[],
                payment=Payment(
                    id=str(uuid.uuid4()),
                    amount=total_amount,
                    payment_method=PaymentMethod.COD.value,
                    payment_status=PaymentStatus.PENDING.value,
                    created_at=now
                ),
                review=None
            )
            self.state_machine.record_creation(order, customer.id, now)

            await self.repository.create(order)
            await self.outbox_repository.add_event(ORDER_AGGREGATE, order.id, OrderCreatedEvent(
                order_id=order.id,
                order_number=order.order_number,
                customer_id=order.customer_id,
                laundry_id=order.laundry_id,
                items_count=len(order.items),
                total_amount=float(order.total_amount),
                created_at=order.created_at
            ))
            return order

        order = await run_in_transaction(self.session, operation)
        logger.info(
            f"Order created and saved to outbox: {order.id} ({order.order_number}), "
            f"total {order.total_amount}"
        )
        return OrderResponse.model_validate(order)

    async def get_order(self, actor: Actor, order_id: str) -> OrderResponse:
        order = await self._get_visible(actor, order_id)
        return OrderResponse.model_validate(order)

    async def get_timeline(self, actor: Actor, order_id: str) -> TimelineResponse:
        await self._get_visible(actor, order_id)
        timeline = await self.repository.get_timeline(order_id)
        return TimelineResponse(
            order_id=order_id,
            timeline=[TimelineEntryResponse.model_validate(entry) for entry in timeline]
        )

    async def list_orders(
        self,
        actor: Actor,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> OrderListResponse:
        statuses = None
        if status == "active":
            statuses = [s.value for s in ACTIVE_STATUSES]
        elif status:
            try:
                statuses = [OrderStatus(status.upper()).value]
            except ValueError:
                raise LaundryServiceError(f"Unknown status filter: {status}") from None

        if actor.role == Role.CUSTOMER.value:
            orders, total = await self.repository.list_orders(
                customer_id=actor.id, statuses=statuses, page=page, limit=limit
            )
        else:
            orders, total = await self.repository.list_orders(
                laundry_id=actor.id, statuses=statuses, page=page, limit=limit
            )

        return OrderListResponse(
            orders=[OrderResponse.model_validate(order) for order in orders],
            pagination=Pagination.build(page, limit, total)
        )

    async def update_status(self, actor: Actor, order_id: str, update: OrderStatusUpdate) -> OrderResponse:
        if update.status == OrderStatus.CANCELLED:
            return await self.cancel_order(actor, order_id, update.notes or LAUNDRY_CANCEL_REASON)

        async def operation() -> Order:
            order = await self._get_for_update(order_id)
            if not actor.can_update_status(order):
                raise PermissionDenied("Only the laundry fulfilling this order can update its status")

            # COMPLETED only follows a customer review
            if update.status == OrderStatus.COMPLETED:
                allowed = [s for s in next_statuses(order.status) if s != OrderStatus.COMPLETED.value]
                raise InvalidStatusTransition(order.status, update.status.value, allowed)

            notes = update.notes
            if update.status == OrderStatus.REJECTED:
                notes = update.rejection_reason or update.notes

            from_status = self.state_machine.transition(order, update.status, actor.id, notes=notes)
            if update.status == OrderStatus.REJECTED:
                order.cancellation_reason = notes
                order.cancelled_by = actor.role

            await self.repository.update(order)
            if update.status == OrderStatus.DELIVERED:
                await self.stats.recompute(order.laundry_id)

            await self.outbox_repository.add_event(
                ORDER_AGGREGATE, order.id, status_changed_event(order, from_status, actor.id, notes)
            )
            return order

        order = await run_in_transaction(self.session, operation)
        logger.info(f"Order {order.order_number} status updated to {order.status} by {actor.role} {actor.id}")
        return OrderResponse.model_validate(order)

    async def cancel_order(self, actor: Actor, order_id: str, reason: str) -> OrderResponse:
        async def operation() -> Order:
            order = await self._get_for_update(order_id)
            if not actor.can_cancel(order):
                raise PermissionDenied()

            from_status = self.state_machine.cancel(order, actor, reason)
            await self.repository.update(order)

            await self.outbox_repository.add_event(ORDER_AGGREGATE, order.id, OrderCancelledEvent(
                order_id=order.id,
                order_number=order.order_number,
                customer_id=order.customer_id,
                laundry_id=order.laundry_id,
                from_status=from_status,
                cancelled_by=actor.role,
                reason=reason,
                cancelled_at=order.cancelled_at
            ))
            return order

        order = await run_in_transaction(self.session, operation)
        logger.info(f"Order {order.order_number} cancelled by {actor.role} {actor.id}")
        return OrderResponse.model_validate(order)

    async def confirm_delivery(self, actor: Actor, order_id: str) -> OrderResponse:
        notes = "Customer confirmed delivery"

        async def operation() -> Order:
            order = await self._get_for_update(order_id)
            if not actor.can_confirm_delivery(order):
                raise PermissionDenied()

            from_status = self.state_machine.transition(order, OrderStatus.DELIVERED, actor.id, notes=notes)
            await self.repository.update(order)
            await self.stats.recompute(order.laundry_id)

            await self.outbox_repository.add_event(
                ORDER_AGGREGATE, order.id, status_changed_event(order, from_status, actor.id, notes)
            )
            return order

        order = await run_in_transaction(self.session, operation)
        logger.info(f"Delivery of order {order.order_number} confirmed by customer {actor.id}")
        return OrderResponse.model_validate(order)

    async def _next_order_number(self, now: datetime) -> str:
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        count = await self.repository.count_created_between(day_start, day_start + timedelta(days=1))
        return format_order_number(now, count + 1)

    async def _get_visible(self, actor: Actor, order_id: str) -> Order:
        order = await self.repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if not actor.can_view(order):
            raise PermissionDenied()
        return order

    async def _get_for_update(self, order_id: str) -> Order:
        order = await self.repository.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order
