import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import run_in_transaction
from laundry_service.core.errors import (
    AlreadyReplied,
    AlreadyReviewed,
    LaundryNotFound,
    OrderNotDelivered,
    OrderNotFound,
    PermissionDenied,
    ReviewNotFound,
)
from laundry_service.core.security import Actor
from laundry_service.models.order import OrderStatus
from laundry_service.models.review import Review
from laundry_service.repositories.laundry import CatalogRepository, LaundryRepository
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.outbox import OutboxRepository
from laundry_service.repositories.review import ReviewRepository
from laundry_service.schemas.events import ReviewCreatedEvent
from laundry_service.schemas.order import Pagination
from laundry_service.schemas.review import (
    LaundryReviewsResponse,
    OrderReviewResponse,
    RatingSummary,
    ReviewCreate,
    ReviewResponse,
)
from laundry_service.services.order import ORDER_AGGREGATE, status_changed_event
from laundry_service.services.state_machine import OrderStateMachine
from laundry_service.services.stats import StatsService

logger = logging.getLogger(__name__)

REVIEW_AGGREGATE = "Review"
REVIEWABLE_STATUSES = {OrderStatus.DELIVERED.value, OrderStatus.COMPLETED.value}


class ReviewService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repository = ReviewRepository(session)
        self.order_repository = OrderRepository(session)
        self.outbox_repository = OutboxRepository(session)
        self.laundry_repository = LaundryRepository(session)
        self.state_machine = OrderStateMachine()
        self.stats = StatsService(
            self.laundry_repository,
            self.order_repository,
            self.repository,
            CatalogRepository(session)
        )

    async def create_review(self, actor: Actor, order_id: str, review_data: ReviewCreate) -> ReviewResponse:
        """Store the customer's review and complete the order."""

        async def operation() -> Review:
            order = await self.order_repository.get_for_update(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            if not actor.can_review(order):
                raise PermissionDenied("Only the customer who placed the order can review it")
            if order.status not in REVIEWABLE_STATUSES:
                raise OrderNotDelivered(order.status)
            if await self.repository.get_by_order_id(order.id) is not None:
                raise AlreadyReviewed(order.id)

            now = datetime.now(timezone.utc)
            review = Review(
                id=str(uuid.uuid4()),
                order_id=order.id,
                customer_id=actor.id,
                laundry_id=order.laundry_id,
                rating=review_data.rating,
                service_rating=review_data.service_rating,
                delivery_rating=review_data.delivery_rating,
                value_rating=review_data.value_rating,
                comment=review_data.comment,
                images=list(review_data.images),
                is_visible=True,
                created_at=now,
                updated_at=now
            )
            await self.repository.create(review)

            if order.status == OrderStatus.DELIVERED.value:
                notes = f"Reviewed with {review_data.rating} stars"
                from_status = self.state_machine.transition(
                    order, OrderStatus.COMPLETED, actor.id, notes=notes, now=now
                )
                await self.order_repository.update(order)
                await self.outbox_repository.add_event(
                    ORDER_AGGREGATE, order.id, status_changed_event(order, from_status, actor.id, notes)
                )

            await self.stats.recompute(order.laundry_id)

            await self.outbox_repository.add_event(REVIEW_AGGREGATE, review.id, ReviewCreatedEvent(
                review_id=review.id,
                order_id=order.id,
                order_number=order.order_number,
                customer_id=review.customer_id,
                laundry_id=review.laundry_id,
                rating=review.rating,
                created_at=review.created_at
            ))
            return review

        review = await run_in_transaction(self.session, operation)
        logger.info(f"Review {review.id} created for order {order_id} with rating {review.rating}")
        return ReviewResponse.model_validate(review)

    async def get_order_review(self, actor: Actor, order_id: str) -> OrderReviewResponse:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if not actor.can_view(order):
            raise PermissionDenied()

        review = await self.repository.get_by_order_id(order_id)
        can_review = (
            review is None
            and actor.can_review(order)
            and order.status in REVIEWABLE_STATUSES
        )
        return OrderReviewResponse(
            review=ReviewResponse.model_validate(review) if review else None,
            can_review=can_review
        )

    async def reply_to_review(self, actor: Actor, review_id: str, reply: str) -> ReviewResponse:
        async def operation() -> Review:
            review = await self.repository.get_by_id(review_id)
            if review is None:
                raise ReviewNotFound(review_id)
            if not actor.can_reply(review):
                raise PermissionDenied("Only the reviewed laundry can reply")
            if review.laundry_reply:
                raise AlreadyReplied(review_id)

            now = datetime.now(timezone.utc)
            review.laundry_reply = reply
            review.replied_at = now
            review.updated_at = now
            await self.repository.update(review)
            await self.stats.recompute(review.laundry_id)
            return review

        review = await run_in_transaction(self.session, operation)
        logger.info(f"Laundry {actor.id} replied to review {review_id}")
        return ReviewResponse.model_validate(review)

    async def list_laundry_reviews(self, laundry_id: str, page: int = 1, limit: int = 10) -> LaundryReviewsResponse:
        if await self.laundry_repository.get_by_id(laundry_id) is None:
            raise LaundryNotFound(laundry_id)

        reviews, total = await self.repository.list_visible_for_laundry(laundry_id, page, limit)
        average, count = await self.repository.visible_rating_summary(laundry_id)
        distribution = await self.repository.visible_rating_distribution(laundry_id)

        return LaundryReviewsResponse(
            reviews=[ReviewResponse.model_validate(review) for review in reviews],
            summary=RatingSummary(
                average_rating=round(average, 2) if average is not None else 0.0,
                total_reviews=count,
                distribution=distribution
            ),
            pagination=Pagination.build(page, limit, total)
        )
