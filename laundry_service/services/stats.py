import logging
from datetime import datetime, timezone

from laundry_service.core.errors import LaundryNotFound
from laundry_service.repositories.laundry import CatalogRepository, LaundryRepository
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.review import ReviewRepository
from laundry_service.schemas.catalog import LaundryStats

logger = logging.getLogger(__name__)


class StatsService:
    """Rebuilds a laundry's denormalized counters from source rows.

    Always a full recompute, never an increment, so running it twice gives
    the same numbers. Runs inside the caller's transaction.
    """

    def __init__(
        self,
        laundry_repository: LaundryRepository,
        order_repository: OrderRepository,
        review_repository: ReviewRepository,
        catalog_repository: CatalogRepository
    ) -> None:
        self.laundry_repository = laundry_repository
        self.order_repository = order_repository
        self.review_repository = review_repository
        self.catalog_repository = catalog_repository

    async def recompute(self, laundry_id: str) -> LaundryStats:
        laundry = await self.laundry_repository.get_by_id(laundry_id)
        if laundry is None:
            raise LaundryNotFound(laundry_id)

        total_orders = await self.order_repository.count_non_cancelled_for_laundry(laundry_id)
        average, total_reviews = await self.review_repository.visible_rating_summary(laundry_id)
        services_count = await self.catalog_repository.count_available_services(laundry_id)

        laundry.total_orders = total_orders
        laundry.rating = round(average, 2) if average is not None else 0.0
        laundry.total_reviews = total_reviews
        laundry.services_count = services_count
        laundry.updated_at = datetime.now(timezone.utc)
        await self.laundry_repository.update(laundry)

        logger.info(
            f"Recomputed stats for laundry {laundry_id}: orders={total_orders}, "
            f"rating={laundry.rating}, reviews={total_reviews}, services={services_count}"
        )
        return LaundryStats(
            laundry_id=laundry_id,
            total_orders=total_orders,
            rating=laundry.rating,
            total_reviews=total_reviews,
            services_count=services_count
        )
