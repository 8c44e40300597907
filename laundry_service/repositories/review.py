from typing import Dict, List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.models.review import Review


class ReviewRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, review: Review) -> Review:
        self.session.add(review)
        await self.session.flush()
        return review

    async def update(self, review: Review) -> Review:
        await self.session.flush()
        return review

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        result = await self.session.execute(
            select(Review).where(Review.id == review_id)
        )
        return result.scalar_one_or_none()

    async def get_by_order_id(self, order_id: str) -> Optional[Review]:
        result = await self.session.execute(
            select(Review).where(Review.order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def visible_rating_summary(self, laundry_id: str) -> Tuple[Optional[float], int]:
        result = await self.session.execute(
            select(func.avg(Review.rating), func.count(Review.id))
            .where(Review.laundry_id == laundry_id)
            .where(Review.is_visible.is_(True))
        )
        average, count = result.one()
        return (float(average) if average is not None else None), count

    async def visible_rating_distribution(self, laundry_id: str) -> Dict[int, int]:
        result = await self.session.execute(
            select(Review.rating, func.count(Review.id))
            .where(Review.laundry_id == laundry_id)
            .where(Review.is_visible.is_(True))
            .group_by(Review.rating)
        )
        distribution = {rating: 0 for rating in range(1, 6)}
        for rating, count in result.all():
            distribution[int(rating)] = count
        return distribution

    async def list_visible_for_laundry(self, laundry_id: str, page: int = 1, limit: int = 10) -> Tuple[List[Review], int]:
        conditions = [Review.laundry_id == laundry_id, Review.is_visible.is_(True)]
        total_result = await self.session.execute(
            select(func.count()).select_from(Review).where(*conditions)
        )
        result = await self.session.execute(
            select(Review)
            .where(*conditions)
            .order_by(Review.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total_result.scalar_one()
