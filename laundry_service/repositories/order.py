from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import TransientConflictError
from laundry_service.models.order import Order, OrderStatus, OrderTimeline


class OrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, order: Order) -> Order:
        self.session.add(order)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if "order_number" in str(e.orig):
                raise TransientConflictError(f"Order number {order.order_number} already taken") from e
            raise
        return order

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self.session.execute(
            select(Order).where(Order.id == order_id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, order_id: str) -> Optional[Order]:
        result = await self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update(self, order: Order) -> Order:
        await self.session.flush()
        return order

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Order)
            .where(Order.created_at >= start)
            .where(Order.created_at < end)
        )
        return result.scalar_one()

    async def count_non_cancelled_for_customer(self, customer_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Order)
            .where(Order.customer_id == customer_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
        )
        return result.scalar_one()

    async def count_non_cancelled_for_laundry(self, laundry_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Order)
            .where(Order.laundry_id == laundry_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
        )
        return result.scalar_one()

    async def list_orders(
        self,
        customer_id: Optional[str] = None,
        laundry_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Order], int]:
        conditions = []
        if customer_id is not None:
            conditions.append(Order.customer_id == customer_id)
        if laundry_id is not None:
            conditions.append(Order.laundry_id == laundry_id)
        if statuses is not None:
            conditions.append(Order.status.in_(list(statuses)))

        total_result = await self.session.execute(
            select(func.count()).select_from(Order).where(*conditions)
        )
        result = await self.session.execute(
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total_result.scalar_one()

    async def get_timeline(self, order_id: str) -> List[OrderTimeline]:
        result = await self.session.execute(
            select(OrderTimeline)
            .where(OrderTimeline.order_id == order_id)
            .order_by(OrderTimeline.timestamp.desc(), OrderTimeline.id.desc())
        )
        return list(result.scalars().all())
