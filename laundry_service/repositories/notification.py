from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.models.notification import Notification


def recipient_filters(user_id: Optional[str], laundry_id: Optional[str], unread_only: bool = False) -> list:
    filters = []
    if user_id is not None:
        filters.append(Notification.user_id == user_id)
    if laundry_id is not None:
        filters.append(Notification.laundry_id == laundry_id)
    if unread_only:
        filters.append(Notification.is_read.is_(False))
    return filters


class NotificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, notification: Notification) -> Notification:
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def get_for_recipient(
        self,
        notification_id: str,
        user_id: Optional[str] = None,
        laundry_id: Optional[str] = None
    ) -> Optional[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .where(*recipient_filters(user_id, laundry_id))
        )
        return result.scalar_one_or_none()

    async def list_for_recipient(
        self,
        user_id: Optional[str] = None,
        laundry_id: Optional[str] = None,
        unread_only: bool = False,
        page: int = 1,
        limit: int = 20
    ) -> List[Notification]:
        query = (
            select(Notification)
            .where(*recipient_filters(user_id, laundry_id, unread_only))
            .order_by(Notification.created_at.desc(), Notification.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_for_recipient(
        self,
        user_id: Optional[str] = None,
        laundry_id: Optional[str] = None,
        unread_only: bool = False
    ) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Notification)
            .where(*recipient_filters(user_id, laundry_id, unread_only))
        )
        return result.scalar_one()

    async def mark_read(
        self,
        read_at: datetime,
        user_id: Optional[str] = None,
        laundry_id: Optional[str] = None,
        notification_ids: Optional[List[str]] = None
    ) -> int:
        """Mark the recipient's unread notifications as read; all of them when no ids are given."""
        query = update(Notification).where(*recipient_filters(user_id, laundry_id, unread_only=True))
        if notification_ids is not None:
            query = query.where(Notification.id.in_(notification_ids))
        result = await self.session.execute(
            query.values(is_read=True, read_at=read_at).execution_options(synchronize_session="fetch")
        )
        return result.rowcount
