from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.models.outbox import OutboxMessage
from laundry_service.schemas.events import LifecycleEvent


class OutboxRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, message: OutboxMessage) -> OutboxMessage:
        self.session.add(message)
        await self.session.flush()
        return message

    async def add_event(self, aggregate_type: str, aggregate_id: str, event: LifecycleEvent) -> OutboxMessage:
        return await self.create(OutboxMessage(
            aggregate_id=aggregate_id,
            aggregate_type=aggregate_type,
            event_type=event.event_type,
            payload=event.model_dump_json(),
            created_at=datetime.now(timezone.utc)
        ))

    async def get_unprocessed_messages(self, limit: int = 100, max_retries: Optional[int] = None) -> List[OutboxMessage]:
        query = (
            select(OutboxMessage)
            .where(OutboxMessage.processed_at.is_(None))
            .order_by(OutboxMessage.created_at, OutboxMessage.id)
            .limit(limit)
        )
        if max_retries is not None:
            query = query.where(OutboxMessage.retry_count < max_retries)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_aggregate(self, aggregate_id: str) -> List[OutboxMessage]:
        result = await self.session.execute(
            select(OutboxMessage)
            .where(OutboxMessage.aggregate_id == aggregate_id)
            .order_by(OutboxMessage.id)
        )
        return list(result.scalars().all())

    async def mark_as_processed(self, message: OutboxMessage) -> OutboxMessage:
        message.processed_at = datetime.now(timezone.utc)
        message.error_message = None
        await self.session.flush()
        return message

    async def mark_as_failed(self, message: OutboxMessage, error: str) -> OutboxMessage:
        message.retry_count += 1
        message.error_message = error
        await self.session.flush()
        return message

    async def delete_processed_messages(self, older_than_hours: int = 24) -> int:
        cutoff_time = datetime.now(timezone.utc) - timedelta(hours=older_than_hours)

        result = await self.session.execute(
            delete(OutboxMessage)
            .where(OutboxMessage.processed_at.isnot(None))
            .where(OutboxMessage.processed_at < cutoff_time)
        )
        return result.rowcount
