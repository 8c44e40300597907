import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from laundry_service.core.broker import broker
from laundry_service.core.config import settings
from laundry_service.models.outbox import OutboxMessage
from laundry_service.repositories.outbox import OutboxRepository

logger = logging.getLogger(__name__)


class OutboxProcessor:
    """Relays committed lifecycle events from the outbox table to RabbitMQ.

    Delivery is at least once: a message is marked processed only after the
    broker accepted it, and a failure only bumps its retry counter.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        poll_interval: int = settings.outbox_poll_interval,
        batch_size: int = settings.outbox_batch_size,
        max_retries: int = settings.outbox_max_retries
    ) -> None:
        self.session_maker = session_maker
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self.max_retries = max_retries
        self._running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self._running:
            logger.warning("OutboxProcessor is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._process_loop())
        logger.info("OutboxProcessor started")

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("OutboxProcessor stopped")

    async def _process_loop(self) -> None:
        while self._running:
            try:
                await self.process_batch()
            except Exception as e:
                logger.error(f"Error in outbox processor loop: {e}", exc_info=True)

            await asyncio.sleep(self.poll_interval)

    async def process_batch(self) -> int:
        """Publish one batch of pending messages and return how many went out."""
        async with self.session_maker() as session:
            repository = OutboxRepository(session)

            try:
                messages = await repository.get_unprocessed_messages(
                    limit=self.batch_size,
                    max_retries=self.max_retries
                )
                if not messages:
                    return 0

                logger.debug(f"Processing {len(messages)} outbox messages")

                published = 0
                for message in messages:
                    if await self._process_message(message, repository):
                        published += 1

                await session.commit()
                return published

            except Exception as e:
                logger.error(f"Error processing outbox batch: {e}", exc_info=True)
                await session.rollback()
                return 0

    async def _process_message(self, message: OutboxMessage, repository: OutboxRepository) -> bool:
        try:
            await broker.publish(message.event_type, message.payload.encode())
        except Exception as e:
            error_msg = f"{type(e).__name__}: {str(e)}"
            await repository.mark_as_failed(message, error_msg)
            logger.error(
                f"Failed to publish outbox message {message.id} "
                f"(retry {message.retry_count}/{self.max_retries}): {error_msg}"
            )
            return False

        await repository.mark_as_processed(message)
        logger.info(
            f"Published outbox message {message.id} "
            f"(event: {message.event_type}, aggregate: {message.aggregate_type} {message.aggregate_id})"
        )
        return True

    async def cleanup_old_messages(self, older_than_hours: int = 24) -> int:
        async with self.session_maker() as session:
            repository = OutboxRepository(session)
            try:
                deleted_count = await repository.delete_processed_messages(older_than_hours)
                await session.commit()
                if deleted_count > 0:
                    logger.info(f"Cleaned up {deleted_count} old outbox messages")
                return deleted_count
            except Exception as e:
                logger.error(f"Error cleaning up old messages: {e}", exc_info=True)
                await session.rollback()
                return 0
