import logging
import json
from aio_pika import connect_robust, ExchangeType, IncomingMessage
from aio_pika.abc import AbstractRobustConnection
from pydantic import ValidationError

from laundry_service.core.config import settings
from laundry_service.core.database import async_session_maker
from laundry_service.services.notification import NotificationService

logger = logging.getLogger(__name__)

QUEUE_NAME = f"{settings.service_name}.notifications"
FAILED_ROUTING_KEY = "notifications.failed"
BINDING_KEYS = ("order.#", "review.#")


class NotificationConsumer:
    def __init__(self, session_maker=async_session_maker) -> None:
        self.session_maker = session_maker
        self.connection: AbstractRobustConnection | None = None

    async def start(self) -> None:
        self.connection = await connect_robust(settings.rabbitmq_url)
        channel = await self.connection.channel()
        await channel.set_qos(prefetch_count=settings.rabbitmq_prefetch_count)

        exchange = await channel.declare_exchange(settings.rabbitmq_exchange, ExchangeType.TOPIC, durable=True)

        dead_letter_exchange = f"{settings.rabbitmq_exchange}.dlx"
        dlx = await channel.declare_exchange(dead_letter_exchange, ExchangeType.TOPIC, durable=True)

        dlq = await channel.declare_queue(f"{QUEUE_NAME}.failed", durable=True)
        await dlq.bind(dlx, routing_key=FAILED_ROUTING_KEY)

        queue = await channel.declare_queue(
            QUEUE_NAME,
            durable=True,
            arguments={
                "x-dead-letter-exchange": dead_letter_exchange,
                "x-dead-letter-routing-key": FAILED_ROUTING_KEY
            }
        )

        for routing_key in BINDING_KEYS:
            await queue.bind(exchange, routing_key=routing_key)

        await queue.consume(self._process_message)
        logger.info(f"Started consuming {', '.join(BINDING_KEYS)} events")

    async def _process_message(self, message: IncomingMessage) -> None:
        try:
            await self.handle(message.routing_key, message.body)
            await message.ack()
        except (ValidationError, json.JSONDecodeError) as e:
            logger.error(f"Invalid {message.routing_key} event: {e}", exc_info=True)
            await message.reject(requeue=False)
        except Exception as e:
            logger.error(f"Error processing {message.routing_key} event: {e}", exc_info=True)
            await message.reject(requeue=False)

    async def handle(self, routing_key: str, body: bytes) -> None:
        payload = json.loads(body.decode())

        async with self.session_maker() as session:
            service = NotificationService(session)
            await service.handle_event(routing_key, payload)

        logger.info(f"Processed {routing_key} event")

    async def stop(self) -> None:
        if self.connection:
            await self.connection.close()
            logger.info("Stopped notification consumer")


consumer = NotificationConsumer()
