import logging
from typing import Optional
import aio_pika
from aio_pika import ExchangeType
from aio_pika.abc import AbstractRobustConnection, AbstractRobustChannel

from laundry_service.core.config import settings

logger = logging.getLogger(__name__)


class RabbitMQBroker:
    def __init__(self, exchange_name: str = settings.rabbitmq_exchange) -> None:
        self.exchange_name = exchange_name
        self.connection: Optional[AbstractRobustConnection] = None
        self.channel: Optional[AbstractRobustChannel] = None

    @property
    def dead_letter_exchange_name(self) -> str:
        return f"{self.exchange_name}.dlx"

    async def connect(self) -> None:
        self.connection = await aio_pika.connect_robust(settings.rabbitmq_url)
        self.channel = await self.connection.channel()
        await self.channel.set_qos(prefetch_count=settings.rabbitmq_prefetch_count)

        await self.channel.declare_exchange(
            self.exchange_name,
            ExchangeType.TOPIC,
            durable=True
        )

        await self.channel.declare_exchange(
            self.dead_letter_exchange_name,
            ExchangeType.TOPIC,
            durable=True
        )

        logger.info(f"Connected to RabbitMQ exchange {self.exchange_name}")

    async def close(self) -> None:
        if self.channel:
            await self.channel.close()
        if self.connection:
            await self.connection.close()
        logger.info("Disconnected from RabbitMQ")

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and not self.connection.is_closed

    async def publish(self, routing_key: str, message: bytes) -> None:
        if not self.channel:
            raise RuntimeError("Channel is not initialized")

        exchange = await self.channel.get_exchange(self.exchange_name)
        await exchange.publish(
            aio_pika.Message(
                body=message,
                content_type="application/json",
                delivery_mode=aio_pika.DeliveryMode.PERSISTENT
            ),
            routing_key=routing_key
        )
        logger.info(f"Published message to {routing_key}")


broker = RabbitMQBroker()
