import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from laundry_service.core.logging import setup_logging
from laundry_service.core.broker import broker
from laundry_service.core.config import settings
from laundry_service.core.database import engine, async_session_maker
from laundry_service.core.errors import LaundryServiceError, laundry_service_error_handler
from laundry_service.models import Base
from laundry_service.api.health import router as health_router
from laundry_service.api.laundry import router as laundry_router
from laundry_service.api.notifications import router as notifications_router
from laundry_service.api.orders import router as orders_router
from laundry_service.api.promo import router as promo_router
from laundry_service.api.reviews import router as reviews_router
from laundry_service.services.consumer import consumer
from laundry_service.services.outbox_processor import OutboxProcessor

outbox_processor = OutboxProcessor(async_session_maker)

logger = logging.getLogger(__name__)


def log_consumer_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Notification consumer failed to start: {task.exception()}", exc_info=task.exception())


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await broker.connect()
    await outbox_processor.start()
    consumer_task = asyncio.create_task(consumer.start())
    consumer_task.add_done_callback(log_consumer_failure)

    yield

    await outbox_processor.stop()
    if not consumer_task.done():
        consumer_task.cancel()
    await consumer.stop()
    await broker.close()


app = FastAPI(
    title="Laundry Service",
    description="Laundry marketplace orders, pricing, promos and reviews",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LaundryServiceError, laundry_service_error_handler)

app.include_router(health_router)
app.include_router(orders_router)
app.include_router(laundry_router)
app.include_router(reviews_router)
app.include_router(promo_router)
app.include_router(notifications_router)
