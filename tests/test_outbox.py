import pytest
import json
from datetime import datetime, timedelta, timezone
from sqlalchemy import select

from laundry_service.core.broker import broker
from laundry_service.models.outbox import OutboxMessage
from laundry_service.repositories.outbox import OutboxRepository
from laundry_service.schemas.events import OrderCancelledEvent
from laundry_service.services.outbox_processor import OutboxProcessor


def make_message(aggregate_id: str, event_type: str = "order.created", **overrides) -> OutboxMessage:
    values = {
        "aggregate_id": aggregate_id,
        "aggregate_type": "Order",
        "event_type": event_type,
        "payload": json.dumps({"order_id": aggregate_id}),
        "created_at": datetime.now(timezone.utc),
    }
    values.update(overrides)
    return OutboxMessage(**values)


@pytest.mark.asyncio
async def test_add_event_serializes_payload(db_session):
    repository = OutboxRepository(db_session)
    cancelled_at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    message = await repository.add_event("Order", "order-1", OrderCancelledEvent(
        order_id="order-1",
        order_number="ORD-20260301-0001",
        customer_id="customer-1",
        laundry_id="laundry-1",
        from_status="ACCEPTED",
        cancelled_by="CUSTOMER",
        reason="Changed my plans",
        cancelled_at=cancelled_at
    ))

    assert message.event_type == "order.cancelled"
    payload = json.loads(message.payload)
    assert payload["reason"] == "Changed my plans"
    assert payload["from_status"] == "ACCEPTED"


@pytest.mark.asyncio
async def test_outbox_processor_publishes_messages(db_session, mock_broker, session_maker):
    await OutboxRepository(db_session).create(make_message("order-123"))
    await db_session.commit()

    processor = OutboxProcessor(session_maker, poll_interval=1, batch_size=10, max_retries=3)
    published = await processor.process_batch()

    assert published == 1
    assert len(mock_broker) == 1
    assert mock_broker[0]["routing_key"] == "order.created"
    assert json.loads(mock_broker[0]["message"].decode()) == {"order_id": "order-123"}

    async with session_maker() as session:
        message = (await session.execute(select(OutboxMessage))).scalar_one()
        assert message.processed_at is not None
        assert message.error_message is None


@pytest.mark.asyncio
async def test_outbox_processor_publishes_in_creation_order(db_session, mock_broker, session_maker):
    repository = OutboxRepository(db_session)
    await repository.create(make_message("order-1", "order.created"))
    await repository.create(make_message("order-1", "order.status_changed"))
    await repository.create(make_message("order-1", "order.cancelled"))
    await db_session.commit()

    await OutboxProcessor(session_maker).process_batch()

    assert [m["routing_key"] for m in mock_broker] == ["order.created", "order.status_changed", "order.cancelled"]


@pytest.mark.asyncio
async def test_outbox_processor_handles_publish_failure(db_session, monkeypatch, session_maker):
    async def mock_publish_fail(routing_key: str, message: bytes):
        raise Exception("Broker connection failed")

    monkeypatch.setattr(broker, "publish", mock_publish_fail)

    await OutboxRepository(db_session).create(make_message("order-456"))
    await db_session.commit()

    processor = OutboxProcessor(session_maker, poll_interval=1, batch_size=10, max_retries=3)
    published = await processor.process_batch()

    assert published == 0
    async with session_maker() as session:
        message = (await session.execute(select(OutboxMessage))).scalar_one()
        assert message.processed_at is None
        assert message.retry_count == 1
        assert "Broker connection failed" in message.error_message


@pytest.mark.asyncio
async def test_outbox_processor_skips_exhausted_messages(db_session, mock_broker, session_maker):
    repository = OutboxRepository(db_session)
    await repository.create(make_message("order-dead", retry_count=3, error_message="gone"))
    await repository.create(make_message("order-live"))
    await db_session.commit()

    await OutboxProcessor(session_maker, max_retries=3).process_batch()

    assert len(mock_broker) == 1
    assert json.loads(mock_broker[0]["message"].decode()) == {"order_id": "order-live"}


@pytest.mark.asyncio
async def test_cleanup_old_messages(db_session, session_maker):
    now = datetime.now(timezone.utc)
    repository = OutboxRepository(db_session)
    await repository.create(make_message("order-old", processed_at=now - timedelta(hours=48)))
    await repository.create(make_message("order-recent", processed_at=now - timedelta(hours=1)))
    await repository.create(make_message("order-pending"))
    await db_session.commit()

    deleted = await OutboxProcessor(session_maker).cleanup_old_messages(older_than_hours=24)

    assert deleted == 1
    async with session_maker() as session:
        remaining = (await session.execute(select(OutboxMessage.aggregate_id))).scalars().all()
        assert sorted(remaining) == ["order-pending", "order-recent"]


@pytest.mark.asyncio
async def test_order_lifecycle_events_reach_broker(client, mock_broker, session_maker, customer_headers, laundry_headers, order_payload):
    order = (await client.post("/orders", json=order_payload(), headers=customer_headers)).json()
    await client.put(f"/laundry/orders/{order['id']}/status", json={"status": "ACCEPTED"}, headers=laundry_headers)

    await OutboxProcessor(session_maker).process_batch()

    assert [m["routing_key"] for m in mock_broker] == ["order.created", "order.status_changed"]
    changed = json.loads(mock_broker[1]["message"].decode())
    assert changed["from_status"] == "PENDING"
    assert changed["to_status"] == "ACCEPTED"
    assert changed["changed_by"] == "laundry-1"
