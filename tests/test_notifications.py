import asyncio
import json
import logging
import pytest

from laundry_service.repositories.notification import NotificationRepository
from laundry_service.services.consumer import NotificationConsumer
from laundry_service.services.notification import NotificationService
from laundry_service.main import log_consumer_failure

ORDER = {
    "order_id": "order-1",
    "order_number": "ORD-20260301-0001",
    "customer_id": "customer-1",
    "laundry_id": "laundry-1",
}


@pytest.mark.asyncio
async def test_new_order_notifies_laundry(db_session):
    notifications = await NotificationService(db_session).handle_event("order.created", {
        **ORDER,
        "items_count": 3,
        "total_amount": 300.0,
        "created_at": "2026-03-01T09:00:00+00:00",
    })

    assert len(notifications) == 1
    assert notifications[0].laundry_id == "laundry-1"
    assert notifications[0].user_id is None
    assert notifications[0].title == "New Order Received 🎊"
    assert "3 items" in notifications[0].body
    assert "ORD-20260301-0001" in notifications[0].body


@pytest.mark.asyncio
async def test_status_change_notifies_customer(db_session):
    notifications = await NotificationService(db_session).handle_event("order.status_changed", {
        **ORDER,
        "from_status": "READY",
        "to_status": "OUT_FOR_DELIVERY",
        "changed_by": "laundry-1",
        "changed_at": "2026-03-02T09:00:00+00:00",
    })

    assert len(notifications) == 1
    assert notifications[0].user_id == "customer-1"
    assert notifications[0].title == "Out for Delivery 🚚"
    assert notifications[0].data == {"order_id": "order-1", "status": "OUT_FOR_DELIVERY"}


@pytest.mark.asyncio
async def test_cancellation_notifies_other_party(db_session):
    service = NotificationService(db_session)
    base = {**ORDER, "from_status": "PENDING", "reason": "Plans changed", "cancelled_at": "2026-03-01T10:00:00+00:00"}

    by_customer = await service.handle_event("order.cancelled", {**base, "cancelled_by": "CUSTOMER"})
    by_laundry = await service.handle_event("order.cancelled", {**base, "cancelled_by": "LAUNDRY"})

    assert by_customer[0].laundry_id == "laundry-1"
    assert by_customer[0].user_id is None
    assert by_laundry[0].user_id == "customer-1"
    assert "Plans changed" in by_laundry[0].body


@pytest.mark.asyncio
async def test_review_notifies_laundry(db_session):
    notifications = await NotificationService(db_session).handle_event("review.created", {
        **ORDER,
        "review_id": "review-1",
        "rating": 5,
        "created_at": "2026-03-03T09:00:00+00:00",
    })

    assert notifications[0].title == "New 5⭐ Review"
    assert notifications[0].type == "REVIEW"

    stored = await NotificationRepository(db_session).list_for_recipient(laundry_id="laundry-1")
    assert len(stored) == 1


@pytest.mark.asyncio
async def test_unknown_event_is_ignored(db_session):
    assert await NotificationService(db_session).handle_event("payment.settled", {"x": 1}) == []


@pytest.mark.asyncio
async def test_consumer_stores_notifications(db_session, session_maker):
    consumer = NotificationConsumer(session_maker)
    body = json.dumps({
        **ORDER,
        "from_status": "PENDING",
        "to_status": "ACCEPTED",
        "changed_by": "laundry-1",
        "changed_at": "2026-03-01T09:05:00+00:00",
    }).encode()

    await consumer.handle("order.status_changed", body)

    async with session_maker() as session:
        stored = await NotificationRepository(session).list_for_recipient(user_id="customer-1")
        assert [n.title for n in stored] == ["Order Accepted! ✅"]


async def seed_notifications(session) -> dict:
    service = NotificationService(session)
    changed = {**ORDER, "changed_by": "laundry-1", "changed_at": "2026-03-01T09:05:00+00:00"}
    accepted = await service.handle_event("order.status_changed", {**changed, "from_status": "PENDING", "to_status": "ACCEPTED"})
    scheduled = await service.handle_event(
        "order.status_changed", {**changed, "from_status": "ACCEPTED", "to_status": "PICKUP_SCHEDULED"}
    )
    created = await service.handle_event("order.created", {
        **ORDER,
        "items_count": 2,
        "total_amount": 200.0,
        "created_at": "2026-03-01T09:00:00+00:00",
    })
    return {"accepted": accepted[0].id, "scheduled": scheduled[0].id, "created": created[0].id}


@pytest.mark.asyncio
async def test_list_notifications_is_scoped_to_recipient(client, db_session, customer_headers, laundry_headers):
    await seed_notifications(db_session)

    customer = (await client.get("/notifications", headers=customer_headers)).json()
    laundry = (await client.get("/notifications", headers=laundry_headers)).json()

    assert customer["pagination"]["total"] == 2
    assert customer["unread_count"] == 2
    assert {n["title"] for n in customer["notifications"]} == {"Order Accepted! ✅", "Pickup Scheduled 📅"}
    assert [n["title"] for n in laundry["notifications"]] == ["New Order Received 🎊"]


@pytest.mark.asyncio
async def test_list_notifications_requires_identity(client):
    response = await client.get("/notifications")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_mark_single_notification_read(client, db_session, customer_headers):
    ids = await seed_notifications(db_session)

    response = await client.post(f"/notifications/{ids['accepted']}/read", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["is_read"] is True
    assert response.json()["read_at"] is not None

    unread = (await client.get("/notifications?unread=true", headers=customer_headers)).json()
    assert unread["unread_count"] == 1
    assert [n["id"] for n in unread["notifications"]] == [ids["scheduled"]]


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(client, db_session, laundry_headers):
    ids = await seed_notifications(db_session)

    single = await client.post(f"/notifications/{ids['accepted']}/read", headers=laundry_headers)
    bulk = await client.post(
        "/notifications/read", json={"notification_ids": [ids["accepted"]]}, headers=laundry_headers
    )

    assert single.status_code == 404
    assert bulk.json() == {"updated": 0}


@pytest.mark.asyncio
async def test_mark_all_notifications_read(client, db_session, customer_headers, laundry_headers):
    await seed_notifications(db_session)

    response = await client.post("/notifications/read", json={"mark_all": True}, headers=customer_headers)

    assert response.json() == {"updated": 2}
    assert (await client.get("/notifications", headers=customer_headers)).json()["unread_count"] == 0
    assert (await client.get("/notifications", headers=laundry_headers)).json()["unread_count"] == 1


@pytest.mark.asyncio
async def test_consumer_start_failure_is_logged(caplog):
    async def start():
        raise ConnectionError("broker unreachable")

    task = asyncio.create_task(start())
    with pytest.raises(ConnectionError):
        await task

    with caplog.at_level(logging.ERROR, logger="laundry_service.main"):
        log_consumer_failure(task)

    assert "broker unreachable" in caplog.text
