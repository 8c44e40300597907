import pytest
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from laundry_service.core.errors import LaundryNotFound
from laundry_service.models.order import Order, OrderStatus
from laundry_service.models.review import Review
from laundry_service.repositories.laundry import CatalogRepository, LaundryRepository
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.review import ReviewRepository
from laundry_service.services.stats import StatsService


def make_stats(session) -> StatsService:
    return StatsService(
        LaundryRepository(session),
        OrderRepository(session),
        ReviewRepository(session),
        CatalogRepository(session)
    )


def make_order(number: int, status: OrderStatus, laundry_id: str = "laundry-1") -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id=str(uuid.uuid4()),
        order_number=f"ORD-20260301-{number:04d}",
        customer_id=f"customer-{number}",
        laundry_id=laundry_id,
        status=status.value,
        pickup_address="House 1, Street 1, Lahore",
        pickup_latitude=31.5,
        pickup_longitude=74.3,
        pickup_date=now,
        delivery_address="House 1, Street 1, Lahore",
        delivery_latitude=31.5,
        delivery_longitude=74.3,
        subtotal=Decimal("200"),
        total_amount=Decimal("300"),
        created_at=now,
        updated_at=now,
        items=[],
        timeline=[],
        status_history=[],
        payment=None,
        review=None
    )


def make_review(order: Order, rating: int, is_visible: bool = True) -> Review:
    now = datetime.now(timezone.utc)
    return Review(
        id=str(uuid.uuid4()),
        order_id=order.id,
        customer_id=order.customer_id,
        laundry_id=order.laundry_id,
        rating=rating,
        images=[],
        is_visible=is_visible,
        created_at=now,
        updated_at=now
    )


@pytest.mark.asyncio
async def test_recompute_from_source_rows(db_session, catalog):
    orders = [
        make_order(1, OrderStatus.COMPLETED),
        make_order(2, OrderStatus.COMPLETED),
        make_order(3, OrderStatus.DELIVERED),
        make_order(4, OrderStatus.CANCELLED),
        make_order(5, OrderStatus.COMPLETED, laundry_id=catalog.other_laundry_id),
    ]
    db_session.add_all(orders)
    await db_session.flush()
    db_session.add_all([
        make_review(orders[0], 5),
        make_review(orders[1], 4),
        make_review(orders[2], 1, is_visible=False),
    ])
    await db_session.flush()

    stats = await make_stats(db_session).recompute(catalog.laundry_id)

    assert stats.total_orders == 3
    assert stats.rating == 4.5
    assert stats.total_reviews == 2
    assert stats.services_count == 2

    laundry = await LaundryRepository(db_session).get_by_id(catalog.laundry_id)
    assert laundry.total_orders == 3
    assert laundry.rating == 4.5


@pytest.mark.asyncio
async def test_recompute_without_reviews(db_session, catalog):
    stats = await make_stats(db_session).recompute(catalog.laundry_id)

    assert stats.total_orders == 0
    assert stats.rating == 0.0
    assert stats.total_reviews == 0


@pytest.mark.asyncio
async def test_recompute_rounds_rating(db_session, catalog):
    orders = [make_order(n, OrderStatus.COMPLETED) for n in range(1, 4)]
    db_session.add_all(orders)
    await db_session.flush()
    db_session.add_all([make_review(orders[0], 5), make_review(orders[1], 5), make_review(orders[2], 4)])
    await db_session.flush()

    stats = await make_stats(db_session).recompute(catalog.laundry_id)

    assert stats.rating == 4.67


@pytest.mark.asyncio
async def test_recompute_is_idempotent(db_session, catalog):
    orders = [make_order(1, OrderStatus.COMPLETED), make_order(2, OrderStatus.PROCESSING)]
    db_session.add_all(orders)
    await db_session.flush()
    db_session.add(make_review(orders[0], 3))
    await db_session.flush()
    service = make_stats(db_session)

    first = await service.recompute(catalog.laundry_id)
    second = await service.recompute(catalog.laundry_id)

    assert first == second


@pytest.mark.asyncio
async def test_recompute_unknown_laundry(db_session):
    with pytest.raises(LaundryNotFound):
        await make_stats(db_session).recompute("missing")


@pytest.mark.asyncio
async def test_delivery_updates_laundry_stats(client, db_session, customer_headers, laundry_headers, order_payload):
    order = (await client.post("/orders", json=order_payload(), headers=customer_headers)).json()
    for status in ["ACCEPTED", "PICKUP_SCHEDULED", "PICKED_UP", "PROCESSING", "READY", "OUT_FOR_DELIVERY", "DELIVERED"]:
        await client.put(f"/laundry/orders/{order['id']}/status", json={"status": status}, headers=laundry_headers)

    await client.post(f"/orders/{order['id']}/review", json={"rating": 4}, headers=customer_headers)

    laundry = await LaundryRepository(db_session).get_by_id("laundry-1")
    assert laundry.total_orders == 1
    assert laundry.rating == 4.0
    assert laundry.total_reviews == 1
    assert laundry.services_count == 2
