import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from laundry_service.core.errors import (
    FirstOrderOnlyViolation,
    InvalidOrExpiredPromo,
    LaundryNotEligible,
    MinimumAmountNotMet,
    UsageLimitReached,
)
from laundry_service.models.promo import DiscountType, PromoCode
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.promo import PromoRepository
from laundry_service.services.promo import PromoEvaluator, calculate_discount


def make_promo(**overrides) -> PromoCode:
    now = datetime.now(timezone.utc)
    values = {
        "id": "promo-1",
        "code": "FLAT100",
        "discount_type": DiscountType.FIXED.value,
        "discount_value": Decimal("100"),
        "max_discount": None,
        "min_order_amount": Decimal("0"),
        "valid_from": now - timedelta(days=1),
        "valid_until": now + timedelta(days=1),
        "usage_limit": None,
        "used_count": 0,
        "first_order_only": False,
        "specific_laundries": None,
        "is_active": True,
        "created_at": now,
    }
    values.update(overrides)
    return PromoCode(**values)


def make_evaluator(session) -> PromoEvaluator:
    return PromoEvaluator(PromoRepository(session), OrderRepository(session))


def test_percentage_discount_is_capped():
    promo = make_promo(discount_type=DiscountType.PERCENTAGE.value, discount_value=Decimal("50"), max_discount=Decimal("200"))

    assert calculate_discount(promo, Decimal("500")) == Decimal("200")
    assert calculate_discount(promo, Decimal("300")) == Decimal("150")


def test_percentage_discount_rounds_half_up_to_whole_units():
    promo = make_promo(discount_type=DiscountType.PERCENTAGE.value, discount_value=Decimal("15"))

    # 15% of 123 = 18.45 -> 18, 15% of 130 = 19.5 -> 20
    assert calculate_discount(promo, Decimal("123")) == Decimal("18")
    assert calculate_discount(promo, Decimal("130")) == Decimal("20")


def test_fixed_discount_is_clamped_to_order_amount():
    promo = make_promo(discount_value=Decimal("100"))

    assert calculate_discount(promo, Decimal("250")) == Decimal("100")
    assert calculate_discount(promo, Decimal("60")) == Decimal("60")


@pytest.mark.asyncio
async def test_validate_welcome_promo(db_session, welcome_promo):
    quote = await make_evaluator(db_session).validate("welcome50", Decimal("500"), "customer-1")

    assert quote.promo.code == "WELCOME50"
    assert quote.discount == Decimal("200")
    assert quote.final_amount == Decimal("300")


@pytest.mark.asyncio
async def test_validate_does_not_consume_a_use(db_session, welcome_promo):
    evaluator = make_evaluator(db_session)

    await evaluator.validate("WELCOME50", Decimal("500"), "customer-1")
    await evaluator.validate("WELCOME50", Decimal("500"), "customer-1")

    promo = await PromoRepository(db_session).get_by_code("WELCOME50")
    assert promo.used_count == 0


@pytest.mark.asyncio
async def test_validate_unknown_code(db_session):
    with pytest.raises(InvalidOrExpiredPromo):
        await make_evaluator(db_session).validate("NOPE", Decimal("500"), "customer-1")


@pytest.mark.asyncio
async def test_validate_inactive_and_expired(db_session):
    now = datetime.now(timezone.utc)
    repository = PromoRepository(db_session)
    await repository.create(make_promo(id="promo-inactive", code="OFF", is_active=False))
    await repository.create(make_promo(
        id="promo-expired", code="OLD", valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1)
    ))
    await repository.create(make_promo(id="promo-future", code="SOON", valid_from=now + timedelta(days=1)))
    evaluator = make_evaluator(db_session)

    for code in ("OFF", "OLD", "SOON"):
        with pytest.raises(InvalidOrExpiredPromo):
            await evaluator.validate(code, Decimal("500"), "customer-1")


@pytest.mark.asyncio
async def test_valid_until_is_inclusive(db_session):
    ends_at = datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc)
    await PromoRepository(db_session).create(make_promo(
        code="JUNE", valid_from=ends_at - timedelta(days=30), valid_until=ends_at
    ))
    evaluator = make_evaluator(db_session)

    quote = await evaluator.validate("JUNE", Decimal("500"), "customer-1", now=ends_at)
    assert quote.discount == Decimal("100")
    assert [promo.code for promo in await evaluator.list_active(now=ends_at)] == ["JUNE"]

    later = ends_at + timedelta(seconds=1)
    with pytest.raises(InvalidOrExpiredPromo):
        await evaluator.validate("JUNE", Decimal("500"), "customer-1", now=later)
    assert await evaluator.list_active(now=later) == []


@pytest.mark.asyncio
async def test_validate_checks_run_in_order(db_session):
    # exhausted and below minimum: the usage limit is reported first
    await PromoRepository(db_session).create(make_promo(
        code="LIMITED", usage_limit=1, used_count=1, min_order_amount=Decimal("1000")
    ))

    with pytest.raises(UsageLimitReached):
        await make_evaluator(db_session).validate("LIMITED", Decimal("10"), "customer-1")


@pytest.mark.asyncio
async def test_validate_minimum_amount(db_session, welcome_promo):
    with pytest.raises(MinimumAmountNotMet):
        await make_evaluator(db_session).validate("WELCOME50", Decimal("299"), "customer-1")


@pytest.mark.asyncio
async def test_validate_laundry_allow_list(db_session):
    await PromoRepository(db_session).create(make_promo(code="SPARKLE", specific_laundries=["laundry-1"]))
    evaluator = make_evaluator(db_session)

    quote = await evaluator.validate("SPARKLE", Decimal("500"), "customer-1", laundry_id="laundry-1")
    assert quote.discount == Decimal("100")

    # without a laundry the allow-list is not checked
    await evaluator.validate("SPARKLE", Decimal("500"), "customer-1")

    with pytest.raises(LaundryNotEligible):
        await evaluator.validate("SPARKLE", Decimal("500"), "customer-1", laundry_id="laundry-2")


@pytest.mark.asyncio
async def test_welcome_promo_first_order_only(client, catalog, welcome_promo, customer_headers, order_payload):
    items = [{"service_id": catalog.wash_service_id, "clothing_item_id": catalog.shirt_id, "quantity": 10}]

    first = await client.post("/orders", json=order_payload(items=items, promo_code="WELCOME50"), headers=customer_headers)

    assert first.status_code == 201
    data = first.json()
    assert data["subtotal"] == 500.0
    assert data["discount"] == 200.0
    assert data["delivery_fee"] == 100.0
    assert data["total_amount"] == 400.0
    assert data["promo_code"] == "WELCOME50"

    second = await client.post("/orders", json=order_payload(items=items, promo_code="WELCOME50"), headers=customer_headers)

    assert second.status_code == 400
    assert second.json()["code"] == "FIRST_ORDER_ONLY"


@pytest.mark.asyncio
async def test_promo_error_fails_order_creation_without_side_effects(client, catalog, welcome_promo, customer_headers, order_payload):
    response = await client.post("/orders", json=order_payload(promo_code="WELCOME50"), headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "MIN_AMOUNT_NOT_MET"

    orders = await client.get("/orders", headers=customer_headers)
    assert orders.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_concurrent_use_of_last_promo_slot(db_session, session_maker):
    await PromoRepository(db_session).create(make_promo(id="promo-once", code="ONCE", usage_limit=1, used_count=0))
    await db_session.commit()

    async def consume() -> bool:
        async with session_maker() as session:
            consumed = await PromoRepository(session).increment_usage("promo-once")
            await session.commit()
            return consumed

    results = await asyncio.gather(consume(), consume())

    assert sorted(results) == [False, True]

    async with session_maker() as session:
        promo = await PromoRepository(session).get_by_code("ONCE")
        assert promo.used_count == 1


@pytest.mark.asyncio
async def test_apply_raises_when_last_slot_is_taken(db_session, session_maker):
    await PromoRepository(db_session).create(make_promo(id="promo-once", code="ONCE", usage_limit=1, used_count=0))
    await db_session.commit()

    async with session_maker() as session:
        await make_evaluator(session).apply("ONCE", Decimal("500"), "customer-1")
        await session.commit()

    async with session_maker() as session:
        with pytest.raises(UsageLimitReached):
            await make_evaluator(session).apply("ONCE", Decimal("500"), "customer-2")


@pytest.mark.asyncio
async def test_validate_endpoint(client, welcome_promo, customer_headers):
    response = await client.post(
        "/promo/validate",
        json={"code": "welcome50", "order_amount": 500},
        headers=customer_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["code"] == "WELCOME50"
    assert data["calculated_discount"] == 200.0
    assert data["final_amount"] == 300.0


@pytest.mark.asyncio
async def test_active_promos_endpoint(client, db_session, welcome_promo):
    await PromoRepository(db_session).create(make_promo(id="promo-spent", code="SPENT", usage_limit=5, used_count=5))
    await db_session.commit()

    response = await client.get("/promo/active")

    assert response.status_code == 200
    assert [promo["code"] for promo in response.json()] == ["WELCOME50"]
