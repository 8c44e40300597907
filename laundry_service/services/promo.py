import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

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

logger = logging.getLogger(__name__)


def ensure_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_discount(promo: PromoCode, order_amount: Decimal) -> Decimal:
    """Discount in whole currency units.

    Percentage discounts are capped at ``max_discount``; fixed discounts are
    clamped to the order amount so a total can never go negative.
    """
    order_amount = Decimal(order_amount)
    if promo.discount_type == DiscountType.PERCENTAGE.value:
        discount = order_amount * Decimal(promo.discount_value) / Decimal(100)
        if promo.max_discount is not None and discount > promo.max_discount:
            discount = Decimal(promo.max_discount)
    else:
        discount = min(Decimal(promo.discount_value), order_amount)
    return discount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


@dataclass
class PromoQuote:
    promo: PromoCode
    discount: Decimal
    final_amount: Decimal


class PromoEvaluator:
    def __init__(self, promo_repository: PromoRepository, order_repository: OrderRepository) -> None:
        self.promo_repository = promo_repository
        self.order_repository = order_repository

    async def validate(
        self,
        code: str,
        order_amount: Decimal,
        customer_id: str,
        laundry_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> PromoQuote:
        """Check the promo against an order without consuming a use.

        Checks run in a fixed order and the first failure wins.
        """
        now = now or datetime.now(timezone.utc)
        normalized = code.strip().upper()
        promo = await self.promo_repository.get_by_code(normalized)

        if (
            promo is None
            or not promo.is_active
            or now < ensure_utc(promo.valid_from)
            or now > ensure_utc(promo.valid_until)
        ):
            raise InvalidOrExpiredPromo(normalized)

        if promo.usage_limit is not None and promo.used_count >= promo.usage_limit:
            raise UsageLimitReached(promo.code)

        if Decimal(order_amount) < promo.min_order_amount:
            raise MinimumAmountNotMet(promo.min_order_amount)

        if promo.first_order_only:
            previous_orders = await self.order_repository.count_non_cancelled_for_customer(customer_id)
            if previous_orders > 0:
                raise FirstOrderOnlyViolation()

        if promo.specific_laundries and laundry_id and laundry_id not in promo.specific_laundries:
            raise LaundryNotEligible(laundry_id)

        discount = calculate_discount(promo, order_amount)
        return PromoQuote(
            promo=promo,
            discount=discount,
            final_amount=(Decimal(order_amount) - discount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )

    async def apply(
        self,
        code: str,
        order_amount: Decimal,
        customer_id: str,
        laundry_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> PromoQuote:
        quote = await self.validate(code, order_amount, customer_id, laundry_id, now)

        if not await self.promo_repository.increment_usage(quote.promo.id):
            raise UsageLimitReached(quote.promo.code)

        logger.info(f"Promo {quote.promo.code} applied for customer {customer_id}, discount {quote.discount}")
        return quote

    async def list_active(self, now: Optional[datetime] = None) -> List[PromoCode]:
        return await self.promo_repository.list_active(now or datetime.now(timezone.utc))
