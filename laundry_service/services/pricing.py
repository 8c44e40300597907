"""Order pricing.

Unit prices are frozen onto the order lines at creation time; later changes
to a laundry's price list never touch existing orders.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from laundry_service.core.config import settings
from laundry_service.core.errors import PricingNotFoundError
from laundry_service.models.laundry import Laundry, PriceUnit, ServicePricing
from laundry_service.models.order import OrderType
from laundry_service.repositories.laundry import CatalogRepository
from laundry_service.schemas.order import OrderItemCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class PricedLine:
    service_id: str
    clothing_item_id: str
    quantity: int
    weight_kg: Optional[Decimal]
    unit_price: Decimal
    price_unit: str
    total_price: Decimal
    special_notes: Optional[str] = None


@dataclass
class PriceQuote:
    lines: List[PricedLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    express_fee: Decimal = Decimal("0.00")
    estimated_hours: int = 24


def resolve_unit_price(pricing: ServicePricing, order_type: OrderType) -> Decimal:
    if order_type == OrderType.EXPRESS and pricing.express_price is not None:
        return Decimal(pricing.express_price)
    return Decimal(pricing.price)


def line_total(unit_price: Decimal, price_unit: str, quantity: int = 1, weight_kg: Optional[Decimal] = None) -> Decimal:
    if price_unit == PriceUnit.PER_KG.value and weight_kg:
        return to_money(unit_price * Decimal(weight_kg))
    return to_money(unit_price * quantity)


def estimate_delivery(pickup_date: datetime, estimated_hours: int, order_type: OrderType) -> datetime:
    hours = math.ceil(estimated_hours / 2) if order_type == OrderType.EXPRESS else estimated_hours
    return pickup_date + timedelta(hours=hours)


class PricingCalculator:
    def __init__(
        self,
        catalog: CatalogRepository,
        free_delivery_threshold: Decimal = settings.free_delivery_threshold,
        delivery_fee: Decimal = settings.delivery_fee,
        express_fee_rate: Decimal = settings.express_fee_rate,
        default_estimated_hours: int = settings.default_estimated_hours
    ) -> None:
        self.catalog = catalog
        self.free_delivery_threshold = Decimal(free_delivery_threshold)
        self.flat_delivery_fee = Decimal(delivery_fee)
        self.express_fee_rate = Decimal(express_fee_rate)
        self.default_estimated_hours = default_estimated_hours

    def delivery_fee_for(self, subtotal: Decimal, free_pickup_delivery: bool = False) -> Decimal:
        if free_pickup_delivery or subtotal >= self.free_delivery_threshold:
            return Decimal("0.00")
        return to_money(self.flat_delivery_fee)

    def express_fee_for(self, subtotal: Decimal, order_type: OrderType) -> Decimal:
        if order_type != OrderType.EXPRESS:
            return Decimal("0.00")
        return to_money(subtotal * self.express_fee_rate)

    async def quote(self, laundry: Laundry, order_type: OrderType, items: Sequence[OrderItemCreate]) -> PriceQuote:
        quote = PriceQuote(estimated_hours=self.default_estimated_hours)
        subtotal = Decimal("0")

        for item in items:
            pricing = await self.catalog.get_pricing(laundry.id, item.service_id, item.clothing_item_id)
            if pricing is None:
                raise PricingNotFoundError(item.service_id, item.clothing_item_id)

            unit_price = resolve_unit_price(pricing, order_type)
            total = line_total(unit_price, pricing.price_unit, item.quantity, item.weight_kg)
            subtotal += total
            quote.estimated_hours = max(quote.estimated_hours, pricing.laundry_service.estimated_hours)

            quote.lines.append(PricedLine(
                service_id=item.service_id,
                clothing_item_id=item.clothing_item_id,
                quantity=item.quantity,
                weight_kg=item.weight_kg,
                unit_price=to_money(unit_price),
                price_unit=pricing.price_unit,
                total_price=total,
                special_notes=item.special_notes
            ))

        quote.subtotal = to_money(subtotal)
        quote.delivery_fee = self.delivery_fee_for(quote.subtotal, laundry.free_pickup_delivery)
        quote.express_fee = self.express_fee_for(quote.subtotal, order_type)

        logger.debug(
            f"Priced {len(quote.lines)} items for laundry {laundry.id}: subtotal={quote.subtotal}, "
            f"delivery_fee={quote.delivery_fee}, express_fee={quote.express_fee}"
        )
        return quote
