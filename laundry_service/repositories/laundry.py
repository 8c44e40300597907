import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.models.laundry import Laundry, LaundryService, LaundryStatus, ServicePricing


class LaundryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, laundry_id: str) -> Optional[Laundry]:
        result = await self.session.execute(
            select(Laundry).where(Laundry.id == laundry_id)
        )
        return result.scalar_one_or_none()

    async def get_active(self, laundry_id: str) -> Optional[Laundry]:
        result = await self.session.execute(
            select(Laundry)
            .where(Laundry.id == laundry_id)
            .where(Laundry.status == LaundryStatus.ACTIVE.value)
        )
        return result.scalar_one_or_none()

    async def update(self, laundry: Laundry) -> Laundry:
        await self.session.flush()
        return laundry


class CatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_service(self, service_id: str) -> Optional[LaundryService]:
        result = await self.session.execute(
            select(LaundryService).where(LaundryService.id == service_id)
        )
        return result.scalar_one_or_none()

    async def update_service(self, service: LaundryService) -> LaundryService:
        await self.session.flush()
        return service

    async def get_pricing(self, laundry_id: str, service_id: str, clothing_item_id: str) -> Optional[ServicePricing]:
        result = await self.session.execute(
            select(ServicePricing)
            .join(LaundryService, ServicePricing.laundry_service_id == LaundryService.id)
            .where(LaundryService.laundry_id == laundry_id)
            .where(LaundryService.is_available.is_(True))
            .where(ServicePricing.laundry_service_id == service_id)
            .where(ServicePricing.clothing_item_id == clothing_item_id)
            .where(ServicePricing.is_available.is_(True))
        )
        return result.scalar_one_or_none()

    async def upsert_pricing(
        self,
        service_id: str,
        clothing_item_id: str,
        price: Decimal,
        express_price: Optional[Decimal],
        price_unit: str,
        is_available: bool = True
    ) -> ServicePricing:
        """Create or replace the price row keyed by (service, clothing item)."""
        result = await self.session.execute(
            select(ServicePricing)
            .where(ServicePricing.laundry_service_id == service_id)
            .where(ServicePricing.clothing_item_id == clothing_item_id)
            .with_for_update()
        )
        pricing = result.scalar_one_or_none()

        if pricing is None:
            pricing = ServicePricing(
                id=str(uuid.uuid4()),
                laundry_service_id=service_id,
                clothing_item_id=clothing_item_id
            )
            self.session.add(pricing)

        pricing.price = price
        pricing.express_price = express_price
        pricing.price_unit = price_unit
        pricing.is_available = is_available
        pricing.updated_at = datetime.now(timezone.utc)

        await self.session.flush()
        return pricing

    async def count_available_services(self, laundry_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(LaundryService)
            .where(LaundryService.laundry_id == laundry_id)
            .where(LaundryService.is_available.is_(True))
        )
        return result.scalar_one()
