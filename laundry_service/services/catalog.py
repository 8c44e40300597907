import logging

from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import run_in_transaction
from laundry_service.core.errors import NotFoundError, PermissionDenied
from laundry_service.core.security import Actor, Role
from laundry_service.models.laundry import LaundryService, ServicePricing
from laundry_service.repositories.laundry import CatalogRepository, LaundryRepository
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.review import ReviewRepository
from laundry_service.schemas.catalog import PricingResponse, PricingUpsert, ServiceResponse
from laundry_service.services.stats import StatsService

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repository = CatalogRepository(session)
        self.stats = StatsService(
            LaundryRepository(session),
            OrderRepository(session),
            ReviewRepository(session),
            self.repository
        )

    async def _get_owned_service(self, actor: Actor, service_id: str, message: str) -> LaundryService:
        service = await self.repository.get_service(service_id)
        if service is None:
            raise NotFoundError("Service not found")
        if actor.role != Role.LAUNDRY.value or service.laundry_id != actor.id:
            raise PermissionDenied(message)
        return service

    async def upsert_pricing(self, actor: Actor, service_id: str, pricing_data: PricingUpsert) -> PricingResponse:
        """Set the price of one clothing item for a service; the last write wins."""

        async def operation() -> ServicePricing:
            await self._get_owned_service(actor, service_id, "Only the owning laundry can change its prices")

            return await self.repository.upsert_pricing(
                service_id=service_id,
                clothing_item_id=pricing_data.clothing_item_id,
                price=pricing_data.price,
                express_price=pricing_data.express_price,
                price_unit=pricing_data.price_unit.value,
                is_available=pricing_data.is_available
            )

        pricing = await run_in_transaction(self.session, operation)
        logger.info(
            f"Pricing for service {service_id} item {pricing_data.clothing_item_id} set to "
            f"{pricing.price} (express {pricing.express_price})"
        )
        return PricingResponse.model_validate(pricing)

    async def set_service_availability(self, actor: Actor, service_id: str, is_available: bool) -> ServiceResponse:
        async def operation() -> LaundryService:
            service = await self._get_owned_service(
                actor, service_id, "Only the owning laundry can change its services"
            )
            service.is_available = is_available
            await self.repository.update_service(service)
            await self.stats.recompute(service.laundry_id)
            return service

        service = await run_in_transaction(self.session, operation)
        logger.info(f"Service {service_id} of laundry {service.laundry_id} is_available={is_available}")
        return ServiceResponse.model_validate(service)
