from fastapi import Depends, Header, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.core.database import get_db
from laundry_service.core.security import Actor, CustomerActor, LaundryActor, actor_adapter
from laundry_service.services.catalog import CatalogService
from laundry_service.services.notification import NotificationService
from laundry_service.services.order import OrderService
from laundry_service.services.promo import PromoEvaluator
from laundry_service.services.review import ReviewService
from laundry_service.repositories.order import OrderRepository
from laundry_service.repositories.promo import PromoRepository


async def get_current_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None)
) -> Actor:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity"
        )
    try:
        return actor_adapter.validate_python({"id": x_actor_id, "role": x_actor_role.upper()})
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity"
        )


async def require_customer(actor: Actor = Depends(get_current_actor)) -> CustomerActor:
    if not isinstance(actor, CustomerActor):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Customers only")
    return actor


async def require_laundry(actor: Actor = Depends(get_current_actor)) -> LaundryActor:
    if not isinstance(actor, LaundryActor):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Laundries only")
    return actor


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_promo_evaluator(db: AsyncSession = Depends(get_db)) -> PromoEvaluator:
    return PromoEvaluator(PromoRepository(db), OrderRepository(db))
