from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from laundry_service.models.promo import PromoCode


class PromoRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, promo: PromoCode) -> PromoCode:
        promo.code = promo.code.upper()
        self.session.add(promo)
        await self.session.flush()
        return promo

    async def get_by_code(self, code: str) -> Optional[PromoCode]:
        result = await self.session.execute(
            select(PromoCode).where(PromoCode.code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def increment_usage(self, promo_id: str) -> bool:
        """Consume one use of the promo; False when the usage limit is already hit.

        The limit check and the increment are a single conditional UPDATE so
        two concurrent orders cannot both take the last use.
        """
        result = await self.session.execute(
            update(PromoCode)
            .where(PromoCode.id == promo_id)
            .where(or_(PromoCode.usage_limit.is_(None), PromoCode.used_count < PromoCode.usage_limit))
            .values(used_count=PromoCode.used_count + 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    async def list_active(self, now: datetime, limit: int = 10) -> List[PromoCode]:
        result = await self.session.execute(
            select(PromoCode)
            .where(PromoCode.is_active.is_(True))
            .where(PromoCode.valid_from <= now)
            .where(PromoCode.valid_until >= now)
            .where(or_(PromoCode.usage_limit.is_(None), PromoCode.used_count < PromoCode.usage_limit))
            .order_by(PromoCode.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
