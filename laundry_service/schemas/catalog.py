from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from laundry_service.models.laundry import PriceUnit


class PricingUpsert(BaseModel):
    clothing_item_id: str
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    express_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    price_unit: PriceUnit = PriceUnit.PER_PIECE
    is_available: bool = True

    @model_validator(mode="after")
    def express_not_cheaper(self) -> "PricingUpsert":
        if self.express_price is not None and self.express_price < self.price:
            raise ValueError("express_price cannot be lower than price")
        return self


class PricingResponse(BaseModel):
    id: str
    laundry_service_id: str
    clothing_item_id: str
    price: float
    express_price: Optional[float] = None
    price_unit: str
    is_available: bool
    updated_at: datetime

    model_config = {"from_attributes": True}


class LaundryStats(BaseModel):
    laundry_id: str
    total_orders: int
    rating: float
    total_reviews: int
    services_count: int


class ServiceAvailabilityUpdate(BaseModel):
    is_available: bool


class ServiceResponse(BaseModel):
    id: str
    laundry_id: str
    category_id: str
    name: str
    estimated_hours: int
    is_available: bool

    model_config = {"from_attributes": True}
