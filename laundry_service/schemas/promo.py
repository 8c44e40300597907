from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class PromoValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    order_amount: Decimal = Field(ge=0)
    laundry_id: Optional[str] = None


class PromoValidationResponse(BaseModel):
    code: str
    discount_type: str
    discount_value: float
    max_discount: Optional[float] = None
    min_order_amount: float
    valid_until: datetime
    calculated_discount: float
    final_amount: float


class ActivePromoResponse(BaseModel):
    code: str
    title: Optional[str] = None
    discount_type: str
    discount_value: float
    max_discount: Optional[float] = None
    min_order_amount: float
    valid_until: datetime
    first_order_only: bool

    model_config = {"from_attributes": True}
