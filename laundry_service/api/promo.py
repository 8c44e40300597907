from typing import List

from fastapi import APIRouter, Depends

from laundry_service.api.deps import get_promo_evaluator, require_customer
from laundry_service.core.security import CustomerActor
from laundry_service.schemas.promo import ActivePromoResponse, PromoValidateRequest, PromoValidationResponse
from laundry_service.services.promo import PromoEvaluator

router = APIRouter(prefix="/promo", tags=["promo"])


@router.post("/validate", response_model=PromoValidationResponse)
async def validate_promo(
    request: PromoValidateRequest,
    customer: CustomerActor = Depends(require_customer),
    evaluator: PromoEvaluator = Depends(get_promo_evaluator)
) -> PromoValidationResponse:
    quote = await evaluator.validate(request.code, request.order_amount, customer.id, request.laundry_id)
    return PromoValidationResponse(
        code=quote.promo.code,
        discount_type=quote.promo.discount_type,
        discount_value=float(quote.promo.discount_value),
        max_discount=float(quote.promo.max_discount) if quote.promo.max_discount is not None else None,
        min_order_amount=float(quote.promo.min_order_amount),
        valid_until=quote.promo.valid_until,
        calculated_discount=float(quote.discount),
        final_amount=float(quote.final_amount)
    )


@router.get("/active", response_model=List[ActivePromoResponse])
async def list_active_promos(
    evaluator: PromoEvaluator = Depends(get_promo_evaluator)
) -> List[ActivePromoResponse]:
    promos = await evaluator.list_active()
    return [ActivePromoResponse.model_validate(promo) for promo in promos]
