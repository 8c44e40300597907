"""Domain errors.

Every error carries a stable ``code`` for clients and the HTTP status the API
layer answers with. None of them are retried: they describe the request, not
the infrastructure.
"""
from decimal import Decimal

from fastapi import Request, status
from fastapi.responses import JSONResponse


class LaundryServiceError(Exception):
    code = "LAUNDRY_SERVICE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LaundryServiceError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class OrderNotFound(NotFoundError):
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str) -> None:
        super().__init__("Order not found")
        self.order_id = order_id


class LaundryNotFound(NotFoundError):
    code = "LAUNDRY_NOT_FOUND"

    def __init__(self, laundry_id: str) -> None:
        super().__init__("Laundry not found or not active")
        self.laundry_id = laundry_id


class ReviewNotFound(NotFoundError):
    code = "REVIEW_NOT_FOUND"

    def __init__(self, review_id: str) -> None:
        super().__init__("Review not found")
        self.review_id = review_id


class PricingNotFoundError(NotFoundError):
    code = "PRICING_NOT_FOUND"

    def __init__(self, service_id: str, clothing_item_id: str) -> None:
        super().__init__(
            f"Pricing not found for service {service_id} and item {clothing_item_id}"
        )
        self.service_id = service_id
        self.clothing_item_id = clothing_item_id


class PermissionDenied(LaundryServiceError):
    code = "ACCESS_DENIED"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class StateConflictError(LaundryServiceError):
    code = "STATE_CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class InvalidStatusTransition(StateConflictError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, from_status: str, to_status: str, allowed: list[str] | None = None) -> None:
        message = f"Invalid status transition from {from_status} to {to_status}"
        if allowed is not None:
            message += f". Allowed: {', '.join(allowed) or 'none'}"
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status


class CancellationNotAllowed(StateConflictError):
    code = "CANCEL_NOT_ALLOWED"

    def __init__(self, current_status: str) -> None:
        super().__init__(
            f"Cannot cancel order with status: {current_status}. "
            "Orders can only be cancelled before processing starts."
        )
        self.current_status = current_status


class UsageLimitReached(StateConflictError):
    code = "PROMO_LIMIT_REACHED"

    def __init__(self, promo_code: str) -> None:
        super().__init__("Promo code usage limit reached")
        self.promo_code = promo_code


class AlreadyReviewed(StateConflictError):
    code = "ALREADY_REVIEWED"

    def __init__(self, order_id: str) -> None:
        super().__init__("Order already reviewed")
        self.order_id = order_id


class AlreadyReplied(StateConflictError):
    code = "ALREADY_REPLIED"

    def __init__(self, review_id: str) -> None:
        super().__init__("Already replied to this review")
        self.review_id = review_id


class OrderNotDelivered(LaundryServiceError):
    code = "ORDER_NOT_DELIVERED"

    def __init__(self, current_status: str) -> None:
        super().__init__("Can only review delivered orders")
        self.current_status = current_status


class PromoError(LaundryServiceError):
    code = "INVALID_PROMO"


class InvalidOrExpiredPromo(PromoError):
    code = "INVALID_PROMO"

    def __init__(self, promo_code: str) -> None:
        super().__init__("Invalid or expired promo code")
        self.promo_code = promo_code


class MinimumAmountNotMet(PromoError):
    code = "MIN_AMOUNT_NOT_MET"

    def __init__(self, min_order_amount: Decimal) -> None:
        super().__init__(f"Minimum order amount is Rs {min_order_amount}")
        self.min_order_amount = min_order_amount


class FirstOrderOnlyViolation(PromoError):
    code = "FIRST_ORDER_ONLY"

    def __init__(self) -> None:
        super().__init__("This promo code is only valid for first orders")


class LaundryNotEligible(PromoError):
    code = "LAUNDRY_NOT_ELIGIBLE"

    def __init__(self, laundry_id: str) -> None:
        super().__init__("This promo code is not valid for this laundry")
        self.laundry_id = laundry_id


async def laundry_service_error_handler(request: Request, exc: LaundryServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )
