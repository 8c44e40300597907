from laundry_service.core.database import Base
from laundry_service.models.laundry import (
    ClothingItem,
    Laundry,
    LaundryService,
    LaundryStatus,
    PriceUnit,
    ServiceCategory,
    ServicePricing,
)
from laundry_service.models.notification import Notification, NotificationType
from laundry_service.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    OrderTimeline,
    OrderType,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from laundry_service.models.outbox import OutboxMessage
from laundry_service.models.promo import DiscountType, PromoCode
from laundry_service.models.review import Review

__all__ = [
    "Base",
    "ClothingItem",
    "DiscountType",
    "Laundry",
    "LaundryService",
    "LaundryStatus",
    "Notification",
    "NotificationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusHistory",
    "OrderTimeline",
    "OrderType",
    "OutboxMessage",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PriceUnit",
    "PromoCode",
    "Review",
    "ServiceCategory",
    "ServicePricing",
]
