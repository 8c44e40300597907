from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Numeric, DateTime, Integer, Float, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laundry_service.core.database import Base


class LaundryStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class PriceUnit(str, Enum):
    PER_PIECE = "PER_PIECE"
    PER_KG = "PER_KG"


class Laundry(Base):
    __tablename__ = "laundries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    laundry_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=LaundryStatus.PENDING.value, index=True)
    free_pickup_delivery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    services_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ClothingItem(Base):
    __tablename__ = "clothing_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="GENERAL")
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class LaundryService(Base):
    __tablename__ = "laundry_services"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    laundry_id: Mapped[str] = mapped_column(String(36), ForeignKey("laundries.id"), nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(String(36), ForeignKey("service_categories.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


class ServicePricing(Base):
    __tablename__ = "service_pricing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    laundry_service_id: Mapped[str] = mapped_column(String(36), ForeignKey("laundry_services.id"), nullable=False)
    clothing_item_id: Mapped[str] = mapped_column(String(36), ForeignKey("clothing_items.id"), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    express_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_unit: Mapped[str] = mapped_column(String(20), nullable=False, default=PriceUnit.PER_PIECE.value)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    laundry_service: Mapped[LaundryService] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("laundry_service_id", "clothing_item_id", name="uq_service_pricing_service_item"),
    )
