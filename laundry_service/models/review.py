from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Boolean, Text, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laundry_service.core.database import Base
from laundry_service.models.order import Order


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("orders.id"), nullable=False, unique=True)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    laundry_id: Mapped[str] = mapped_column(String(36), ForeignKey("laundries.id"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    service_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    delivery_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    value_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    laundry_reply: Mapped[str | None] = mapped_column(Text, nullable=True)
    replied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    order: Mapped[Order] = relationship(back_populates="review")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
