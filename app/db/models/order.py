"""SQLAlchemy model for customer orders."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from bson import ObjectId
from sqlalchemy import JSON
from sqlalchemy import Boolean
from sqlalchemy import DateTime
from sqlalchemy import Float
from sqlalchemy import ForeignKey
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from app.db.models.user import Base
from app.db.models.user import utcnow
from app.db.types import ObjectIdType


class PaymentMethodEnum(str, Enum):
    PAYPAL = "PayPal"
    STRIPE = "Stripe"


class Order(Base):
    """Placed order; line items and addresses are stored as JSON snapshots."""

    __tablename__ = "orders"
    __table_args__ = (PrimaryKeyConstraint("id", name="pk_orders"),)

    id: Mapped[ObjectId] = mapped_column(ObjectIdType, primary_key=True, default=ObjectId)
    user_id: Mapped[ObjectId] = mapped_column(
        ObjectIdType,
        ForeignKey("users.id", name="fk_orders_user_id_users"),
        nullable=False,
    )
    order_items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    shipping_address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=PaymentMethodEnum.PAYPAL.value,
    )
    payment_result: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    items_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    shipping_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    tax_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_delivered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
