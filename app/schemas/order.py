"""Pydantic schemas for order payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from typing import Any

from pydantic import Field

from app.db.models.order import PaymentMethodEnum
from app.schemas.base import CamelModel
from app.validation.validators import ObjectIdField
from app.validation.validators import ShippingAddress
from app.validation.validators import required_text

ItemNameText = required_text("Name is required.")
ItemImageText = required_text("Image is required.")
Amount = Annotated[float, Field(ge=0)]


class OrderItem(CamelModel):
    """One cart line."""

    product: ObjectIdField
    name: ItemNameText
    image: ItemImageText
    price: Amount
    qty: Annotated[int, Field(ge=1)] = 1


class PaymentResult(CamelModel):
    id: str
    status: str
    update_time: str | None = None
    email_address: str | None = None


class OrderCreate(CamelModel):
    """Payload to place an order; an empty ``orderItems`` list is rejected."""

    order_items: list[OrderItem] = Field(default_factory=list)
    shipping_address: ShippingAddress
    payment_method: PaymentMethodEnum = PaymentMethodEnum.PAYPAL
    payment_result: PaymentResult | None = None
    items_price: Amount = 0
    shipping_price: Amount = 0
    tax_price: Amount = 0
    total_price: Amount = 0


class Order(CamelModel):
    """Order response payload."""

    id: ObjectIdField
    user_id: ObjectIdField
    order_items: list[dict[str, Any]]
    shipping_address: dict[str, Any]
    payment_method: str
    payment_result: dict[str, Any] | None = None
    items_price: float
    shipping_price: float
    tax_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
