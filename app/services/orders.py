"""Service helpers for order placement and fulfilment."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
import logging
from typing import Any

from bson import ObjectId
from sqlalchemy.orm import Session

from app.core.errors import EmptyCartError
from app.core.errors import NotFoundError
from app.db.models.order import Order as OrderModel
from app.db.models.user import User
from app.db.repository.orders import create_order
from app.db.repository.orders import get_order
from app.db.repository.orders import list_orders
from app.db.repository.orders import mark_order_delivered
from app.db.repository.orders import mark_order_paid
from app.schemas.order import Order
from app.schemas.order import OrderCreate
from app.services.auth import ensure_owner_or_admin

logger = logging.getLogger(__name__)


def _serialize(order: OrderModel) -> dict[str, Any]:
    return Order.model_validate(order).to_json()


def _load_order(session: Session, order_id: ObjectId) -> OrderModel:
    order = get_order(session, order_id)
    if order is None:
        raise NotFoundError("Order")
    return order


def create_order_service(session: Session, user: User, payload: OrderCreate) -> dict[str, Any]:
    """Place an order for ``user``; an empty cart is rejected."""
    if not payload.order_items:
        raise EmptyCartError()

    order = create_order(
        session,
        user_id=user.id,
        order_items=[item.to_json() for item in payload.order_items],
        shipping_address=payload.shipping_address.model_dump(mode="json", by_alias=True),
        payment_method=payload.payment_method.value,
        payment_result=payload.payment_result.to_json() if payload.payment_result else None,
        items_price=payload.items_price,
        shipping_price=payload.shipping_price,
        tax_price=payload.tax_price,
        total_price=payload.total_price,
    )
    session.commit()
    logger.info("User %s placed order %s", user.id, order.id)
    return _serialize(order)


def get_order_service(session: Session, user: User, order_id: ObjectId) -> dict[str, Any]:
    """Fetch an order visible to ``user``."""
    order = _load_order(session, order_id)
    ensure_owner_or_admin(user, order.user_id, "order")
    return _serialize(order)


def list_orders_service(session: Session, *, user_id: ObjectId | None = None) -> list[dict[str, Any]]:
    return [_serialize(order) for order in list_orders(session, user_id=user_id)]


def mark_order_paid_service(session: Session, order_id: ObjectId) -> dict[str, Any]:
    order = _load_order(session, order_id)
    order = mark_order_paid(session, order, paid_at=datetime.now(timezone.utc))
    session.commit()
    logger.info("Order %s marked as paid", order_id)
    return _serialize(order)


def mark_order_delivered_service(session: Session, order_id: ObjectId) -> dict[str, Any]:
    order = _load_order(session, order_id)
    order = mark_order_delivered(session, order, delivered_at=datetime.now(timezone.utc))
    session.commit()
    logger.info("Order %s marked as delivered", order_id)
    return _serialize(order)
