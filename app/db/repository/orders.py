"""Repository primitives for customer orders."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from bson import ObjectId
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.order import Order


def create_order(
    session: Session,
    *,
    user_id: ObjectId,
    order_items: list[dict[str, Any]],
    shipping_address: dict[str, Any],
    payment_method: str,
    items_price: float,
    shipping_price: float,
    tax_price: float,
    total_price: float,
    payment_result: dict[str, Any] | None = None,
) -> Order:
    """Create and return an order row."""
    order = Order(
        user_id=user_id,
        order_items=order_items,
        shipping_address=shipping_address,
        payment_method=payment_method,
        payment_result=payment_result,
        items_price=items_price,
        shipping_price=shipping_price,
        tax_price=tax_price,
        total_price=total_price,
    )
    session.add(order)
    session.flush()
    session.refresh(order)
    return order


def get_order(session: Session, order_id: ObjectId) -> Order | None:
    """Fetch an order by id."""
    return session.get(Order, order_id)


def list_orders(session: Session, *, user_id: ObjectId | None = None) -> list[Order]:
    """List orders, newest first, optionally scoped to one user."""
    stmt = select(Order)
    if user_id is not None:
        stmt = stmt.where(Order.user_id == user_id)
    stmt = stmt.order_by(Order.created_at.desc())
    return list(session.scalars(stmt))


def mark_order_paid(session: Session, order: Order, *, paid_at: datetime) -> Order:
    order.is_paid = True
    order.paid_at = paid_at
    session.flush()
    session.refresh(order)
    return order


def mark_order_delivered(session: Session, order: Order, *, delivered_at: datetime) -> Order:
    order.is_delivered = True
    order.delivered_at = delivered_at
    session.flush()
    session.refresh(order)
    return order
