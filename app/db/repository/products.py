"""Repository primitives for catalog products."""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.product import Product

UPDATABLE_FIELDS = (
    "name",
    "image",
    "brand",
    "category",
    "description",
    "price",
    "count_in_stock",
)


def create_product(session: Session, *, user_id: ObjectId, **fields: Any) -> Product:
    """Create and return a product row."""
    product = Product(user_id=user_id, **fields)
    session.add(product)
    session.flush()
    session.refresh(product)
    return product


def get_product(session: Session, product_id: ObjectId) -> Product | None:
    """Fetch a product by id."""
    return session.get(Product, product_id)


def _keyword_filter(stmt, keyword: str):
    if keyword:
        stmt = stmt.where(Product.name.ilike(f"%{keyword}%"))
    return stmt


def count_products(session: Session, *, keyword: str = "") -> int:
    stmt = _keyword_filter(select(func.count()).select_from(Product), keyword)
    return int(session.scalar(stmt) or 0)


def list_products(
    session: Session,
    *,
    keyword: str = "",
    limit: int = 10,
    offset: int = 0,
) -> list[Product]:
    """List products matching ``keyword`` (case-insensitive name match)."""
    stmt = _keyword_filter(select(Product), keyword)
    stmt = stmt.order_by(Product.created_at.desc(), Product.id).limit(limit).offset(offset)
    return list(session.scalars(stmt))


def list_top_rated_products(session: Session, *, limit: int) -> list[Product]:
    stmt = select(Product).order_by(Product.rating.desc(), Product.num_reviews.desc()).limit(limit)
    return list(session.scalars(stmt))


def update_product(session: Session, product: Product, **changes: Any) -> Product:
    """Apply non-``None`` changes to mutable product fields."""
    for field_name in UPDATABLE_FIELDS:
        value = changes.get(field_name)
        if value is not None:
            setattr(product, field_name, value)

    session.flush()
    session.refresh(product)
    return product


def set_product_rating(session: Session, product: Product, *, rating: float, num_reviews: int) -> Product:
    product.rating = rating
    product.num_reviews = num_reviews
    session.flush()
    return product


def delete_product(session: Session, product: Product) -> None:
    """Delete a product row."""
    session.delete(product)
    session.flush()
