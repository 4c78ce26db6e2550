"""Service helpers for product API operations."""

from __future__ import annotations

import logging
import math
from typing import Any

from bson import ObjectId
from sqlalchemy.orm import Session

from app.cache.manager import CacheManager
from app.core.config import PRODUCTS_PER_PAGE
from app.core.config import TOP_RATED_PRODUCTS_LIMIT
from app.core.errors import NotFoundError
from app.core.result import Success
from app.db.models.product import Product as ProductModel
from app.db.models.user import User
from app.db.repository.products import count_products
from app.db.repository.products import create_product
from app.db.repository.products import delete_product
from app.db.repository.products import get_product
from app.db.repository.products import list_products
from app.db.repository.products import list_top_rated_products
from app.db.repository.products import update_product
from app.db.repository.reviews import delete_reviews_for_product
from app.schemas.product import Product
from app.schemas.product import ProductCreate
from app.schemas.product import ProductPage
from app.schemas.product import ProductUpdate

logger = logging.getLogger(__name__)

TOP_RATED_CACHE_KEY = "top-rated"


def serialize_product(product: ProductModel) -> dict[str, Any]:
    return Product.model_validate(product).to_json()


def invalidate_product_cache(cache: CacheManager, product_id: ObjectId) -> None:
    cache.delete(keys=[str(product_id), TOP_RATED_CACHE_KEY])


def load_product(session: Session, product_id: ObjectId) -> ProductModel:
    """Fetch a product or raise not found."""
    product = get_product(session, product_id)
    if product is None:
        raise NotFoundError("Product")
    return product


def get_product_service(session: Session, cache: CacheManager, product_id: ObjectId) -> dict[str, Any]:
    """Return one product, served from the product cache when present."""
    cached = cache.get(key=str(product_id))
    if isinstance(cached, Success):
        return cached.data

    data = serialize_product(load_product(session, product_id))
    cache.set(key=str(product_id), value=data)
    return data


def list_products_service(session: Session, *, keyword: str = "", current_page: int = 1) -> ProductPage:
    """Return one page of products whose name contains ``keyword``."""
    total = count_products(session, keyword=keyword)
    products = list_products(
        session,
        keyword=keyword,
        limit=PRODUCTS_PER_PAGE,
        offset=(current_page - 1) * PRODUCTS_PER_PAGE,
    )
    return ProductPage(
        products=[Product.model_validate(product) for product in products],
        current_page=current_page,
        number_of_pages=math.ceil(total / PRODUCTS_PER_PAGE),
    )


def get_top_rated_service(session: Session, cache: CacheManager) -> list[dict[str, Any]]:
    cached = cache.get(key=TOP_RATED_CACHE_KEY)
    if isinstance(cached, Success):
        return cached.data

    data = [serialize_product(product) for product in list_top_rated_products(session, limit=TOP_RATED_PRODUCTS_LIMIT)]
    cache.set(key=TOP_RATED_CACHE_KEY, value=data)
    return data


def create_product_service(
    session: Session,
    cache: CacheManager,
    user: User,
    payload: ProductCreate,
) -> dict[str, Any]:
    """Create and persist a new product owned by ``user``."""
    product = create_product(session, user_id=user.id, **payload.model_dump())
    session.commit()
    invalidate_product_cache(cache, product.id)
    logger.info("Created product %s", product.id)
    return serialize_product(product)


def update_product_service(
    session: Session,
    cache: CacheManager,
    product_id: ObjectId,
    payload: ProductUpdate,
) -> dict[str, Any]:
    """Update mutable product fields for an existing product."""
    product = load_product(session, product_id)
    product = update_product(session, product, **payload.model_dump(exclude_none=True))
    session.commit()
    invalidate_product_cache(cache, product_id)
    return serialize_product(product)


def delete_product_service(session: Session, cache: CacheManager, product_id: ObjectId) -> None:
    """Delete a product together with its reviews."""
    product = load_product(session, product_id)
    delete_reviews_for_product(session, product_id)
    delete_product(session, product)
    session.commit()
    invalidate_product_cache(cache, product_id)
    logger.info("Deleted product %s", product_id)
