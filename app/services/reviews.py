"""Service helpers for product review operations."""

from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.cache.manager import CacheManager
from app.core.errors import ConflictError
from app.core.errors import NotFoundError
from app.db.models.review import Review as ReviewModel
from app.db.models.user import User
from app.db.repository.products import set_product_rating
from app.db.repository.reviews import create_review
from app.db.repository.reviews import delete_review
from app.db.repository.reviews import get_review
from app.db.repository.reviews import list_reviews
from app.db.repository.reviews import rating_summary
from app.db.repository.reviews import review_exists
from app.db.repository.reviews import update_review
from app.schemas.review import Review
from app.schemas.review import ReviewCreate
from app.schemas.review import ReviewUpdate
from app.services.auth import ensure_owner_or_admin
from app.services.products import invalidate_product_cache
from app.services.products import load_product

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "Product already reviewed"


def _serialize(review: ReviewModel) -> dict[str, Any]:
    return Review.model_validate(review).to_json()


def _refresh_product_rating(session: Session, cache: CacheManager, product_id: ObjectId) -> None:
    product = load_product(session, product_id)
    average, count = rating_summary(session, product_id)
    set_product_rating(session, product, rating=round(average, 2), num_reviews=count)
    invalidate_product_cache(cache, product_id)


def _load_review(session: Session, review_id: ObjectId) -> ReviewModel:
    review = get_review(session, review_id)
    if review is None:
        raise NotFoundError("Review")
    return review


def create_review_service(
    session: Session,
    cache: CacheManager,
    user: User,
    payload: ReviewCreate,
) -> dict[str, Any]:
    """Add ``user``'s review of a product and refresh the product rating."""
    load_product(session, payload.product_id)
    if review_exists(session, user_id=user.id, product_id=payload.product_id):
        raise ConflictError(ALREADY_REVIEWED)

    try:
        review = create_review(
            session,
            user_id=user.id,
            product_id=payload.product_id,
            name=user.name,
            rating=payload.rating,
            comment=payload.comment,
        )
        _refresh_product_rating(session, cache, payload.product_id)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(ALREADY_REVIEWED) from None

    logger.info("User %s reviewed product %s", user.id, payload.product_id)
    return _serialize(review)


def list_product_reviews_service(session: Session, product_id: ObjectId) -> list[dict[str, Any]]:
    return [_serialize(review) for review in list_reviews(session, product_id=product_id)]


def list_reviews_service(session: Session) -> list[dict[str, Any]]:
    return [_serialize(review) for review in list_reviews(session)]


def update_review_service(
    session: Session,
    cache: CacheManager,
    user: User,
    review_id: ObjectId,
    payload: ReviewUpdate,
) -> dict[str, Any]:
    """Edit a review owned by ``user`` (or any review, for administrators)."""
    review = _load_review(session, review_id)
    ensure_owner_or_admin(user, review.user_id, "review")
    review = update_review(session, review, rating=payload.rating, comment=payload.comment)
    _refresh_product_rating(session, cache, review.product_id)
    session.commit()
    return _serialize(review)


def delete_review_service(
    session: Session,
    cache: CacheManager,
    user: User,
    review_id: ObjectId,
) -> None:
    review = _load_review(session, review_id)
    ensure_owner_or_admin(user, review.user_id, "review")
    product_id = review.product_id
    delete_review(session, review)
    _refresh_product_rating(session, cache, product_id)
    session.commit()
    logger.info("Deleted review %s", review_id)
