"""Repository primitives for product reviews."""

from __future__ import annotations

from bson import ObjectId
from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.review import Review


def create_review(
    session: Session,
    *,
    user_id: ObjectId,
    product_id: ObjectId,
    name: str,
    rating: float,
    comment: str,
) -> Review:
    """Create and return a review row."""
    review = Review(
        user_id=user_id,
        product_id=product_id,
        name=name,
        rating=rating,
        comment=comment,
    )
    session.add(review)
    session.flush()
    session.refresh(review)
    return review


def get_review(session: Session, review_id: ObjectId) -> Review | None:
    """Fetch a review by id."""
    return session.get(Review, review_id)


def review_exists(session: Session, *, user_id: ObjectId, product_id: ObjectId) -> bool:
    stmt = (
        select(Review.id)
        .where(Review.user_id == user_id)
        .where(Review.product_id == product_id)
        .limit(1)
    )
    return session.scalars(stmt).first() is not None


def list_reviews(session: Session, *, product_id: ObjectId | None = None) -> list[Review]:
    """List reviews, newest first, optionally scoped to one product."""
    stmt = select(Review)
    if product_id is not None:
        stmt = stmt.where(Review.product_id == product_id)
    stmt = stmt.order_by(Review.created_at.desc())
    return list(session.scalars(stmt))


def rating_summary(session: Session, product_id: ObjectId) -> tuple[float, int]:
    """Return ``(average rating, review count)`` for a product."""
    stmt = select(func.avg(Review.rating), func.count(Review.id)).where(Review.product_id == product_id)
    average, count = session.execute(stmt).one()
    return float(average or 0), int(count or 0)


def update_review(
    session: Session,
    review: Review,
    *,
    rating: float | None = None,
    comment: str | None = None,
) -> Review:
    """Update mutable review fields."""
    if rating is not None:
        review.rating = rating
    if comment is not None:
        review.comment = comment

    session.flush()
    session.refresh(review)
    return review


def delete_review(session: Session, review: Review) -> None:
    """Delete a review row."""
    session.delete(review)
    session.flush()


def delete_reviews_for_product(session: Session, product_id: ObjectId) -> int:
    """Delete every review of a product; returns the number removed."""
    reviews = list_reviews(session, product_id=product_id)
    for review in reviews:
        session.delete(review)
    session.flush()
    return len(reviews)
