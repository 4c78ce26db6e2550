"""Pydantic schemas for review payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

from app.schemas.base import CamelModel
from app.validation.validators import ObjectIdField
from app.validation.validators import required_text

RATING_MIN = 1
RATING_MAX = 5

CommentText = required_text("Comment is required.")


def _check_rating(value: float) -> float:
    if not RATING_MIN <= value <= RATING_MAX:
        raise PydanticCustomError(
            "rating_out_of_range",
            "Rating must be between {min} and {max}.",
            {"min": RATING_MIN, "max": RATING_MAX},
        )
    return value


Rating = Annotated[float, AfterValidator(_check_rating)]


class ReviewCreate(CamelModel):
    """Payload to review a product."""

    product_id: ObjectIdField
    rating: Rating
    comment: CommentText


class ReviewUpdate(CamelModel):
    """Payload to edit a review."""

    rating: Rating | None = None
    comment: CommentText | None = None


class Review(CamelModel):
    """Review response payload."""

    id: ObjectIdField
    user_id: ObjectIdField
    product_id: ObjectIdField
    name: str
    rating: float
    comment: str
    created_at: datetime
    updated_at: datetime
