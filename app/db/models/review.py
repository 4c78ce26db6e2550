"""SQLAlchemy model for product reviews."""

from __future__ import annotations

from datetime import datetime

from bson import ObjectId
from sqlalchemy import CheckConstraint
from sqlalchemy import DateTime
from sqlalchemy import Float
from sqlalchemy import ForeignKey
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from app.db.models.user import Base
from app.db.models.user import utcnow
from app.db.types import ObjectIdType


class Review(Base):
    """One user's rating of one product."""

    __tablename__ = "reviews"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_reviews"),
        UniqueConstraint("user_id", "product_id", name="uq_reviews_user_id_product_id"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id: Mapped[ObjectId] = mapped_column(ObjectIdType, primary_key=True, default=ObjectId)
    user_id: Mapped[ObjectId] = mapped_column(
        ObjectIdType,
        ForeignKey("users.id", name="fk_reviews_user_id_users"),
        nullable=False,
    )
    product_id: Mapped[ObjectId] = mapped_column(
        ObjectIdType,
        ForeignKey("products.id", name="fk_reviews_product_id_products", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
