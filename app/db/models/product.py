"""SQLAlchemy model for catalog products."""

from __future__ import annotations

from datetime import datetime

from bson import ObjectId
from sqlalchemy import CheckConstraint
from sqlalchemy import DateTime
from sqlalchemy import Float
from sqlalchemy import ForeignKey
from sqlalchemy import Integer
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from app.db.models.user import Base
from app.db.models.user import utcnow
from app.db.types import ObjectIdType


class Product(Base):
    """Catalog product created by an administrator."""

    __tablename__ = "products"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_products"),
        CheckConstraint("price >= 0", name="ck_products_price"),
        CheckConstraint("count_in_stock >= 0", name="ck_products_count_in_stock"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_products_rating"),
    )

    id: Mapped[ObjectId] = mapped_column(ObjectIdType, primary_key=True, default=ObjectId)
    user_id: Mapped[ObjectId] = mapped_column(
        ObjectIdType,
        ForeignKey("users.id", name="fk_products_user_id_users"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image: Mapped[str] = mapped_column(String(2048), nullable=False)
    brand: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    count_in_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    num_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
