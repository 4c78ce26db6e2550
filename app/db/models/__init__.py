"""Model module imports for SQLAlchemy metadata registration."""

from app.db.models.order import Order
from app.db.models.product import Product
from app.db.models.review import Review
from app.db.models.user import Base
from app.db.models.user import User

__all__ = [
    "Base",
    "Order",
    "Product",
    "Review",
    "User",
]
