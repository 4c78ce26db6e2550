"""Pydantic schemas for product payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field

from app.schemas.base import CamelModel
from app.validation.validators import ObjectIdField
from app.validation.validators import required_text

ProductNameText = required_text("Name is required.")
ImageText = required_text("Image is required.")
BrandText = required_text("Brand is required.")
CategoryText = required_text("Category is required.")
DescriptionText = required_text("Description is required.")
Price = Annotated[float, Field(ge=0)]
StockCount = Annotated[int, Field(ge=0)]


class ProductCreate(CamelModel):
    """Payload to create a product; ``image`` is a URL returned by the upload route."""

    name: ProductNameText
    image: ImageText
    brand: BrandText
    category: CategoryText
    description: DescriptionText
    price: Price = 0
    count_in_stock: StockCount = 0


class ProductUpdate(CamelModel):
    """Payload to update mutable product fields; omitted fields stay unchanged."""

    name: ProductNameText | None = None
    image: ImageText | None = None
    brand: BrandText | None = None
    category: CategoryText | None = None
    description: DescriptionText | None = None
    price: Price | None = None
    count_in_stock: StockCount | None = None


class Product(CamelModel):
    """Product response payload."""

    id: ObjectIdField
    user_id: ObjectIdField
    name: str
    image: str
    brand: str
    category: str
    description: str
    price: float
    count_in_stock: int
    rating: float
    num_reviews: int
    created_at: datetime
    updated_at: datetime


class ProductPage(CamelModel):
    """One page of a product listing."""

    products: list[Product]
    current_page: int
    number_of_pages: int
