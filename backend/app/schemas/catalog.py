"""Catalog Schemas — category and product payloads.

Invariants:
    - price >= 0 and quantity >= 0 when supplied
    - Identifiers stay strings here; the service validates their format (400 on malformed)
    - Required-field checks live in the service so messages match the domain wording
"""

from pydantic import Field

from app.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    name: str | None = Field(None, max_length=100)
    description: str | None = None


class CategoryUpdate(CategoryCreate):
    pass


class ProductCreate(CamelModel):
    name: str | None = Field(None, max_length=200)
    price: float | None = Field(None, ge=0)
    description: str | None = None
    category_id: str | None = None
    in_stock: bool | None = None
    quantity: int | None = Field(None, ge=0)


class ProductUpdate(ProductCreate):
    pass
