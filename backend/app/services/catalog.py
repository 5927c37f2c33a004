"""Catalog Service — category and product management.

Invariants:
    - Category names are unique case-insensitively; create/rename conflicts are 409
    - Product.category_id resolves to an existing Category at creation and on reassignment (400 otherwise)
    - Product create is gated vendor-or-admin; update/delete additionally owner-or-admin
    - Optional product fields apply by definedness (price 0, inStock false, quantity 0 are values)

Design Decisions:
    - Role gate runs before the product lookup, owner check after: a customer gets 403
      without learning whether the product exists
    - Listing resolves category and vendor references in two batched queries
      instead of one query per product
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_control import Operation
from app.core.domain_types import CategoryId, ProductId, UserId
from app.core.errors import (
    BadRequestError,
    ConflictError,
    ErrorContext,
    ResourceNotFoundError,
)
from app.core.repository_protocols import CategoryStore, IdentityStore, ProductStore
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.services.guards import authorize, authorize_role, require_identifier

logger = logging.getLogger(__name__)


@dataclass
class ProductView:
    """Products plus the categories and vendors they reference, keyed by id."""
    products: list[Product]
    categories: dict[UUID, Category] = field(default_factory=dict)
    vendors: dict[UUID, User] = field(default_factory=dict)


class CatalogService:

    def __init__(
        self,
        db: AsyncSession,
        categories: CategoryStore,
        products: ProductStore,
        users: IdentityStore,
    ):
        self.db = db
        self.categories = categories
        self.products = products
        self.users = users

    # ─── Categories ──────────────────────────────────────────────

    async def list_categories(self) -> list[Category]:
        return await self.categories.list_all()

    async def get_category(self, raw_id: str) -> Category:
        category_id = require_identifier(raw_id, "Category")
        category = await self.categories.find_by_id(CategoryId(category_id))
        if not category:
            raise ResourceNotFoundError(
                "Category not found", ErrorContext(resource_id=str(category_id)),
            )
        return category

    async def create_category(
        self, actor: User, name: str | None, description: str | None,
    ) -> Category:
        authorize(actor, Operation.CREATE_CATEGORY)
        if not name or not name.strip() or not description or not description.strip():
            raise BadRequestError("Name and description are required")
        if await self.categories.find_by_name_ci(name):
            raise ConflictError("Category already exists")
        async with self._unique_write("Category already exists"):
            category = await self.categories.create(
                name=name.strip(), description=description.strip(),
            )
        logger.info("Category created", extra={"category_id": category.id})
        return category

    async def update_category(
        self, actor: User, raw_id: str, name: str | None, description: str | None,
    ) -> Category:
        authorize(actor, Operation.UPDATE_CATEGORY)
        category = await self.get_category(raw_id)
        if name and name.strip() and name.strip() != category.name:
            clash = await self.categories.find_by_name_ci(
                name, exclude_id=CategoryId(category.id),
            )
            if clash:
                raise ConflictError("Category name already exists")
            category.name = name.strip()
        if description and description.strip():
            category.description = description.strip()
        async with self._unique_write("Category name already exists"):
            await self.categories.save(category)
        return category

    async def delete_category(self, actor: User, raw_id: str) -> None:
        authorize(actor, Operation.DELETE_CATEGORY)
        category = await self.get_category(raw_id)
        category_id = category.id
        await self.categories.delete(category)
        await self.db.commit()
        logger.info("Category deleted", extra={"category_id": category_id})

    # ─── Products ────────────────────────────────────────────────

    async def list_products(
        self,
        raw_category_id: str | None = None,
        raw_vendor_id: str | None = None,
    ) -> ProductView:
        category_id = (
            CategoryId(require_identifier(raw_category_id, "Category"))
            if raw_category_id else None
        )
        vendor_id = (
            UserId(require_identifier(raw_vendor_id, "Vendor"))
            if raw_vendor_id else None
        )
        products = await self.products.list_products(
            category_id=category_id, vendor_id=vendor_id,
        )
        return await self._view(products)

    async def get_product(self, raw_id: str) -> ProductView:
        product = await self._get_product_or_404(raw_id)
        return await self._view([product])

    async def create_product(self, actor: User, fields: dict) -> Product:
        authorize(actor, Operation.CREATE_PRODUCT)
        if not fields.get("name") or fields.get("price") is None or not fields.get("category_id"):
            raise BadRequestError("Please fill all the required fields")
        fields["category_id"] = await self._resolve_category(fields["category_id"])
        fields["vendor_id"] = actor.id
        if fields.get("in_stock") is None:
            fields.pop("in_stock", None)
        if fields.get("quantity") is None:
            fields.pop("quantity", None)
        product = await self.products.create(fields)
        await self.db.commit()
        logger.info(
            "Product created",
            extra={"product_id": product.id, "user_id": actor.id},
        )
        return product

    async def update_product(
        self, actor: User, raw_id: str, changes: dict,
    ) -> Product:
        authorize_role(actor, Operation.UPDATE_PRODUCT)
        product = await self._get_product_or_404(raw_id)
        authorize(actor, Operation.UPDATE_PRODUCT, product.vendor_id)

        if changes.get("category_id") is not None:
            product.category_id = await self._resolve_category(changes["category_id"])
        if changes.get("name"):
            product.name = changes["name"]
        if changes.get("description"):
            product.description = changes["description"]
        for key in ("price", "in_stock", "quantity"):
            if changes.get(key) is not None:
                setattr(product, key, changes[key])

        await self.products.save(product)
        await self.db.commit()
        return product

    async def delete_product(self, actor: User, raw_id: str) -> None:
        authorize_role(actor, Operation.DELETE_PRODUCT)
        product = await self._get_product_or_404(raw_id)
        authorize(actor, Operation.DELETE_PRODUCT, product.vendor_id)
        product_id = product.id
        await self.products.delete(product)
        await self.db.commit()
        logger.info("Product deleted", extra={"product_id": product_id})

    # ─── Helpers ─────────────────────────────────────────────────

    async def _get_product_or_404(self, raw_id: str) -> Product:
        product_id = require_identifier(raw_id, "Product")
        product = await self.products.find_by_id(ProductId(product_id))
        if not product:
            raise ResourceNotFoundError(
                "Product not found", ErrorContext(resource_id=str(product_id)),
            )
        return product

    async def _resolve_category(self, raw_category_id: object) -> UUID:
        category_id = require_identifier(raw_category_id, "Category")
        if not await self.categories.find_by_id(CategoryId(category_id)):
            raise BadRequestError("Category does not exist")
        return category_id

    async def _view(self, products: list[Product]) -> ProductView:
        categories = await self.categories.find_many(
            [p.category_id for p in products if p.category_id],
        )
        vendors = await self.users.find_many(
            [p.vendor_id for p in products if p.vendor_id],
        )
        return ProductView(products=products, categories=categories, vendors=vendors)

    @asynccontextmanager
    async def _unique_write(self, message: str) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(message)
