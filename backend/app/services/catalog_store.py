"""Catalog Store — SQLAlchemy implementations of the CategoryStore and ProductStore protocols.

Invariants:
    - Category name lookups compare lower(name) — matches the functional unique index
    - find_many returns only ids that exist; missing ids are simply absent
    - Methods flush, never commit (services own the transaction boundary)
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import CategoryId, ProductId, UserId
from app.models.category import Category
from app.models.product import Product


class SqlCategoryStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, category_id: CategoryId) -> Category | None:
        result = await self.db.execute(
            select(Category).where(Category.id == category_id),
        )
        return result.scalar_one_or_none()

    async def find_many(self, category_ids: list[UUID]) -> dict[UUID, Category]:
        if not category_ids:
            return {}
        result = await self.db.execute(
            select(Category).where(Category.id.in_(set(category_ids))),
        )
        return {c.id: c for c in result.scalars().all()}

    async def find_by_name_ci(
        self, name: str, exclude_id: CategoryId | None = None,
    ) -> Category | None:
        query = select(Category).where(
            func.lower(Category.name) == name.strip().lower(),
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def list_all(self) -> list[Category]:
        result = await self.db.execute(
            select(Category).order_by(Category.created_at.desc()),
        )
        return list(result.scalars().all())

    async def create(self, name: str, description: str) -> Category:
        category = Category(name=name, description=description)
        self.db.add(category)
        await self.db.flush()
        return category

    async def save(self, category: Category) -> Category:
        self.db.add(category)
        await self.db.flush()
        return category

    async def delete(self, category: Category) -> None:
        await self.db.delete(category)
        await self.db.flush()


class SqlProductStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, product_id: ProductId) -> Product | None:
        result = await self.db.execute(
            select(Product).where(Product.id == product_id),
        )
        return result.scalar_one_or_none()

    async def find_many(self, product_ids: list[UUID]) -> dict[UUID, Product]:
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(Product).where(Product.id.in_(set(product_ids))),
        )
        return {p.id: p for p in result.scalars().all()}

    async def list_products(
        self,
        category_id: CategoryId | None = None,
        vendor_id: UserId | None = None,
    ) -> list[Product]:
        query = select(Product).order_by(Product.created_at.desc())
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if vendor_id is not None:
            query = query.where(Product.vendor_id == vendor_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, fields: dict) -> Product:
        product = Product(**fields)
        self.db.add(product)
        await self.db.flush()
        return product

    async def save(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        return product

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self.db.flush()
