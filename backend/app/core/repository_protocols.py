"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Lookups take parsed identifiers; syntactic validation happens before the call

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Store protocols are runtime_checkable so the wiring in api/dependencies.py
      can be asserted structurally in tests
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol, runtime_checkable
from uuid import UUID

from app.core.domain_types import CategoryId, LineItem, ProductId, Role, UserId


class UserLike(Protocol):
    """Structural contract for User records passed to access control and serializers."""
    id: UUID
    username: str
    email: str
    password_hash: str
    role: str


class CategoryLike(Protocol):
    id: UUID
    name: str
    description: str


class ProductLike(Protocol):
    id: UUID
    name: str
    price: float
    description: str | None
    category_id: UUID | None
    vendor_id: UUID | None
    in_stock: bool
    quantity: int


class CartLike(Protocol):
    id: UUID
    user_id: UUID
    products: list[LineItem]
    version: int


@runtime_checkable
class IdentityStore(Protocol):
    """Contract for user persistence — implemented by shell."""
    async def find_by_id(self, user_id: UserId) -> UserLike | None: ...
    async def find_by_email(self, email: str) -> UserLike | None: ...
    async def find_by_username(self, username: str) -> UserLike | None: ...
    async def find_many(self, user_ids: list[UUID]) -> dict[UUID, UserLike]: ...
    async def list_all(self) -> list[UserLike]: ...
    async def create(
        self, username: str, email: str, password_hash: str, role: Role,
    ) -> UserLike: ...
    async def save(self, user: UserLike) -> UserLike: ...
    async def delete(self, user: UserLike) -> None: ...


@runtime_checkable
class CategoryStore(Protocol):
    """Contract for category persistence — implemented by shell."""
    async def find_by_id(self, category_id: CategoryId) -> CategoryLike | None: ...
    async def find_many(
        self, category_ids: list[UUID],
    ) -> dict[UUID, CategoryLike]: ...
    async def find_by_name_ci(
        self, name: str, exclude_id: CategoryId | None = None,
    ) -> CategoryLike | None: ...
    async def list_all(self) -> list[CategoryLike]: ...
    async def create(self, name: str, description: str) -> CategoryLike: ...
    async def save(self, category: CategoryLike) -> CategoryLike: ...
    async def delete(self, category: CategoryLike) -> None: ...


@runtime_checkable
class ProductStore(Protocol):
    """Contract for product persistence — implemented by shell."""
    async def find_by_id(self, product_id: ProductId) -> ProductLike | None: ...
    async def find_many(self, product_ids: list[UUID]) -> dict[UUID, ProductLike]: ...
    async def list_products(
        self,
        category_id: CategoryId | None = None,
        vendor_id: UserId | None = None,
    ) -> list[ProductLike]: ...
    async def create(self, fields: dict) -> ProductLike: ...
    async def save(self, product: ProductLike) -> ProductLike: ...
    async def delete(self, product: ProductLike) -> None: ...


@runtime_checkable
class CartStore(Protocol):
    """Contract for cart persistence — implemented by shell."""
    async def find_by_user(self, user_id: UserId) -> CartLike | None: ...
    async def create(self, user_id: UserId, items: list[LineItem]) -> CartLike: ...
    async def replace_items(self, cart: CartLike, items: list[LineItem]) -> CartLike: ...
    async def delete_for_user(self, user_id: UserId) -> None: ...
