"""Cart Reconciler — applies cart mutations against the persisted cart with compare-and-swap.

Invariants:
    - One cart per user, created lazily by the first add; clear empties but never deletes
    - Every mutation: read cart → pure transition (core/cart_reconcile.py) → versioned write
    - A stale write (StaleDataError) or lost create race (IntegrityError on user_id)
      rolls back and re-applies on fresh state, up to cart_max_attempts times
    - Reads never fail for a missing cart: get() returns an empty synthetic view
    - Product resolution (name, price, description) is presentation only; stored
      line items keep bare product ids

Design Decisions:
    - Optimistic concurrency over per-user locks: works across processes without
      a lock service, and the transition is pure so re-applying it is safe
    - Exhausted retries surface as ConcurrencyError (409) instead of silently
      dropping the caller's update
"""

import logging
from dataclasses import dataclass, field
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.cart_reconcile import (
    CartFailure,
    CartFailureKind,
    CartResult,
    apply_add,
    apply_clear,
    apply_remove,
    apply_update,
    check_update_arguments,
)
from app.core.domain_types import LineItem, ProductId, UserId
from app.core.errors import (
    BadRequestError,
    ConcurrencyError,
    ErrorContext,
    ResourceNotFoundError,
    StorefrontError,
)
from app.core.identifiers import parse_identifier
from app.core.repository_protocols import CartStore, ProductStore
from app.models.cart import Cart
from app.models.product import Product
from app.services.guards import require_identifier

logger = logging.getLogger(__name__)

Transition = Callable[[list[LineItem]], CartResult]


@dataclass
class CartView:
    """A cart (or its synthetic empty stand-in) plus the products its items reference."""
    user_id: UUID
    cart: Cart | None
    products: dict[UUID, Product] = field(default_factory=dict)

    @property
    def items(self) -> list[LineItem]:
        return list(self.cart.products) if self.cart else []


def _failure_to_error(failure: CartFailure, user_id: UUID) -> StorefrontError:
    context = ErrorContext(user_id=str(user_id))
    if failure.kind is CartFailureKind.ITEM_NOT_IN_CART:
        return ResourceNotFoundError(failure.message, context)
    return BadRequestError(failure.message, context)


class CartReconciler:
    """Cart operations for one authenticated user per call."""

    def __init__(
        self,
        db: AsyncSession,
        carts: CartStore,
        products: ProductStore,
        max_attempts: int = 3,
    ):
        self.db = db
        self.carts = carts
        self.products = products
        self.max_attempts = max(1, max_attempts)

    async def get(self, user_id: UserId) -> CartView:
        cart = await self.carts.find_by_user(user_id)
        return await self._view(user_id, cart)

    async def add(
        self, user_id: UserId, product_id: str | None, quantity: int | None = None,
    ) -> CartView:
        if not product_id:
            raise BadRequestError("Please provide productId")
        parsed = require_identifier(product_id, "Product")
        product = await self.products.find_by_id(ProductId(parsed))
        if not product:
            raise ResourceNotFoundError(
                "Product not found", ErrorContext(resource_id=str(parsed)),
            )
        cart = await self._mutate(
            user_id,
            lambda items: apply_add(items, str(parsed), quantity),
            create_if_missing=True,
        )
        logger.info(
            "Product added to cart",
            extra={"user_id": user_id, "product_id": parsed},
        )
        return await self._view(user_id, cart)

    async def update(
        self, user_id: UserId, product_id: str | None, quantity: int | None,
    ) -> CartView:
        failure = check_update_arguments(product_id, quantity)
        if failure:
            raise _failure_to_error(failure, user_id)
        require_identifier(product_id, "Product")
        cart = await self._mutate(
            user_id,
            lambda items: apply_update(items, product_id, quantity),
        )
        return await self._view(user_id, cart)

    async def remove(self, user_id: UserId, product_id: str | None) -> CartView:
        if not product_id:
            raise BadRequestError("Please provide productId")
        require_identifier(product_id, "Product")
        cart = await self._mutate(
            user_id, lambda items: apply_remove(items, product_id),
        )
        return await self._view(user_id, cart)

    async def clear(self, user_id: UserId) -> CartView:
        cart = await self._mutate(user_id, apply_clear)
        return await self._view(user_id, cart)

    async def _mutate(
        self,
        user_id: UserId,
        transition: Transition,
        create_if_missing: bool = False,
    ) -> Cart:
        """Read-transition-write with optimistic retry. Returns the committed cart."""
        for attempt in range(1, self.max_attempts + 1):
            cart = await self.carts.find_by_user(user_id)
            if cart is None and not create_if_missing:
                raise ResourceNotFoundError(
                    "Cart not found", ErrorContext(user_id=str(user_id)),
                )
            items, failure = transition(list(cart.products) if cart else [])
            if failure:
                raise _failure_to_error(failure, user_id)
            try:
                if cart is None:
                    cart = await self.carts.create(user_id, items)
                else:
                    cart = await self.carts.replace_items(cart, items)
                await self.db.commit()
                return cart
            except (StaleDataError, IntegrityError) as e:
                await self.db.rollback()
                logger.warning(
                    f"Concurrent cart write detected: {type(e).__name__}",
                    extra={"user_id": user_id, "attempt": attempt},
                )
        raise ConcurrencyError(
            "Cart was modified concurrently, please retry",
            ErrorContext(user_id=str(user_id)),
        )

    async def _view(self, user_id: UUID, cart: Cart | None) -> CartView:
        view = CartView(user_id=user_id, cart=cart)
        ids = [parse_identifier(item["product_id"]) for item in view.items]
        view.products = await self.products.find_many([i for i in ids if i])
        return view
