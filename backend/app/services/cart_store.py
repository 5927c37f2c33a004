"""Cart Store — SQLAlchemy implementation of the CartStore protocol.

Invariants:
    - find_by_user always reads the current row (populate_existing), so a retry
      after a stale write sees the winner's version
    - replace_items assigns a NEW list; flush issues UPDATE ... WHERE version = :seen
    - Methods flush, never commit (the reconciler owns the transaction boundary)
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import LineItem, UserId
from app.models.cart import Cart


class SqlCartStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_user(self, user_id: UserId) -> Cart | None:
        result = await self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: UserId, items: list[LineItem]) -> Cart:
        cart = Cart(user_id=user_id, products=list(items))
        self.db.add(cart)
        await self.db.flush()
        return cart

    async def replace_items(self, cart: Cart, items: list[LineItem]) -> Cart:
        cart.products = list(items)
        await self.db.flush()
        return cart

    async def delete_for_user(self, user_id: UserId) -> None:
        await self.db.execute(delete(Cart).where(Cart.user_id == user_id))
