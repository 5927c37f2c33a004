"""Identity Store — SQLAlchemy implementation of the IdentityStore protocol.

Invariants:
    - Emails are looked up and stored lower-cased
    - Methods flush, never commit (services own the transaction boundary)
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import Role, UserId
from app.models.user import User


class SqlIdentityStore:
    """Users table access over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: UserId) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower()),
        )
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()

    async def find_many(self, user_ids: list[UUID]) -> dict[UUID, User]:
        if not user_ids:
            return {}
        result = await self.db.execute(
            select(User).where(User.id.in_(set(user_ids))),
        )
        return {u.id: u for u in result.scalars().all()}

    async def list_all(self) -> list[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc()),
        )
        return list(result.scalars().all())

    async def create(
        self, username: str, email: str, password_hash: str, role: Role,
    ) -> User:
        user = User(
            username=username,
            email=email.strip().lower(),
            password_hash=password_hash,
            role=Role(role).value,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def save(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.flush()
