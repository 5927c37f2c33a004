"""Account Service — registration, login, profile and user administration.

Invariants:
    - Username and email are globally unique (email compared lower-cased); violations are 409
    - The credential digest never leaves this module in a response-bound object
    - Role changes go through access_control.filter_role_change — non-admin role
      fields are dropped silently, other fields in the same request still apply
    - Deleting a user deletes their cart in the same transaction

Design Decisions:
    - Check-then-write for uniqueness gives precise messages; an IntegrityError on
      commit (concurrent registration) is still mapped to ConflictError
    - Registration may self-assign customer or vendor only; admin comes from an
      existing admin or the startup bootstrap
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_control import Operation, filter_role_change
from app.core.domain_types import DEFAULT_ROLE, SELF_ASSIGNABLE_ROLES, Role, UserId
from app.core.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    ErrorContext,
    ForbiddenError,
    ResourceNotFoundError,
)
from app.core.repository_protocols import CartStore, IdentityStore
from app.models.user import User
from app.services.guards import authorize, require_identifier
from app.services.security import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """A user plus a freshly issued bearer token."""
    user: User
    token: str


class AccountService:

    def __init__(
        self, db: AsyncSession, users: IdentityStore, carts: CartStore,
    ):
        self.db = db
        self.users = users
        self.carts = carts

    # ─── Public ──────────────────────────────────────────────────

    async def register(
        self, username: str, email: str, password: str, role: Role | None = None,
    ) -> AuthResult:
        requested = Role(role) if role else DEFAULT_ROLE
        if requested not in SELF_ASSIGNABLE_ROLES:
            raise ForbiddenError("Cannot self-register as admin")
        await self._ensure_unique(username=username, email=email)
        async with self._unique_write():
            user = await self.users.create(
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=requested,
            )
        logger.info("User registered", extra={"user_id": user.id})
        return AuthResult(user=user, token=issue_token(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self.users.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Invalid credentials")
        return AuthResult(user=user, token=issue_token(user.id))

    # ─── Authenticated ───────────────────────────────────────────

    async def get_profile(self, raw_user_id: str) -> User:
        return await self._get_user_or_404(raw_user_id)

    async def update_profile(
        self, actor: User, username: str | None, email: str | None,
    ) -> AuthResult:
        await self._apply_identity_fields(actor, username, email)
        async with self._unique_write():
            await self.users.save(actor)
        return AuthResult(user=actor, token=issue_token(actor.id))

    async def change_password(
        self, actor: User, current_password: str | None, new_password: str | None,
    ) -> None:
        if not current_password or not new_password:
            raise BadRequestError("Please provide current and new password")
        if not verify_password(current_password, actor.password_hash):
            raise BadRequestError("Current password is incorrect")
        actor.password_hash = hash_password(new_password)
        await self.users.save(actor)
        await self.db.commit()
        logger.info("Password changed", extra={"user_id": actor.id})

    async def delete_user(self, actor: User, raw_user_id: str) -> None:
        user_id = require_identifier(raw_user_id, "User")
        user = await self.users.find_by_id(UserId(user_id))
        if not user:
            raise ResourceNotFoundError("User not found")
        authorize(actor, Operation.DELETE_USER, user.id)
        await self.carts.delete_for_user(UserId(user.id))
        await self.users.delete(user)
        await self.db.commit()
        logger.info("User deleted", extra={"user_id": user_id})

    async def list_users(self, actor: User) -> list[User]:
        authorize(actor, Operation.LIST_USERS)
        return await self.users.list_all()

    async def update_user(
        self,
        actor: User,
        raw_user_id: str,
        username: str | None,
        email: str | None,
        role: Role | None,
    ) -> User:
        user_id = require_identifier(raw_user_id, "User")
        user = await self.users.find_by_id(UserId(user_id))
        if not user:
            raise ResourceNotFoundError("User not found")
        authorize(actor, Operation.UPDATE_USER, user.id)
        await self._apply_identity_fields(user, username, email)
        new_role = filter_role_change(Role(actor.role), role)
        if new_role is not None:
            user.role = new_role.value
        elif role is not None:
            logger.info(
                "Ignoring role change requested by non-admin",
                extra={"user_id": actor.id},
            )
        async with self._unique_write():
            await self.users.save(user)
        return user

    # ─── Helpers ─────────────────────────────────────────────────

    async def _get_user_or_404(self, raw_user_id: str) -> User:
        user_id = require_identifier(raw_user_id, "User")
        user = await self.users.find_by_id(UserId(user_id))
        if not user:
            raise ResourceNotFoundError(
                "User not found", ErrorContext(resource_id=str(user_id)),
            )
        return user

    async def _ensure_unique(
        self, username: str | None = None, email: str | None = None,
        exclude: User | None = None,
    ) -> None:
        if email:
            existing = await self.users.find_by_email(email)
            if existing and existing is not exclude:
                raise ConflictError("User already exists")
        if username:
            existing = await self.users.find_by_username(username)
            if existing and existing is not exclude:
                raise ConflictError("Username already taken")

    async def _apply_identity_fields(
        self, user: User, username: str | None, email: str | None,
    ) -> None:
        await self._ensure_unique(username=username, email=email, exclude=user)
        if username:
            user.username = username
        if email:
            user.email = email.strip().lower()

    @asynccontextmanager
    async def _unique_write(self) -> AsyncIterator[None]:
        """Flush+commit the enclosed writes; a uniqueness race becomes ConflictError."""
        try:
            yield
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Duplicate field value entered")
