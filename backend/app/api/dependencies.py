"""Request Dependencies — bearer-token authentication and service wiring.

Invariants:
    - Every protected request re-resolves the token subject to a live User row;
      a token for a deleted user fails with 401, never a stale identity
    - Token contents and header values are never logged
    - This module is the one place Sql*Store implementations are chosen; services
      only see the store protocols from core/repository_protocols.py
    - All stores of one request share the request's AsyncSession (get_db is cached per request)
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.domain_types import UserId
from app.core.errors import AuthenticationError
from app.core.repository_protocols import (
    CartStore, CategoryStore, IdentityStore, ProductStore,
)
from app.infrastructure.database import get_db
from app.models.user import User
from app.services.accounts import AccountService
from app.services.cart_reconciler import CartReconciler
from app.services.cart_store import SqlCartStore
from app.services.catalog import CatalogService
from app.services.catalog_store import SqlCategoryStore, SqlProductStore
from app.services.identity_store import SqlIdentityStore
from app.services.security import verify_token

logger = logging.getLogger(__name__)


# ─── Stores ──────────────────────────────────────────────────────

def get_identity_store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    return SqlIdentityStore(db)


def get_category_store(db: AsyncSession = Depends(get_db)) -> CategoryStore:
    return SqlCategoryStore(db)


def get_product_store(db: AsyncSession = Depends(get_db)) -> ProductStore:
    return SqlProductStore(db)


def get_cart_store(db: AsyncSession = Depends(get_db)) -> CartStore:
    return SqlCartStore(db)


# ─── Services ────────────────────────────────────────────────────

def get_account_service(
    db: AsyncSession = Depends(get_db),
    users: IdentityStore = Depends(get_identity_store),
    carts: CartStore = Depends(get_cart_store),
) -> AccountService:
    return AccountService(db, users=users, carts=carts)


def get_catalog_service(
    db: AsyncSession = Depends(get_db),
    categories: CategoryStore = Depends(get_category_store),
    products: ProductStore = Depends(get_product_store),
    users: IdentityStore = Depends(get_identity_store),
) -> CatalogService:
    return CatalogService(db, categories=categories, products=products, users=users)


def get_cart_reconciler(
    db: AsyncSession = Depends(get_db),
    carts: CartStore = Depends(get_cart_store),
    products: ProductStore = Depends(get_product_store),
    settings: Settings = Depends(get_settings),
) -> CartReconciler:
    return CartReconciler(
        db, carts=carts, products=products,
        max_attempts=settings.cart_max_attempts,
    )


# ─── Authentication ──────────────────────────────────────────────

def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Not authorized, no token")
    token = token.strip()
    if not token:
        raise AuthenticationError("Not authorized, token missing")
    return token


async def get_current_user(
    request: Request, users: IdentityStore = Depends(get_identity_store),
) -> User:
    """Resolve the Authorization header to the acting user or raise 401."""
    user_id = verify_token(_bearer_token(request))
    user = await users.find_by_id(UserId(user_id))
    if not user:
        logger.warning("Token subject no longer exists", extra={"user_id": user_id})
        raise AuthenticationError("Not authorized, user not found")
    return user
