"""Service test fixtures — async DB, FastAPI test client, and seeded users.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for code paths that bypass get_db (readiness, bootstrap)
    - Seeded users are inserted directly; tokens come from issue_token, not /login

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features are not exercised here)
    - make_user is a factory fixture so one test can seed several vendors
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.core.domain_types import Role
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.services.security import hash_password, issue_token
import app.infrastructure.database as db_module
from app.main import app

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user with the given role and return it."""
    counter = {"n": 0}

    async def _make(role: Role = Role.CUSTOMER, username: str | None = None,
                    email: str | None = None, password: str = DEFAULT_PASSWORD) -> User:
        counter["n"] += 1
        name = username or f"{role.value}{counter['n']}"
        user = User(
            username=name,
            email=email or f"{name}@example.com",
            password_hash=hash_password(password),
            role=role.value,
        )
        test_db.add(user)
        await test_db.commit()
        return user

    return _make


@pytest.fixture
def password() -> str:
    return DEFAULT_PASSWORD


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user.id)}"}


@pytest.fixture
async def customer(make_user):
    return await make_user(Role.CUSTOMER, username="carol")


@pytest.fixture
async def vendor(make_user):
    return await make_user(Role.VENDOR, username="victor")


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN, username="ada")


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
async def category(test_db):
    cat = Category(name="Electronics", description="Gadgets and devices")
    test_db.add(cat)
    await test_db.commit()
    return cat


@pytest.fixture
def make_product(test_db, category, vendor):
    """Factory: insert a product owned by `owner` (default: the vendor fixture)."""

    async def _make(name: str = "Headphones", price: float = 99.5,
                    owner: User | None = None, **fields) -> Product:
        product = Product(
            name=name, price=price,
            description=fields.pop("description", "Over-ear"),
            category_id=fields.pop("category_id", category.id),
            vendor_id=(owner or vendor).id,
            **fields,
        )
        test_db.add(product)
        await test_db.commit()
        return product

    return _make


@pytest.fixture
async def product(make_product):
    return await make_product()
