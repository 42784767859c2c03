"""
Shared pytest fixtures for all tests.

Provides mock sessions, an in-memory SQLite database, the ASGI application
wired to that database and helpers to create users and catalog data.
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Ensure test environment before any storefront import reads the settings
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-storefront-sessions")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CART_BACKEND"] = "memory"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ.setdefault("PRODUCT_IMAGES_DIR", tempfile.mkdtemp(prefix="storefront-images-"))

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from storefront.core.app_factory import create_app  # noqa: E402
from storefront.database.async_db import (  # noqa: E402
    create_async_database_engine,
    create_session_factory,
    get_async_db,
)
from storefront.database.init_database import create_tables, seed_roles  # noqa: E402
from storefront.models.db import ROLE_ADMIN, ROLE_USER, Category, Product, User  # noqa: E402
from storefront.repositories import InMemoryCartStore, RoleRepository  # noqa: E402
from storefront.services.token_service import TokenService  # noqa: E402

DEFAULT_PASSWORD = "s3cret-pass"


# ============================================================================
# MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_async_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    return session


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database with tables and built-in roles."""
    engine = create_async_database_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    factory = create_session_factory(engine)
    async with factory() as session:
        await seed_roles(session)
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for repository tests; rolled back after the test."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def cart_store() -> InMemoryCartStore:
    return InMemoryCartStore(ttl_seconds=3600)


@pytest.fixture
def app(session_factory, cart_store) -> FastAPI:
    """Application wired to the test database and an isolated cart store."""
    application = create_app(cart_store=cart_store)

    async def override_get_async_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_async_db] = override_get_async_db
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# ============================================================================
# DATA HELPERS
# ============================================================================


@pytest.fixture
def create_user(session_factory):
    """Factory fixture: persist a user with the given authorities."""

    async def _create_user(
        email: str = "customer@mail.com",
        password: str | None = DEFAULT_PASSWORD,
        roles: tuple[str, ...] = (ROLE_USER,),
        first_name: str = "Test",
    ) -> User:
        async with session_factory() as session:
            role_repository = RoleRepository(session)
            user = User(
                first_name=first_name,
                last_name="User",
                email=email,
                password_hash=TokenService().get_password_hash(password) if password else None,
                roles=[await role_repository.find_by_name(name) for name in roles],
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _create_user


@pytest.fixture
def create_admin(create_user):
    async def _create_admin(email: str = "admin@mail.com") -> User:
        return await create_user(email=email, roles=(ROLE_ADMIN, ROLE_USER), first_name="Admin")

    return _create_admin


@pytest.fixture
def create_product(session_factory):
    """Factory fixture: persist a product (and its category when needed)."""

    async def _create_product(
        name: str = "Green Tea",
        price: float = 4.5,
        category: Category | None = None,
        category_name: str = "Drinks",
    ) -> Product:
        async with session_factory() as session:
            if category is None:
                category = Category(name=category_name)
                session.add(category)
                await session.flush()
            product = Product(
                name=name,
                price=price,
                weight=0.25,
                description=f"{name} description",
                category_id=category.id,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product

    return _create_product


@pytest.fixture
def login(client):
    """Log the shared client in through the form login endpoint."""

    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> httpx.Response:
        response = await client.post("/login", data={"email": email, "password": password})
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        return response

    return _login
