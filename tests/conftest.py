"""
Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite, StaticPool so
every session sees the same connection) that replaces the get_db
dependency. Environment variables are set before the app is imported so
Settings picks them up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENV_MODE"] = "development"

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.dependencies import reset_security_components  # noqa: E402
from app.main import app  # noqa: E402
from tests.helpers import add_restaurant, register_user  # noqa: E402


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    reset_security_components()
    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def admin(client):
    return await register_user(client, "admin", "Admin")


@pytest.fixture
async def owner(client):
    return await register_user(client, "owner", "RestaurantOwner")


@pytest.fixture
async def other_owner(client):
    return await register_user(client, "other-owner", "RestaurantOwner")


@pytest.fixture
async def customer(client):
    return await register_user(client, "customer", "Customer")


@pytest.fixture
async def other_customer(client):
    return await register_user(client, "other-customer", "Customer")


@pytest.fixture
async def restaurant(session_maker, owner):
    return await add_restaurant(
        session_maker,
        owner["id"],
        menu=[("Margherita", "10.50"), ("Garlic Bread", "4.25")],
    )


@pytest.fixture
async def other_restaurant(session_maker, other_owner):
    return await add_restaurant(
        session_maker,
        other_owner["id"],
        name="Sakura",
        menu=[("Ramen", "13.00")],
    )
