"""
Centralized Test Configuration.
"""

import pytest
from datetime import date
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool, Pool

from finance_backend.app.main import app
from finance_backend.app.db.session import get_db, Base
from finance_backend.app.core.jwt import create_access_token
from finance_backend.app.models.enums import CategoryType
from finance_backend.app.schemas.transaction import TransactionCreate
from finance_backend.app.services import accounts as account_service
from finance_backend.app.services import categories as category_service
from finance_backend.app.services import transactions as transaction_service
from finance_backend.app.services.users import register_user

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Route the API's database dependency to the in-memory database."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    # Each test runs in its own event loop; drop the pooled connection with it
    await engine.dispose()


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def owner(db_session):
    """Registered user id (system categories included)."""
    user = await register_user(db_session, "owner@test.com", "Owner")
    return user.id


@pytest.fixture
async def other_owner(db_session):
    user = await register_user(db_session, "intruder@test.com", "Intruder")
    return user.id


def _bearer(user_id: int) -> dict:
    token = create_access_token(data={"sub": f"user-{user_id}", "user_id": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(owner):
    return _bearer(owner)


@pytest.fixture
def other_auth_headers(other_owner):
    return _bearer(other_owner)


@pytest.fixture
def make_account(db_session):
    """Factory: account with an opening balance booked through a balance sync."""

    async def _make(owner_id: int, name: str, balance="0"):
        account = await account_service.create_account(
            db_session, owner_id, name, initial_balance=Decimal(balance)
        )
        return account.id

    return _make


@pytest.fixture
def make_category(db_session):

    async def _make(owner_id: int, name: str, category_type: CategoryType):
        category = await category_service.create_category(db_session, owner_id, name, category_type)
        return category.id

    return _make


@pytest.fixture
def book(db_session):
    """Factory: create a transaction between two (type, id) endpoints."""

    async def _book(owner_id: int, source, destination, amount, when: date = None):
        data = TransactionCreate(
            date_of_completion=when or date.today(),
            from_type=source[0],
            from_id=source[1],
            to_type=destination[0],
            to_id=destination[1],
            amount=Decimal(amount),
        )
        return await transaction_service.create_transaction(db_session, owner_id, data)

    return _book


@pytest.fixture
def balance_of(db_session):

    async def _balance(owner_id: int, account_id: int) -> Decimal:
        return (await account_service.get_account(db_session, account_id, owner_id)).balance

    return _balance


@pytest.fixture
def sum_of(db_session):

    async def _sum(owner_id: int, category_id: int) -> Decimal:
        return (await category_service.get_category(db_session, category_id, owner_id)).current_period_sum

    return _sum

