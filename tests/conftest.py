"""
NaijaTax Compliance - Test Configuration

Pytest fixtures and configuration.
"""

import os

# Point the app at an in-memory database before anything imports settings
os.environ["DATABASE_URL_ASYNC"] = "sqlite+aiosqlite://"
os.environ["APP_ENV"] = "testing"

from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Dict
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_async_session
from app.models.entity import Business, Company
from app.models.payroll import Employee
from app.models.user import AccountType, SubscriptionPlan, User
from app.utils.owner import OwnerRef
from app.utils.security import create_access_token, get_password_hash
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "TestPassword123!"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh in-memory database and session for each test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

async def _create_user(
    db_session: AsyncSession,
    email: str,
    account_type: AccountType,
    plan: SubscriptionPlan,
) -> User:
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        first_name="Test",
        last_name="User",
        account_type=account_type,
        subscription_plan=plan,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def company_user(db_session: AsyncSession) -> User:
    """Company account on the premium plan (every feature)."""
    return await _create_user(
        db_session, "company@example.com", AccountType.COMPANY, SubscriptionPlan.PREMIUM,
    )


@pytest_asyncio.fixture
async def business_user(db_session: AsyncSession) -> User:
    """Business account on the standard plan."""
    return await _create_user(
        db_session, "business@example.com", AccountType.BUSINESS, SubscriptionPlan.STANDARD,
    )


@pytest_asyncio.fixture
async def individual_user(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session, "individual@example.com", AccountType.INDIVIDUAL, SubscriptionPlan.PREMIUM,
    )


@pytest_asyncio.fixture
async def free_company_user(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session, "free@example.com", AccountType.COMPANY, SubscriptionPlan.FREE,
    )


@pytest_asyncio.fixture
async def company(db_session: AsyncSession, company_user: User) -> Company:
    """Create a test company."""
    entity = Company(
        id=uuid4(),
        user_id=company_user.id,
        name="Okafor Holdings Ltd",
        tin="1234567890",
        rc_number="RC123456",
    )
    db_session.add(entity)
    await db_session.commit()
    await db_session.refresh(entity)
    return entity


@pytest_asyncio.fixture
async def business(db_session: AsyncSession, business_user: User) -> Business:
    """Create a test business name."""
    entity = Business(
        id=uuid4(),
        user_id=business_user.id,
        name="Adaeze Ventures",
        bn_number="BN998877",
    )
    db_session.add(entity)
    await db_session.commit()
    await db_session.refresh(entity)
    return entity


@pytest.fixture
def company_owner(company: Company) -> OwnerRef:
    return OwnerRef(AccountType.COMPANY, company.id)


@pytest.fixture
def business_owner(business: Business) -> OwnerRef:
    return OwnerRef(AccountType.BUSINESS, business.id)


@pytest.fixture
def make_employee(db_session: AsyncSession) -> Callable[..., Awaitable[Employee]]:
    """Factory for employees owned by a given owner."""
    counter = {"n": 0}

    async def _make(owner: OwnerRef, salary: str = "500000", **kwargs) -> Employee:
        counter["n"] += 1
        values = {
            "first_name": "Employee",
            "last_name": f"Number{counter['n']:03d}",
            "employee_number": f"EMP-{counter['n']:03d}",
            "salary": Decimal(salary),
            "has_pension": True,
            "has_nhf": True,
            "has_nhis": True,
            "annual_rent_paid": Decimal("0"),
            "is_active": True,
        }
        values.update(kwargs)
        employee = Employee(id=uuid4(), **owner.assignments(), **values)
        db_session.add(employee)
        await db_session.commit()
        await db_session.refresh(employee)
        return employee

    return _make


@pytest_asyncio.fixture
async def employee(company_owner: OwnerRef, make_employee) -> Employee:
    """A ₦500,000/month company employee with every benefit."""
    return await make_employee(company_owner)


def _auth_headers(user: User, entity_id=None) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    headers = {"Authorization": f"Bearer {token}"}
    if entity_id is not None:
        headers["X-Entity-ID"] = str(entity_id)
    return headers


@pytest.fixture
def company_headers(company_user: User, company: Company) -> Dict[str, str]:
    """Auth headers for the company user scoped to their company."""
    return _auth_headers(company_user, company.id)


@pytest.fixture
def business_headers(business_user: User, business: Business) -> Dict[str, str]:
    return _auth_headers(business_user, business.id)


@pytest.fixture
def individual_headers(individual_user: User) -> Dict[str, str]:
    return _auth_headers(individual_user)


@pytest.fixture
def free_company_headers(free_company_user: User) -> Dict[str, str]:
    return _auth_headers(free_company_user)
