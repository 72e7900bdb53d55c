"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Settings are read at import time; configure them before importing leavedesk
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.common.constants import GenderType, LeaveStatus, UserRole
from leavedesk.config import settings
from leavedesk.database import Base, get_db
from leavedesk.main import create_app

# Register every model with Base.metadata
import leavedesk.leave.models  # noqa: F401
import leavedesk.organizations.models  # noqa: F401
import leavedesk.users.models  # noqa: F401

from leavedesk.leave.models import LeaveRequest
from leavedesk.organizations.models import Organization
from leavedesk.users.models import User


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leavedesk.common.rate_limit import limiter
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def _make_user(
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    role: UserRole = UserRole.normal,
    organization: str = "ORG1",
    supervisor_id: Optional[uuid.UUID] = None,
    gender: GenderType = GenderType.female,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        email=email or f"user.{uuid.uuid4().hex[:8]}@example.com",
        role=role,
        organization=organization,
        supervisor_id=supervisor_id,
        gender=gender,
        photo_url=f"https://example.com/{name.lower().replace(' ', '-')}.png",
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def seed_user(db: AsyncSession, **kwargs) -> User:
    user = User(**_make_user(**kwargs))
    db.add(user)
    await db.commit()
    return user


async def seed_organization(
    db: AsyncSession,
    organization_id: str = "ORG1",
    leave_types: Optional[list[tuple[str, int]]] = None,
) -> Organization:
    if leave_types is None:
        leave_types = [("Annual", 10), ("Sick", 5)]
    org = Organization(
        organization_id=organization_id,
        leave_types=[
            {
                "leave_type_id": uuid.uuid4().hex,
                "leave_type_name": name,
                "number_of_days_allowed": days,
            }
            for name, days in leave_types
        ],
    )
    db.add(org)
    await db.commit()
    return org


async def seed_leave(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    start_date: datetime,
    end_date: datetime,
    leave_type: str = "Annual",
    status: LeaveStatus = LeaveStatus.pending,
    reason: Optional[str] = "Family trip",
    date_of_request: Optional[datetime] = None,
    approved_by: Optional[uuid.UUID] = None,
    rejected_by: Optional[uuid.UUID] = None,
    rejected_reason: Optional[str] = None,
) -> LeaveRequest:
    now = datetime.now(timezone.utc)
    leave = LeaveRequest(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        leave_type=leave_type,
        status=status,
        reason=reason,
        date_of_request=date_of_request or now,
        approved_date=now if approved_by else None,
        approved_by=approved_by,
        rejected_date=now if rejected_by else None,
        rejected_by=rejected_by,
        rejected_reason=rejected_reason,
    )
    db.add(leave)
    await db.commit()
    return leave


@pytest.fixture
async def super_user(db) -> User:
    return await seed_user(db, name="Sam Root", email="root@example.com", role=UserRole.super_user)


@pytest.fixture
async def supervisor(db) -> User:
    return await seed_user(db, name="Sue Visor", email="sue@example.com", role=UserRole.supervisor)


@pytest.fixture
async def employee(db, supervisor) -> User:
    return await seed_user(
        db, name="Eve Worker", email="eve@example.com", supervisor_id=supervisor.id,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    role: UserRole = UserRole.normal,
    expired: bool = False,
    token_type: str = "access",
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(user_id),
        "role": role.value,
        "type": token_type,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
