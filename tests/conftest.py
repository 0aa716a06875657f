"""Shared test fixtures — async DB, client, session helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

from datetime import date, datetime, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shift_tracker.common.constants import Department, ProfileRole, Section, ShiftType
from shift_tracker.database import Base, get_db
from shift_tracker.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import shift_tracker.auth.models  # noqa: F401
import shift_tracker.common.audit  # noqa: F401
import shift_tracker.employees.models  # noqa: F401
import shift_tracker.shifts.models  # noqa: F401

from shift_tracker.employees.models import Profile
from shift_tracker.employees.seed import seed_managers
from shift_tracker.shifts.models import ShiftEntry

API = "/api/v1"
TODAY = date(2025, 3, 10)


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
    from shift_tracker.common.rate_limit import limiter

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


@pytest.fixture
def role_router(app):
    return app.state.role_router


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


@pytest.fixture
async def managers(db) -> list[str]:
    """Seed the six section managers (the app lifespan does this in production)."""
    inserted = await seed_managers(db)
    await db.commit()
    return inserted


# ── Model factories ─────────────────────────────────────────────────

def _make_profile(
    *,
    id: str = "E100",
    full_name: str = "Asha Rao",
    department: Department = Department.engineering,
    section: Optional[Section] = Section.qc,
    approved: bool = True,
) -> dict:
    return dict(
        id=id,
        full_name=full_name,
        department=department,
        section=section if department == Department.engineering else None,
        role=ProfileRole.employee,
        is_approved=approved,
        pending_registration=not approved,
        created_at=datetime.now(timezone.utc),
        approved_at=datetime.now(timezone.utc) if approved else None,
    )


async def add_profile(db: AsyncSession, **kwargs) -> Profile:
    profile = Profile(**_make_profile(**kwargs))
    db.add(profile)
    await db.commit()
    return profile


async def add_entry(
    db: AsyncSession,
    employee_id: str,
    entry_date: date,
    shift_type: ShiftType = ShiftType.first_shift,
    *,
    other_remark: Optional[str] = None,
    approved_by: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> ShiftEntry:
    entry = ShiftEntry(
        employee_id=employee_id,
        date=entry_date,
        shift_type=shift_type,
        other_remark=other_remark,
        created_at=created_at or datetime.now(timezone.utc),
        approved=approved_by is not None,
        approved_by=approved_by,
        approved_at=datetime.now(timezone.utc) if approved_by else None,
    )
    db.add(entry)
    await db.commit()
    return entry


# ── Session helpers (HTTP) ──────────────────────────────────────────

async def open_view_session(client: AsyncClient) -> dict[str, str]:
    """Open a fresh view session and return its Bearer headers."""
    resp = await client.post(f"{API}/session")
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def switch_view(client: AsyncClient, headers: dict[str, str], view: str) -> dict:
    resp = await client.put(f"{API}/session/view", json={"view": view}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


async def manager_session(
    client: AsyncClient,
    manager_id: str = "QC_MGR",
    password: str = "SH123",
) -> dict[str, str]:
    headers = await open_view_session(client)
    await switch_view(client, headers, "manager")
    resp = await client.post(
        f"{API}/session/manager/login",
        json={"manager_id": manager_id, "password": password},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return headers


async def gate_session(client: AsyncClient, view: str) -> dict[str, str]:
    """An authenticated HR or admin session."""
    headers = await open_view_session(client)
    await switch_view(client, headers, view)
    resp = await client.post(
        f"{API}/session/{view}/login", json={"code": "letmein"}, headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return headers


async def employee_session(
    client: AsyncClient,
    employee_id: str = "E100",
    password: Optional[str] = None,
) -> dict[str, str]:
    """A session with *employee_id* bound through employee login."""
    headers = await open_view_session(client)
    resp = await client.post(
        f"{API}/session/employee/login",
        json={"employee_id": employee_id, "password": password or f"{employee_id}@123"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return headers
