"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from liveops.database import Base, get_db
from liveops.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (e.g. Employee → AttendanceRecord, LeaveAdjustment)
import liveops.common.models  # noqa: F401
import liveops.common.audit  # noqa: F401
import liveops.core_hr.models  # noqa: F401
import liveops.attendance.models  # noqa: F401
import liveops.kpi.models  # noqa: F401
import liveops.leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
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
    """Clear slowapi's in-memory counters between tests."""
    from liveops.common.rate_limit import limiter

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

COMPANY = "Visibel"

SALARY_BLOB = {
    "gapok": 5_000_000,
    "tunjanganMakan": 400_000,
    "tunjanganTransport": 300_000,
    "tunjanganKomunikasi": 100_000,
    "tunjanganKesehatan": 100_000,
    "tunjanganJabatan": 100_000,
    "bpjstk": 50_000,
    "pph21": 100_000,
    "potonganHutang": 250_000,
}


def make_employee(
    *,
    id: Optional[str] = None,
    name: str = "Sari Wulandari",
    job_title: str = "Staff Admin",
    company: str = COMPANY,
    hire_date: Optional[str] = "2024-01-15",
    is_remote_allowed: bool = False,
    salary_config: Optional[dict] = None,
) -> dict:
    return dict(
        id=id or f"EMP-{uuid.uuid4().hex[:6].upper()}",
        name=name,
        job_title=job_title,
        division="Operations",
        company=company,
        hire_date=hire_date,
        is_remote_allowed=is_remote_allowed,
        salary_config=dict(SALARY_BLOB if salary_config is None else salary_config),
        outstanding_debt=0,
        is_active=True,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def insert_employee(db: AsyncSession, **overrides) -> dict:
    from liveops.core_hr.models import Employee

    data = make_employee(**overrides)
    db.add(Employee(**data))
    await db.commit()
    return data


async def insert_record(
    db: AsyncSession,
    employee: dict,
    day: date,
    status,
    *,
    clock_in: Optional[str] = None,
    clock_out: Optional[str] = None,
):
    from liveops.attendance.models import AttendanceRecord

    record = AttendanceRecord(
        employee_id=employee["id"],
        company=employee["company"],
        date=day,
        status=status,
        clock_in=clock_in,
        clock_out=clock_out,
    )
    db.add(record)
    await db.commit()
    return record


async def save_geofence(db: AsyncSession, company: str = COMPANY, **fields) -> None:
    from liveops.common.constants import GEOFENCE_KEY_PREFIX
    from liveops.common.settings_store import SettingsStore, company_key

    blob = {
        "locationName": "Kantor Visibel",
        "latitude": -6.2,
        "longitude": 106.816666,
        "radius": 100,
        "allowRemote": False,
    }
    blob.update(fields)
    await SettingsStore.upsert_value(db, company_key(GEOFENCE_KEY_PREFIX, company), blob)
    await db.commit()


@pytest.fixture
async def test_employee(db) -> dict:
    """Insert an active office employee."""
    return await insert_employee(db)


@pytest.fixture
async def office(db) -> None:
    """Configure the company geofence."""
    await save_geofence(db)
