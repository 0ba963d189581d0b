"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.models.fleet_task_detail import FleetTaskPassenger
from backend.app.services import transport_handler

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Route the app's database dependency to the in-memory engine."""

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
async def driver_user(db_session):
    """Active driver with a mailable address (users.id doubles as driver_id)."""
    driver = User(id=7, email="driver7@test.com", name="Ravi Kumar", role=UserRole.DRIVER, is_active=True)
    db_session.add(driver)
    await db_session.commit()
    return driver


@pytest.fixture
def worker_transport_data():
    """Builder for WORKER_TRANSPORT additional_data payloads."""

    def build(workers, **overrides):
        data = {
            "transport_type": "WORKER_TRANSPORT",
            "driver_id": 7,
            "vehicle_id": 3,
            "company_id": 1,
            "project_id": 12,
            "pickup_location": "Camp A",
            "drop_location": "Site North",
            "pickup_time": "2026-10-20T06:30:00",
            "drop_time": "2026-10-20T07:15:00",
            "created_by": 2,
            "workers": workers,
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def break_last_passenger_insert(monkeypatch):
    """
    Once applied, every passenger batch ends with a row missing its
    worker_employee_id, so the store rejects the final child insert.
    """

    def apply():
        build_rows = transport_handler._build_child_rows

        def build_with_invalid_tail(fleet_task_id, payload):
            rows = build_rows(fleet_task_id, payload)
            rows.append(FleetTaskPassenger(fleet_task_id=fleet_task_id, worker_employee_id=None))
            return rows

        monkeypatch.setattr(transport_handler, "_build_child_rows", build_with_invalid_tail)

    return apply
