"""Shared test fixtures for the lead capture API tests.

Uses a throwaway SQLite database per test so tests run without PostgreSQL, and a
fake Google Sheets client so nothing touches the network.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-lead-capture-api-tests")
os.environ["GOOGLE_SHEETS_ID"] = ""
os.environ["APP_ENV"] = "test"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import Base, get_db
from app.core.deps import get_lead_store, get_sheets_client
from app.main import app
from app.services.lead_service import LeadStore
from app.services.rate_limit_service import reset_rate_limits
from app.services.sync_state import SyncResult

# Import all models to ensure they're registered with Base.metadata
from app.models.lead import Lead  # noqa: F401
from app.models.admin import Admin  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///{path}"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"

ASHA = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9876543210",
    "course": "B.Tech",
    "college": "XYZ",
    "year": "2nd Year",
}


def lead_fields(n: int, **overrides) -> dict:
    """Valid lead form data with a unique email per n."""
    fields = {
        "name": f"Student {chr(65 + n % 26)}",
        "email": f"student{n}@example.com",
        "phone": f"98765{n:05d}",
        "course": "B.Tech",
        "college": "XYZ College",
        "year": "1st Year",
    }
    fields.update(overrides)
    return fields


class FakeSheets:
    """In-memory stand-in for SheetsClient that records every call."""

    def __init__(self, available: bool = True, first_row: int = 2):
        self.available = available
        self.appended = []
        self.updated = []
        self.fail_emails = set()
        self._next_row = first_row

    def is_available(self) -> bool:
        return self.available

    async def append_row(self, values):
        if not self.available:
            return SyncResult.unavailable()
        self.appended.append(values)
        if values[2] in self.fail_emails:
            return SyncResult.failed("Google Sheets API error: 429")
        row = self._next_row
        self._next_row += 1
        return SyncResult.synced(row)

    async def update_cell(self, row_ref, column, value):
        if not self.available:
            return SyncResult.unavailable()
        self.updated.append((row_ref, column, value))
        return SyncResult.synced(row_ref)


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database file per test."""
    engine = create_async_engine(TEST_DATABASE_URL.format(path=tmp_path / "test.db"), echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    """Direct DB session for test setup/assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory):
    return LeadStore(session_factory)


@pytest.fixture
def fake_sheets():
    return FakeSheets()


@pytest_asyncio.fixture
async def client(session_factory, store, fake_sheets):
    """Async HTTP test client wired to the test database and fake sheet."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lead_store] = lambda: store
    app.dependency_overrides[get_sheets_client] = lambda: fake_sheets

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin(db):
    from app.services.auth import create_admin

    return await create_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD, "Test Admin")


@pytest_asyncio.fixture
async def auth_headers(client, admin):
    """Log in as the test admin and return the Authorization header."""
    resp = await client.post("/api/v1/auth/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
