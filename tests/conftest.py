import os

# Point settings at SQLite before the app (and its engine) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from registrar.main import app
from registrar.database import Base, configure_sqlite, get_db
from registrar.core.metrics import get_registry
from registrar.security.principal import Role, create_access_token
import registrar.models  # noqa: F401
from registrar.models import WebsiteSettings, WEBSITE_SETTINGS_KEY


@pytest.fixture(autouse=True)
def reset_metrics():
    get_registry().reset()
    yield


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Per-test SQLite file database with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registrar.db'}",
        poolclass=NullPool,
    )
    configure_sqlite(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(test_db: AsyncSession):
    """Create test client with overridden database."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(role: Role = Role.ADMIN, identity: str = "admin@example.com") -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity, role)}"}


@pytest.fixture
def admin_headers():
    return auth_headers(Role.ADMIN)


@pytest.fixture
def accounting_headers():
    return auth_headers(Role.ACCOUNTING, "accounting@example.com")


@pytest.fixture
def user_headers():
    return auth_headers(Role.USER, "someone@example.com")


@pytest_asyncio.fixture
async def schedule_row(test_db: AsyncSession):
    """Factory that writes the website settings row (open, codes on by default)."""

    async def _create(**fields) -> WebsiteSettings:
        values = {"is_open": True, "codes_active": True}
        values.update(fields)
        row = WebsiteSettings(key=WEBSITE_SETTINGS_KEY, **values)
        test_db.add(row)
        await test_db.commit()
        return row

    return _create


@pytest_asyncio.fixture
async def registration_open(schedule_row):
    return await schedule_row()


@pytest_asyncio.fixture
async def codes_disabled(schedule_row):
    return await schedule_row(codes_active=False)
