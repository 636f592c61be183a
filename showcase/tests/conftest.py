"""Shared test fixtures for Showcase tests."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from showcase.database import Base
from showcase.models import admin_setting, content, daily_metric  # noqa: F401
from showcase.security import create_access_token
from showcase.tests.fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock(1_700_000_000_000)


@pytest.fixture
def admin_headers():
    token = create_access_token("admin@example.com", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reader_headers():
    token = create_access_token("reader@example.com", role="reader")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
