"""Root conftest — shared test configuration and database/app fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database (StaticPool: one
      connection, so the app's sessions and test_db see the same data)
    - The app under test receives its DatabaseSessionManager through
      create_app(); nothing is patched at module level
    - ASGITransport does not run the lifespan, so the injected manager is kept
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

from diagnosis_api.db.base import Base
from diagnosis_api.infrastructure.database import DatabaseSessionManager
from diagnosis_api.main import create_app
from diagnosis_api.models.diagnosis import Diagnosis

from tests.sample_data import CLIENT_ID


def _memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )


@pytest.fixture
async def test_engine():
    engine = _memory_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def broken_engine():
    """Engine without the diagnoses table — every query fails in the driver."""
    engine = _memory_engine()
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def app(test_engine):
    return create_app(db_manager=DatabaseSessionManager.from_engine(test_engine))


@pytest.fixture
async def client(app):
    """HTTP client bound to the app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def broken_client(broken_engine):
    """HTTP client for an app whose storage always fails."""
    broken_app = create_app(
        db_manager=DatabaseSessionManager.from_engine(broken_engine),
    )
    async with AsyncClient(
        transport=ASGITransport(app=broken_app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def seed_history(test_db):
    """Insert `count` diagnoses for a client, one day apart, oldest first."""

    async def _seed(client_id: str = CLIENT_ID, count: int = 12) -> list[Diagnosis]:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        rows = [
            Diagnosis(
                client_id=client_id,
                diagnosis_name=f"Diagnosis {i}",
                justification=f"Justification {i}",
                predicted_date=base + timedelta(days=i),
            )
            for i in range(count)
        ]
        test_db.add_all(rows)
        await test_db.commit()
        return rows

    return _seed
