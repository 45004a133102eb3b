"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session rolls back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - The manager is constructed explicitly and stored on app.state; there is
      no module-level instance, so tests hand in their own engine

Design Decisions:
    - expire_on_commit=False: prevents lazy-load issues in async context
    - SQLAlchemy errors are mapped to DatabaseError by the repository, which
      knows which operation failed; the manager only rolls back
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from diagnosis_api.core.domain_types import HealthStatus
from diagnosis_api.repositories.diagnosis_repository import DiagnosisRepository

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        pool_kwargs = {}
        if not database_url.startswith("sqlite"):
            pool_kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_recycle": 3600,
            }
        self._bind(create_async_engine(
            database_url, pool_pre_ping=True, **pool_kwargs,
        ))

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        """Wrap an existing engine (test fixtures, scripts)."""
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> dict:
        """Check connectivity and count diagnoses (for /health)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
                count = await DiagnosisRepository(db).count_all()
            return {
                "status": HealthStatus.HEALTHY.value,
                "message": "Database connection successful",
                "record_count": count,
            }
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return {
                "status": HealthStatus.UNHEALTHY.value,
                "message": "Database connection failed",
            }

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_db_manager(request: Request) -> DatabaseSessionManager:
    """FastAPI dependency: the manager attached by create_app()."""
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    return manager


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for request-scoped database sessions."""
    async with get_db_manager(request).session() as session:
        yield session
