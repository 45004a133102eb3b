"""Diagnosis Repository — SQLAlchemy implementation of DiagnosisStore.

Invariants:
    - Every method that touches storage maps SQLAlchemyError to DatabaseError
      after rolling back and logging the cause; the DatabaseError message is
      generic and never includes driver text
    - Mutations commit before returning; callers never see uncommitted rows
    - update() applies only the keys present in `fields`
    - every update stamps updated_at, even when no value changed
    - "latest" means highest predicted_date (created_at, then id break ties)
    - upsert_latest_for_client() reads and writes inside one transaction,
      serialized per client on PostgreSQL with pg_advisory_xact_lock

Design Decisions:
    - Session passed in by the caller (FastAPI dependency or test fixture);
      the repository never opens its own connections
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from diagnosis_api.core.domain_types import ClientId, DiagnosisField, DiagnosisId
from diagnosis_api.core.errors import (
    DatabaseError, ErrorContext, NoFieldsToUpdateError,
)
from diagnosis_api.models.diagnosis import Diagnosis

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = frozenset(f.value for f in DiagnosisField)


class DiagnosisRepository:
    """Single-table data access for diagnoses."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _storage_errors(
        self, operation: str, message: str, **context: str,
    ) -> AsyncGenerator[None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self.session.rollback()
            ctx = ErrorContext(**context)
            logger.error(
                f"Diagnosis {operation} failed: {e}",
                extra={**ctx.to_log_extra(), "operation": operation},
            )
            raise DatabaseError(message, operation, ctx) from e

    @staticmethod
    def _latest_first(client_id: ClientId) -> Select:
        return (
            select(Diagnosis)
            .where(Diagnosis.client_id == client_id)
            .order_by(
                Diagnosis.predicted_date.desc(),
                Diagnosis.created_at.desc(),
                Diagnosis.id.desc(),
            )
        )

    @staticmethod
    def _apply(row: Diagnosis, fields: dict[str, Any]) -> None:
        for name, value in fields.items():
            if name not in _MUTABLE_FIELDS:
                raise ValueError(f"{name} is not an updatable diagnosis field")
            setattr(row, name, value)
        # onupdate only fires when a column changed
        row.updated_at = datetime.now(timezone.utc)

    async def _lock_client(self, client_id: ClientId) -> None:
        if self.session.bind.dialect.name == "postgresql":
            await self.session.execute(
                select(func.pg_advisory_xact_lock(func.hashtext(client_id))),
            )

    async def find_latest_by_client(
        self, client_id: ClientId,
    ) -> Diagnosis | None:
        async with self._storage_errors(
            "find_latest", "Failed to retrieve diagnosis", client_id=client_id,
        ):
            result = await self.session.execute(
                self._latest_first(client_id).limit(1),
            )
            return result.scalar_one_or_none()

    async def find_by_id(self, diagnosis_id: DiagnosisId) -> Diagnosis | None:
        async with self._storage_errors(
            "find_by_id", "Failed to retrieve diagnosis",
            diagnosis_id=diagnosis_id,
        ):
            return await self.session.get(Diagnosis, diagnosis_id)

    async def create(
        self, client_id: ClientId, fields: dict[str, Any],
    ) -> Diagnosis:
        """Insert a new diagnosis; predicted_date is stamped now."""
        row = Diagnosis(client_id=client_id)
        self._apply(row, fields)
        async with self._storage_errors(
            "create", "Failed to create diagnosis", client_id=client_id,
        ):
            self.session.add(row)
            await self.session.commit()
            await self.session.refresh(row)
        logger.info(
            "Diagnosis created",
            extra={"client_id": client_id, "diagnosis_id": row.id},
        )
        return row

    async def update(
        self, diagnosis_id: DiagnosisId, fields: dict[str, Any],
    ) -> Diagnosis | None:
        """Apply `fields` to an existing row.

        None when the id is unknown; an empty `fields` on a known id raises
        NoFieldsToUpdateError.
        """
        async with self._storage_errors(
            "update", "Failed to update diagnosis", diagnosis_id=diagnosis_id,
        ):
            row = await self.session.get(Diagnosis, diagnosis_id)
            if row is None:
                return None
            if not fields:
                raise NoFieldsToUpdateError(
                    ErrorContext(diagnosis_id=diagnosis_id, operation="update"),
                )
            self._apply(row, fields)
            await self.session.commit()
            await self.session.refresh(row)
        logger.info(
            "Diagnosis updated",
            extra={"client_id": row.client_id, "diagnosis_id": row.id},
        )
        return row

    async def upsert_latest_for_client(
        self, client_id: ClientId, fields: dict[str, Any],
    ) -> tuple[Diagnosis, bool]:
        """Update the client's latest diagnosis, or create the first one.

        Returns (row, created).
        """
        async with self._storage_errors(
            "upsert", "Failed to create or update diagnosis",
            client_id=client_id,
        ):
            await self._lock_client(client_id)
            result = await self.session.execute(
                self._latest_first(client_id).limit(1).with_for_update(),
            )
            row = result.scalar_one_or_none()
            created = row is None
            if created:
                row = Diagnosis(client_id=client_id)
                self.session.add(row)
            self._apply(row, fields)
            await self.session.commit()
            await self.session.refresh(row)
        logger.info(
            "Diagnosis created" if created else "Diagnosis updated",
            extra={"client_id": client_id, "diagnosis_id": row.id},
        )
        return row, created

    async def list_by_client(
        self, client_id: ClientId, skip: int = 0, take: int = 10,
    ) -> list[Diagnosis]:
        async with self._storage_errors(
            "list", "Failed to retrieve diagnoses", client_id=client_id,
        ):
            result = await self.session.execute(
                self._latest_first(client_id).offset(skip).limit(take),
            )
            return list(result.scalars().all())

    async def count_by_client(self, client_id: ClientId) -> int:
        async with self._storage_errors(
            "count", "Failed to retrieve diagnoses", client_id=client_id,
        ):
            return await self.session.scalar(
                select(func.count())
                .select_from(Diagnosis)
                .where(Diagnosis.client_id == client_id),
            )

    async def count_all(self) -> int:
        async with self._storage_errors("count", "Failed to retrieve diagnoses"):
            return await self.session.scalar(
                select(func.count()).select_from(Diagnosis),
            )

    async def exists(self, diagnosis_id: DiagnosisId) -> bool:
        async with self._storage_errors(
            "exists", "Failed to check diagnosis existence",
            diagnosis_id=diagnosis_id,
        ):
            count = await self.session.scalar(
                select(func.count())
                .select_from(Diagnosis)
                .where(Diagnosis.id == diagnosis_id),
            )
            return count > 0

    async def delete(self, diagnosis_id: DiagnosisId) -> bool:
        """Remove a diagnosis. No route exposes this."""
        async with self._storage_errors(
            "delete", "Failed to delete diagnosis", diagnosis_id=diagnosis_id,
        ):
            row = await self.session.get(Diagnosis, diagnosis_id)
            if row is None:
                return False
            await self.session.delete(row)
            await self.session.commit()
        logger.info("Diagnosis deleted", extra={"diagnosis_id": diagnosis_id})
        return True
