"""Service test fixtures — in-memory DiagnosisStore.

Invariants:
    - FakeStore satisfies the DiagnosisStore protocol without a database
    - Rows are SimpleNamespace objects carrying every DiagnosisRecord attribute
    - `fail_with` makes every store call raise, to check pass-through

Design Decisions:
    - Service tests exercise orchestration only; SQL behavior is covered by
      tests/repositories against SQLite
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from diagnosis_api.core.errors import NoFieldsToUpdateError
from diagnosis_api.core.identifiers import new_diagnosis_id


class FakeStore:
    def __init__(self):
        self.rows: dict[str, SimpleNamespace] = {}
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.fail_with is not None:
            raise self.fail_with

    def _client_rows(self, client_id):
        rows = [r for r in self.rows.values() if r.client_id == client_id]
        return sorted(rows, key=lambda r: r.predicted_date, reverse=True)

    def add(self, client_id, **fields) -> SimpleNamespace:
        now = self._tick()
        row = SimpleNamespace(
            id=new_diagnosis_id(),
            client_id=client_id,
            diagnosis_name=fields.get("diagnosis_name", "Name"),
            justification=fields.get("justification", "Why"),
            challenged_diagnosis=fields.get("challenged_diagnosis"),
            challenged_justification=fields.get("challenged_justification"),
            predicted_date=now,
            created_at=now,
            updated_at=now,
        )
        self.rows[row.id] = row
        return row

    async def find_latest_by_client(self, client_id):
        self._record("find_latest_by_client", client_id)
        rows = self._client_rows(client_id)
        return rows[0] if rows else None

    async def find_by_id(self, diagnosis_id):
        self._record("find_by_id", diagnosis_id)
        return self.rows.get(diagnosis_id)

    async def create(self, client_id, fields):
        self._record("create", client_id, fields)
        return self.add(client_id, **fields)

    async def update(self, diagnosis_id, fields):
        self._record("update", diagnosis_id, fields)
        row = self.rows.get(diagnosis_id)
        if row is None:
            return None
        if not fields:
            raise NoFieldsToUpdateError()
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_at = self._tick()
        return row

    async def upsert_latest_for_client(self, client_id, fields):
        self._record("upsert_latest_for_client", client_id, fields)
        rows = self._client_rows(client_id)
        if not rows:
            return self.add(client_id, **fields), True
        row = rows[0]
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_at = self._tick()
        return row, False

    async def list_by_client(self, client_id, skip=0, take=10):
        self._record("list_by_client", client_id, skip, take)
        return self._client_rows(client_id)[skip:skip + take]

    async def count_by_client(self, client_id):
        self._record("count_by_client", client_id)
        return len(self._client_rows(client_id))

    async def count_all(self):
        self._record("count_all")
        return len(self.rows)

    async def exists(self, diagnosis_id):
        self._record("exists", diagnosis_id)
        return diagnosis_id in self.rows

    async def delete(self, diagnosis_id):
        self._record("delete", diagnosis_id)
        return self.rows.pop(diagnosis_id, None) is not None


@pytest.fixture
def store():
    return FakeStore()
