"""DiagnosisService — orchestration over a DiagnosisStore."""

import pytest

from diagnosis_api.core.errors import (
    DatabaseError, NoFieldsToUpdateError, ResourceNotFoundError,
)
from diagnosis_api.core.pagination import MAX_PAGE_SIZE
from diagnosis_api.schemas.diagnosis import DiagnosisCreate, DiagnosisUpdate
from diagnosis_api.services.diagnosis_service import (
    HEALTH_PROBE_ID, DiagnosisService,
)

from tests.sample_data import CLIENT_ID, OTHER_CLIENT_ID, UNKNOWN_DIAGNOSIS_ID


@pytest.fixture
def service(store):
    return DiagnosisService(store)


def _create(name="Major Depressive Disorder", **extra) -> DiagnosisCreate:
    return DiagnosisCreate(diagnosis_name=name, justification="PHQ-9 of 18", **extra)


# ─── Lookups ────────────────────────────────────────────────────

async def test_get_latest_returns_newest_row(service, store):
    store.add(CLIENT_ID, diagnosis_name="Older")
    newest = store.add(CLIENT_ID, diagnosis_name="Newer")
    assert (await service.get_latest(CLIENT_ID)).id == newest.id


async def test_get_latest_without_rows_raises_not_found(service):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await service.get_latest(CLIENT_ID)
    assert exc_info.value.message == "No diagnosis found for this client"
    assert exc_info.value.http_status == 404
    assert exc_info.value.context.client_id == CLIENT_ID


async def test_get_by_id_unknown_raises_not_found(service):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await service.get_by_id(UNKNOWN_DIAGNOSIS_ID)
    assert exc_info.value.message == "Diagnosis not found"


async def test_get_by_id_returns_row(service, store):
    row = store.add(CLIENT_ID)
    assert await service.get_by_id(row.id) is row


# ─── Create or update ───────────────────────────────────────────

async def test_upsert_creates_first_diagnosis(service, store):
    row, created = await service.upsert_by_client(CLIENT_ID, _create())
    assert created is True
    assert row.client_id == CLIENT_ID
    assert row.diagnosis_name == "Major Depressive Disorder"


async def test_upsert_updates_latest_instead_of_appending(service, store):
    first, _ = await service.upsert_by_client(CLIENT_ID, _create())
    second, created = await service.upsert_by_client(
        CLIENT_ID, _create("Generalized Anxiety Disorder"),
    )
    assert created is False
    assert second.id == first.id
    assert second.diagnosis_name == "Generalized Anxiety Disorder"
    assert len(store.rows) == 1


async def test_upsert_passes_only_sent_fields(service, store):
    row = store.add(CLIENT_ID, challenged_diagnosis="Keep me")
    await service.upsert_by_client(CLIENT_ID, _create())
    assert row.challenged_diagnosis == "Keep me"
    assert store.calls[-1] == (
        "upsert_latest_for_client", CLIENT_ID,
        {"diagnosis_name": "Major Depressive Disorder", "justification": "PHQ-9 of 18"},
    )


async def test_upsert_does_not_touch_other_clients(service, store):
    other = store.add(OTHER_CLIENT_ID, diagnosis_name="Other")
    await service.upsert_by_client(CLIENT_ID, _create())
    assert other.diagnosis_name == "Other"
    assert len(store.rows) == 2


# ─── Update by id ───────────────────────────────────────────────

async def test_update_by_id_applies_partial_changes(service, store):
    row = store.add(CLIENT_ID, justification="Old")
    updated = await service.update_by_id(
        row.id, DiagnosisUpdate(challenged_diagnosis="PTSD"),
    )
    assert updated.challenged_diagnosis == "PTSD"
    assert updated.justification == "Old"


async def test_update_by_id_unknown_raises_not_found(service):
    with pytest.raises(ResourceNotFoundError):
        await service.update_by_id(
            UNKNOWN_DIAGNOSIS_ID, DiagnosisUpdate(justification="x"),
        )


async def test_update_by_id_empty_payload_raises(service, store):
    row = store.add(CLIENT_ID)
    with pytest.raises(NoFieldsToUpdateError):
        await service.update_by_id(row.id, DiagnosisUpdate())


# ─── History ────────────────────────────────────────────────────

async def test_list_history_first_page(service, store):
    for i in range(12):
        store.add(CLIENT_ID, diagnosis_name=f"Diagnosis {i}")
    page = await service.list_history(CLIENT_ID, page=1, limit=5)
    assert page.count == 5
    assert page.total == 12
    assert page.total_pages == 3
    assert page.items[0].diagnosis_name == "Diagnosis 11"


async def test_list_history_last_partial_page(service, store):
    for i in range(12):
        store.add(CLIENT_ID, diagnosis_name=f"Diagnosis {i}")
    page = await service.list_history(CLIENT_ID, page=3, limit=5)
    assert [r.diagnosis_name for r in page.items] == ["Diagnosis 1", "Diagnosis 0"]
    assert page.count == 2
    assert page.total == 12


async def test_list_history_clamps_window(service, store):
    page = await service.list_history(CLIENT_ID, page=0, limit=500)
    assert page.page == 1
    assert page.limit == MAX_PAGE_SIZE
    assert ("list_by_client", CLIENT_ID, 0, MAX_PAGE_SIZE) in store.calls


async def test_list_history_empty_client(service):
    page = await service.list_history(CLIENT_ID)
    assert page.items == []
    assert page.total == 0
    assert page.total_pages == 0


# ─── Health / failures ──────────────────────────────────────────

async def test_check_health_probes_storage(service, store):
    await service.check_health()
    assert store.calls == [("exists", HEALTH_PROBE_ID)]


async def test_storage_errors_pass_through(service, store):
    store.fail_with = DatabaseError("Failed to retrieve diagnosis", "find_latest")
    with pytest.raises(DatabaseError) as exc_info:
        await service.get_latest(CLIENT_ID)
    assert exc_info.value.message == "Failed to retrieve diagnosis"


async def test_check_health_propagates_storage_error(service, store):
    store.fail_with = DatabaseError("Failed to check diagnosis existence", "exists")
    with pytest.raises(DatabaseError):
        await service.check_health()
