"""Tests for lead → Google Sheets synchronization."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import update

from app.core.config import settings
from app.models.lead import Lead
from app.services.sheets_sync import SyncCoordinator, sheet_row_values
from app.services.sync_state import Synced, SyncOutcome, Unsynced, sync_state
from conftest import ASHA, FakeSheets, lead_fields


@pytest.fixture
def coordinator(store, fake_sheets):
    return SyncCoordinator(store, fake_sheets)


@pytest.mark.asyncio
async def test_sheet_row_layout(store):
    lead = await store.create(ASHA)

    row = sheet_row_values(lead)

    assert row == [
        lead.id,
        "Asha Rao",
        "asha@example.com",
        "9876543210",
        "B.Tech",
        "XYZ",
        "2nd Year",
        "new",
        lead.created_at.isoformat(),
        "No",
    ]


@pytest.mark.asyncio
async def test_sync_new_lead_appends_and_stamps_row(store, fake_sheets, coordinator):
    lead = await store.create(ASHA)
    assert sync_state(lead) == Unsynced()

    result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.SYNCED
    assert result.row_ref == 2
    assert len(fake_sheets.appended) == 1
    assert sync_state(await store.get_by_id(lead.id)) == Synced(row_ref=2)


@pytest.mark.asyncio
async def test_sync_new_lead_twice_appends_once(store, fake_sheets, coordinator):
    lead = await store.create(ASHA)

    first = await coordinator.sync_new_lead(lead)
    # same stale object, as a retry or a racing sweep would hold it
    second = await coordinator.sync_new_lead(lead)

    assert first.outcome == SyncOutcome.SYNCED
    assert second.outcome == SyncOutcome.ALREADY_SYNCED
    assert second.row_ref == first.row_ref
    assert len(fake_sheets.appended) == 1


@pytest.mark.asyncio
async def test_sync_new_lead_unavailable_never_touches_store(store):
    lead = await store.create(ASHA)
    coordinator = SyncCoordinator(store, FakeSheets(available=False))

    with patch.object(store, "set_external_row_ref", new_callable=AsyncMock) as mock_stamp, \
         patch.object(store, "get_by_id", new_callable=AsyncMock) as mock_get:
        result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.UNAVAILABLE
    mock_stamp.assert_not_called()
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_failed_append_leaves_lead_unsynced(store, fake_sheets, coordinator):
    lead = await store.create(ASHA)
    fake_sheets.fail_emails.add("asha@example.com")

    result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.FAILED
    assert "429" in result.error
    assert (await store.get_by_id(lead.id)).sheet_row_id is None


@pytest.mark.asyncio
async def test_sync_new_lead_never_raises(store, fake_sheets, coordinator):
    lead = await store.create(ASHA)
    fake_sheets.append_row = AsyncMock(side_effect=RuntimeError("connection reset"))

    result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.FAILED
    assert result.error == "connection reset"
    assert (await store.get_by_id(lead.id)).sheet_row_id is None


@pytest.mark.asyncio
async def test_sync_deleted_lead_fails_without_append(store, fake_sheets, coordinator):
    lead = await store.create(ASHA)
    await store.delete(lead.id)

    result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.FAILED
    assert fake_sheets.appended == []


@pytest.mark.asyncio
async def test_lost_stamp_race_keeps_first_row(store, fake_sheets, coordinator):
    """A row stamped between the guard and the write-back is kept, not overwritten."""
    lead = await store.create(ASHA)
    real_append = fake_sheets.append_row

    async def append_while_other_sync_wins(values):
        await store.set_external_row_ref(lead.id, 40)
        return await real_append(values)

    fake_sheets.append_row = append_while_other_sync_wins

    result = await coordinator.sync_new_lead(lead)

    assert result.outcome == SyncOutcome.ALREADY_SYNCED
    assert (await store.get_by_id(lead.id)).sheet_row_id == 40


@pytest.mark.asyncio
async def test_propagate_status_updates_status_cell(fake_sheets, coordinator):
    result = await coordinator.propagate_status(5, "qualified")

    assert result.ok
    assert fake_sheets.updated == [(5, "H", "qualified")]


@pytest.mark.asyncio
async def test_propagate_status_rejects_unknown_status(fake_sheets, coordinator):
    result = await coordinator.propagate_status(5, "converted")

    assert result.outcome == SyncOutcome.FAILED
    assert fake_sheets.updated == []


@pytest.mark.asyncio
async def test_propagate_status_unavailable(store):
    coordinator = SyncCoordinator(store, FakeSheets(available=False))

    result = await coordinator.propagate_status(5, "lost")

    assert result.outcome == SyncOutcome.UNAVAILABLE


@pytest.mark.asyncio
async def test_reconcile_processes_batch_oldest_first(store, db, fake_sheets, coordinator):
    leads = [await store.create(lead_fields(i)) for i in range(5)]
    # reverse creation order so created_at order differs from id order
    base = datetime.utcnow() - timedelta(days=1)
    for offset, lead in enumerate(reversed(leads)):
        await db.execute(
            update(Lead).where(Lead.id == lead.id).values(created_at=base + timedelta(minutes=offset))
        )
    await db.commit()

    summary = await coordinator.reconcile(batch_size=3)

    assert summary.success is True
    assert summary.synced == 3
    assert summary.failed == 0
    assert [row[0] for row in fake_sheets.appended] == [leads[4].id, leads[3].id, leads[2].id]
    assert len(await store.list_unsynced()) == 2


@pytest.mark.asyncio
async def test_reconcile_reports_per_lead_failures_and_continues(store, fake_sheets, coordinator):
    leads = [await store.create(lead_fields(i)) for i in range(4)]
    fake_sheets.fail_emails.add(leads[1].email)

    summary = await coordinator.reconcile()

    assert summary.synced == 3
    assert summary.failed == 1
    assert summary.synced + summary.failed == len(fake_sheets.appended)
    assert len(summary.failed_details) == 1
    assert summary.failed_details[0].lead_id == leads[1].id
    assert "429" in summary.failed_details[0].error
    assert [lead.id for lead in await store.list_unsynced()] == [leads[1].id]


@pytest.mark.asyncio
async def test_reconcile_skips_leads_synced_during_sweep(store, fake_sheets, coordinator):
    leads = [await store.create(lead_fields(i)) for i in range(3)]
    stale = await store.list_unsynced()
    # a background sync finishes lead 0 after the sweep picked its batch
    await coordinator.sync_new_lead(leads[0])
    fake_sheets.appended.clear()

    with patch.object(store, "list_unsynced", new_callable=AsyncMock, return_value=stale):
        summary = await coordinator.reconcile()

    assert summary.synced == 2
    assert summary.failed == 0
    assert summary.failed_details == []
    assert len(fake_sheets.appended) == 2


@pytest.mark.asyncio
async def test_reconcile_unavailable_processes_nothing(store):
    await store.create(ASHA)
    sheets = FakeSheets(available=False)
    coordinator = SyncCoordinator(store, sheets)

    summary = await coordinator.reconcile()

    assert summary.success is False
    assert summary.error == "Google Sheets not configured"
    assert summary.synced == 0
    assert summary.failed == 0
    assert sheets.appended == []


@pytest.mark.asyncio
async def test_reconcile_defaults_to_configured_batch_size(store, fake_sheets, coordinator):
    for i in range(3):
        await store.create(lead_fields(i))

    with patch.object(settings, "SHEETS_SYNC_BATCH_SIZE", 2):
        summary = await coordinator.reconcile()

    assert summary.synced == 2
    assert len(fake_sheets.appended) == 2


@pytest.mark.asyncio
async def test_reconcile_with_zero_batch_size_syncs_nothing(store, fake_sheets, coordinator):
    await store.create(ASHA)

    summary = await coordinator.reconcile(batch_size=0)

    assert summary.success is True
    assert summary.synced == 0
    assert fake_sheets.appended == []
