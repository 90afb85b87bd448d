"""Lead to Google Sheets synchronization.

The database is the source of truth; the sheet is a best-effort mirror.
- sync_new_lead: append a freshly created lead and stamp its sheet row.
- propagate_status: rewrite the status cell of an already synced lead.
- reconcile: sweep leads that never made it to the sheet, oldest first.

None of these raise. Create/update requests have already been answered by the
time they run, so every outcome is logged and returned as a result.

There is no lock between the append and the row stamp. If sync_new_lead and a
reconcile sweep both see the same lead as unsynced before either stamps it,
the sheet can end up with a duplicate row. The conditional stamp in
LeadStore.set_external_row_ref keeps the first row reference in that case.
"""

import logging
from typing import Any, List, Optional

from app.core.config import settings
from app.models.lead import LEAD_STATUSES, Lead
from app.schemas.lead import SyncFailure, SyncSummary
from app.services.lead_service import LeadStore
from app.services.sheets import STATUS_COLUMN, SheetsClient
from app.services.sync_state import Synced, SyncOutcome, SyncResult, sync_state

logger = logging.getLogger(__name__)

REMINDER_DEFAULT = "No"


def sheet_row_values(lead: Lead) -> List[Any]:
    """Row in sheet column order A:J."""
    status = getattr(lead.status, "value", lead.status)
    return [
        lead.id,
        lead.name,
        lead.email,
        lead.phone,
        lead.course,
        lead.college,
        lead.year,
        status,
        lead.created_at.isoformat(),
        REMINDER_DEFAULT,
    ]


class SyncCoordinator:
    """Keeps the lead table and the sheet mirror in step."""

    def __init__(self, store: LeadStore, sheets: SheetsClient):
        self.store = store
        self.sheets = sheets

    async def sync_new_lead(self, lead: Lead) -> SyncResult:
        """Append a lead to the sheet once and record its row number."""
        try:
            return await self._append_and_stamp(lead.id)
        except Exception as e:
            logger.exception("Google Sheets sync error for lead %s", lead.id)
            return SyncResult.failed(str(e))

    async def _append_and_stamp(self, lead_id: int) -> SyncResult:
        if not self.sheets.is_available():
            return SyncResult.unavailable()

        # Re-read: another sync may have stamped the row since the caller loaded it
        current = await self.store.get_by_id(lead_id)
        if current is None:
            logger.warning("Lead %d no longer exists, skipping sheet sync", lead_id)
            return SyncResult.failed("Lead not found")

        state = sync_state(current)
        if isinstance(state, Synced):
            logger.info("Lead %d already synced to sheet row %d", lead_id, state.row_ref)
            return SyncResult.already_synced(state.row_ref)

        result = await self.sheets.append_row(sheet_row_values(current))
        if not result.ok:
            logger.error("Failed to sync lead %d to Google Sheets: %s", lead_id, result.error)
            return result

        stamped = await self.store.set_external_row_ref(lead_id, result.row_ref)
        if not stamped:
            logger.warning(
                "Lead %d was appended to row %d but already had a sheet row or was deleted; "
                "row %d may be a duplicate",
                lead_id,
                result.row_ref,
                result.row_ref,
            )
            return SyncResult.already_synced(result.row_ref)

        logger.info("Lead %d synced to Google Sheet row %d", lead_id, result.row_ref)
        return result

    async def propagate_status(self, row_ref: int, status: str) -> SyncResult:
        """Write a new status into column H of the lead's sheet row."""
        status = getattr(status, "value", status)
        if status not in LEAD_STATUSES:
            logger.warning("Refusing to write invalid status %r to sheet row %s", status, row_ref)
            return SyncResult.failed("Invalid status")

        try:
            result = await self.sheets.update_cell(row_ref, STATUS_COLUMN, status)
        except Exception as e:
            logger.exception("Error updating sheet row %s status", row_ref)
            return SyncResult.failed(str(e))

        if result.ok:
            logger.info("Sheet row %d status updated to: %s", row_ref, status)
        elif result.outcome == SyncOutcome.FAILED:
            logger.error("Failed to update sheet row %d status: %s", row_ref, result.error)
        return result

    async def reconcile(self, batch_size: Optional[int] = None) -> SyncSummary:
        """Sync up to batch_size unsynced leads, one at a time, oldest first.

        batch_size defaults to SHEETS_SYNC_BATCH_SIZE; 0 processes nothing.
        """
        if batch_size is None:
            batch_size = settings.SHEETS_SYNC_BATCH_SIZE

        if not self.sheets.is_available():
            logger.warning("Google Sheets not configured, skipping reconcile")
            return SyncSummary(success=False, error="Google Sheets not configured")

        try:
            leads = await self.store.list_unsynced(batch_size)
        except Exception as e:
            logger.exception("Could not load unsynced leads")
            return SyncSummary(success=False, error=str(e))

        summary = SyncSummary()
        # One lead at a time against the Sheets API quota
        for lead in leads:
            result = await self.sync_new_lead(lead)
            if result.ok:
                summary.synced += 1
            elif result.outcome == SyncOutcome.ALREADY_SYNCED:
                continue
            else:
                summary.failed += 1
                summary.failed_details.append(
                    SyncFailure(lead_id=lead.id, error=result.error or result.outcome.value)
                )

        logger.info(
            "Sync completed: %d synced, %d failed, %d candidates",
            summary.synced,
            summary.failed,
            len(leads),
        )
        return summary
