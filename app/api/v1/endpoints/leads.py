"""Leads endpoints for lead capture and management.

- POST   /api/v1/leads/submit       → Public lead form submission
- GET    /api/v1/leads/all          → List leads (admin, paginated, filterable)
- GET    /api/v1/leads/{id}         → Single lead (admin)
- PATCH  /api/v1/leads/{id}/status  → Update lead status (admin)
- DELETE /api/v1/leads/{id}         → Delete lead (admin)
- POST   /api/v1/leads/sync         → Sync unsynced leads to Google Sheets (admin)

Sheet sync after create / status update runs as a background task, so the
response never waits on Google Sheets.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request

from app.core.deps import get_current_admin, get_lead_store, get_sync_coordinator
from app.core.exceptions import DuplicateLeadError, LeadValidationError
from app.models.admin import Admin
from app.models.lead import LEAD_STATUSES, LeadStatus
from app.schemas.auth import MessageResponse
from app.schemas.lead import (
    LeadList,
    LeadOut,
    LeadStatusUpdate,
    LeadSubmit,
    LeadMessage,
    Pagination,
    SyncSummary,
)
from app.services.lead_service import LeadFilters, LeadStore
from app.services.rate_limit_service import limit_api, limit_lead_submissions
from app.services.sheets_sync import SyncCoordinator
from app.services.sync_state import Synced, sync_state

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/submit", response_model=LeadMessage, status_code=201)
@limit_lead_submissions
async def submit_lead(
    request: Request,
    payload: LeadSubmit,
    background_tasks: BackgroundTasks,
    store: LeadStore = Depends(get_lead_store),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
):
    """Submit the public lead form."""
    try:
        lead = await store.create(payload.model_dump())
    except DuplicateLeadError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except LeadValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    background_tasks.add_task(coordinator.sync_new_lead, lead)

    return LeadMessage(message="Lead submitted successfully", lead=LeadOut.model_validate(lead))


@router.get("/all", response_model=LeadList)
@limit_api
async def list_leads(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[LeadStatus] = Query(None, description="Filter by status"),
    course: Optional[str] = Query(None, description="Course contains (case-insensitive)"),
    search: Optional[str] = Query(None, description="Name or email contains (case-insensitive)"),
    store: LeadStore = Depends(get_lead_store),
    admin: Admin = Depends(get_current_admin),
):
    """List leads newest first, with pagination metadata."""
    filters = LeadFilters(status=status.value if status else None, course=course, search=search)
    leads = await store.list((page - 1) * limit, limit, filters)
    total = await store.count(filters)

    return LeadList(
        data=[LeadOut.model_validate(lead) for lead in leads],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.post("/sync", response_model=SyncSummary)
@limit_api
async def sync_leads(
    request: Request,
    batch_size: Optional[int] = Query(None, ge=1, le=500),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    admin: Admin = Depends(get_current_admin),
):
    """Push leads that never reached the sheet. Runs synchronously and returns the summary."""
    logger.info("Admin %s triggered sheet reconcile", admin.email)
    return await coordinator.reconcile(batch_size)


@router.get("/{lead_id}", response_model=LeadOut)
@limit_api
async def get_lead(
    request: Request,
    lead_id: int,
    store: LeadStore = Depends(get_lead_store),
    admin: Admin = Depends(get_current_admin),
):
    lead = await store.get_by_id(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.patch("/{lead_id}/status", response_model=LeadMessage)
@limit_api
async def update_lead_status(
    request: Request,
    lead_id: int,
    status_update: LeadStatusUpdate,
    background_tasks: BackgroundTasks,
    store: LeadStore = Depends(get_lead_store),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
    admin: Admin = Depends(get_current_admin),
):
    """Update lead status and mirror it to the sheet row if the lead has one."""
    if status_update.status not in LEAD_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(LEAD_STATUSES)}",
        )

    lead = await store.update_status(lead_id, status_update.status)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")

    state = sync_state(lead)
    if isinstance(state, Synced):
        background_tasks.add_task(coordinator.propagate_status, state.row_ref, status_update.status)

    return LeadMessage(message="Lead status updated", lead=LeadOut.model_validate(lead))


@router.delete("/{lead_id}", response_model=MessageResponse)
@limit_api
async def delete_lead(
    request: Request,
    lead_id: int,
    store: LeadStore = Depends(get_lead_store),
    admin: Admin = Depends(get_current_admin),
):
    """Delete a lead. The sheet row is not removed."""
    if not await store.delete(lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    return MessageResponse(message="Lead deleted successfully")
