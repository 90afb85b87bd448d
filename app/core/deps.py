"""FastAPI dependencies: admin authentication and the lead/sync services."""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import async_session, get_db
from app.models.admin import Admin
from app.services.auth import ADMIN_ROLE, decode_access_token
from app.services.lead_service import LeadStore
from app.services.sheets import SheetsClient
from app.services.sheets_sync import SyncCoordinator

security = HTTPBearer()


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """Extract and validate the current admin from the JWT token.

    Raises 401 for a missing/invalid token and 403 for non-admin or disabled accounts.
    """
    payload = decode_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    admin_id: Optional[str] = payload.get("sub")
    if not admin_id or not admin_id.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    result = await db.execute(select(Admin).where(Admin.id == int(admin_id)))
    admin = result.scalar_one_or_none()

    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin not found",
        )

    if not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin account is disabled",
        )

    return admin


def get_lead_store() -> LeadStore:
    return LeadStore(async_session)


def get_sheets_client(request: Request) -> SheetsClient:
    """Process-wide sheet client created at startup; built on demand if startup did not run."""
    sheets = getattr(request.app.state, "sheets", None)
    if sheets is None:
        sheets = SheetsClient.from_settings(settings)
        request.app.state.sheets = sheets
    return sheets


def get_sync_coordinator(
    store: LeadStore = Depends(get_lead_store),
    sheets: SheetsClient = Depends(get_sheets_client),
) -> SyncCoordinator:
    return SyncCoordinator(store, sheets)
