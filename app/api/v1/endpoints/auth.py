"""Authentication endpoints for admins."""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_admin
from app.models.admin import Admin
from app.schemas.auth import AdminCreate, AdminCreated, AdminLogin, AdminOut, Token
from app.services.auth import authenticate_admin, create_admin, create_admin_token, get_admin_by_email
from app.services.rate_limit_service import check_login_limit, record_failed_login

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token, dependencies=[Depends(check_login_limit)])
async def login(credentials: AdminLogin, request: Request, db: AsyncSession = Depends(get_db)):
    """Exchange admin email/password for a JWT."""
    admin = await authenticate_admin(db, credentials.email, credentials.password)
    if not admin:
        record_failed_login(request)
        logger.warning("Failed admin login for %s", credentials.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    admin.last_login_at = datetime.utcnow()
    await db.commit()
    await db.refresh(admin)

    logger.info("Admin %s logged in", admin.email)
    return Token(access_token=create_admin_token(admin), admin=AdminOut.model_validate(admin))


@router.post("/register", response_model=AdminCreated, status_code=201)
async def register_admin(
    admin_data: AdminCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: Admin = Depends(get_current_admin),
):
    """Create another admin account. Requires an existing admin."""
    if await get_admin_by_email(db, admin_data.email):
        raise HTTPException(status_code=409, detail="Admin email already exists")

    admin = await create_admin(db, admin_data.email, admin_data.password, admin_data.name)
    logger.info("Admin %s created admin %s", current_admin.email, admin.email)
    return AdminCreated(message="Admin created successfully", admin=AdminOut.model_validate(admin))


@router.get("/me", response_model=AdminOut)
async def me(current_admin: Admin = Depends(get_current_admin)):
    return current_admin
