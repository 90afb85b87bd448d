"""Authentication service for admin accounts.

Handles password hashing, JWT token generation/validation, and admin authentication.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import Admin
from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__default_ident="2b")

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def _truncate_password(password: str) -> str:
    """Truncate password to 72 bytes (bcrypt limit)."""
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        return password_bytes[:72].decode('utf-8', errors='ignore')
    return password


def hash_password(password: str) -> str:
    """Hash a plain-text password.

    Note: Bcrypt has a 72-byte password limit. We truncate longer passwords.
    """
    truncated = _truncate_password(password)
    return pwd_context.hash(truncated)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    truncated = _truncate_password(plain_password)
    return pwd_context.verify(truncated, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def create_admin_token(admin: Admin) -> str:
    return create_access_token({"sub": str(admin.id), "email": admin.email, "role": ADMIN_ROLE})


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT access token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning("JWT decode error: %s", e)
        return None


async def get_admin_by_email(db: AsyncSession, email: str) -> Optional[Admin]:
    """Fetch an admin by email, case-insensitively."""
    result = await db.execute(select(Admin).where(func.lower(Admin.email) == email.lower()))
    return result.scalar_one_or_none()


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> Optional[Admin]:
    """Authenticate an active admin by email and password."""
    admin = await get_admin_by_email(db, email)

    if not admin or not admin.is_active:
        return None

    if not verify_password(password, admin.password_hash):
        return None

    return admin


async def create_admin(db: AsyncSession, email: str, password: str, name: Optional[str] = None) -> Admin:
    """Insert a new active admin. Caller checks for duplicates first."""
    admin = Admin(
        email=email.lower(),
        password_hash=hash_password(password),
        name=name.strip() if name else email,
        is_active=True,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info("Created admin %s", admin.email)
    return admin
