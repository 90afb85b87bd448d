"""Seed the bootstrap admin account on app startup."""

import logging
from app.core.config import settings
from app.core.database import async_session
from app.services.auth import create_admin, get_admin_by_email

logger = logging.getLogger(__name__)


async def seed_admin():
    """Create the admin from ADMIN_EMAIL / ADMIN_PASSWORD if it doesn't exist."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("Admin credentials not provided, skipping admin seed")
        return

    async with async_session() as db:
        try:
            if await get_admin_by_email(db, settings.ADMIN_EMAIL):
                logger.info("Admin already exists: %s", settings.ADMIN_EMAIL)
                return

            await create_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, "Admin")
            logger.info("Admin created automatically: %s", settings.ADMIN_EMAIL)
        except Exception as e:
            logger.error("Failed to seed admin account: %s", e)
            await db.rollback()
