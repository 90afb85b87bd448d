"""Lead store: persistence and querying of leads.

The store owns its sessions (one per operation) so it can be used both from
request handlers and from background sheet sync work that outlives the request.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import DuplicateLeadError, LeadValidationError
from app.models.lead import LEAD_STATUSES, Lead, LeadStatus

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone", "course", "college", "year")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_DIGITS = 10


def sanitize(value: Any) -> Any:
    """Trim whitespace and strip angle brackets from string input."""
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def is_valid_phone(phone: str) -> bool:
    return len(re.sub(r"\D", "", phone)) >= MIN_PHONE_DIGITS


@dataclass
class LeadFilters:
    """Admin list filters. All optional; course and search are case-insensitive substrings."""
    status: Optional[str] = None
    course: Optional[str] = None
    search: Optional[str] = None

    def apply(self, query):
        if self.status:
            query = query.where(Lead.status == LeadStatus(self.status))
        if self.course:
            query = query.where(func.lower(Lead.course).like(f"%{self.course.lower()}%"))
        if self.search:
            pattern = f"%{self.search.lower()}%"
            query = query.where(
                or_(func.lower(Lead.name).like(pattern), func.lower(Lead.email).like(pattern))
            )
        return query


class LeadStore:
    """CRUD over the leads table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, fields: Mapping[str, Any]) -> Lead:
        """Validate, sanitize and insert a new lead with status 'new'.

        Raises LeadValidationError for missing/malformed fields and
        DuplicateLeadError if the (lower-cased) email is already registered.
        """
        values = {}
        for field in REQUIRED_FIELDS:
            value = fields.get(field)
            if not isinstance(value, str) or not sanitize(value):
                raise LeadValidationError("All fields are required")
            values[field] = sanitize(value)
        values["email"] = values["email"].lower()

        if not is_valid_email(values["email"]):
            raise LeadValidationError("Invalid email format")
        if not is_valid_phone(values["phone"]):
            raise LeadValidationError("Invalid phone number")

        now = datetime.utcnow()
        lead = Lead(**values, status=LeadStatus.NEW, created_at=now, updated_at=now)

        async with self._session_factory() as db:
            db.add(lead)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info("Rejected duplicate lead submission for %s", values["email"])
                raise DuplicateLeadError()
            await db.refresh(lead)

        logger.info("Created lead %d: %s (%s)", lead.id, lead.name, lead.course)
        return lead

    async def list(self, offset: int = 0, limit: int = 10, filters: Optional[LeadFilters] = None) -> List[Lead]:
        """Return leads newest first."""
        filters = filters or LeadFilters()
        query = filters.apply(select(Lead))
        query = query.order_by(Lead.created_at.desc(), Lead.id.desc()).offset(offset).limit(limit)

        async with self._session_factory() as db:
            result = await db.execute(query)
            return list(result.scalars().all())

    async def count(self, filters: Optional[LeadFilters] = None) -> int:
        filters = filters or LeadFilters()
        query = filters.apply(select(func.count(Lead.id)))

        async with self._session_factory() as db:
            result = await db.execute(query)
            return result.scalar() or 0

    async def get_by_id(self, lead_id: int) -> Optional[Lead]:
        async with self._session_factory() as db:
            result = await db.execute(select(Lead).where(Lead.id == lead_id))
            return result.scalar_one_or_none()

    async def update_status(self, lead_id: int, status: str) -> Optional[Lead]:
        """Set a new status and refresh updated_at. Returns None if the lead does not exist."""
        if status not in LEAD_STATUSES:
            raise LeadValidationError("Invalid status")

        async with self._session_factory() as db:
            result = await db.execute(select(Lead).where(Lead.id == lead_id))
            lead = result.scalar_one_or_none()
            if not lead:
                return None

            lead.status = LeadStatus(status)
            lead.updated_at = datetime.utcnow()
            await db.commit()
            await db.refresh(lead)

        logger.info("Updated lead %d status to %s", lead_id, status)
        return lead

    async def delete(self, lead_id: int) -> bool:
        """Delete a lead. Its sheet row, if any, is left in place."""
        async with self._session_factory() as db:
            result = await db.execute(delete(Lead).where(Lead.id == lead_id))
            await db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted lead %d", lead_id)
        return deleted

    async def set_external_row_ref(self, lead_id: int, row_ref: int) -> bool:
        """Record the sheet row of a lead.

        Only applies while sheet_row_id is still NULL. Returns False when the
        lead is gone or already has a row, in which case nothing is changed.
        """
        async with self._session_factory() as db:
            result = await db.execute(
                update(Lead)
                .where(Lead.id == lead_id, Lead.sheet_row_id.is_(None))
                .values(sheet_row_id=row_ref)
            )
            await db.commit()
        return result.rowcount > 0

    async def list_unsynced(self, limit: int = 100) -> List[Lead]:
        """Leads without a sheet row, oldest first."""
        query = (
            select(Lead)
            .where(Lead.sheet_row_id.is_(None))
            .order_by(Lead.created_at.asc(), Lead.id.asc())
            .limit(limit)
        )
        async with self._session_factory() as db:
            result = await db.execute(query)
            return list(result.scalars().all())
