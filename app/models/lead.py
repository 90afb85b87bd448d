"""Lead model: one prospective-student inquiry."""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum
from app.core.database import Base


class LeadStatus(str, enum.Enum):
    """Lead status enum."""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    LOST = "lost"


LEAD_STATUSES = [s.value for s in LeadStatus]


class Lead(Base):
    """Lead model.

    sheet_row_id is the 1-based row of the lead in the Google Sheet. It stays
    NULL until the lead has been appended and is never changed afterwards.
    """
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=False)
    course = Column(String(255), nullable=False)
    college = Column(String(255), nullable=False)
    year = Column(String(10), nullable=False)
    status = Column(
        Enum(
            LeadStatus,
            name="lead_status",
            native_enum=False,
            create_constraint=True,
            length=50,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=LeadStatus.NEW,
        index=True,
    )
    sheet_row_id = Column(Integer, nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
