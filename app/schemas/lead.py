"""Pydantic schemas for Leads."""

import re
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from app.models.lead import LeadStatus

NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")


class LeadSubmit(BaseModel):
    """Public lead form submission.

    Email and phone format are checked by the lead store so that the caller
    gets a 400 with the store's message.
    """
    name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=20)
    course: str = Field(..., max_length=255)
    college: str = Field(..., max_length=255)
    year: str = Field(..., max_length=10)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 255 characters")
        if not NAME_RE.match(v):
            raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("course", "college")
    @classmethod
    def check_min_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Must be between 2 and 255 characters")
        return v

    @field_validator("year")
    @classmethod
    def check_year(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Year is required")
        return v


class LeadOut(BaseModel):
    """Schema for returning lead details."""
    id: int
    name: str
    email: str
    phone: str
    course: str
    college: str
    year: str
    status: LeadStatus
    sheet_row_id: Optional[int] = None
    reminder_sent: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadMessage(BaseModel):
    message: str
    lead: LeadOut


class LeadStatusUpdate(BaseModel):
    """Schema for updating lead status."""
    status: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class LeadList(BaseModel):
    data: List[LeadOut]
    pagination: Pagination


class SyncFailure(BaseModel):
    lead_id: int
    error: str


class SyncSummary(BaseModel):
    """Result of a reconcile sweep."""
    success: bool = True
    synced: int = 0
    failed: int = 0
    failed_details: List[SyncFailure] = []
    error: Optional[str] = None
