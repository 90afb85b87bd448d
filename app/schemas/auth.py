"""Pydantic schemas for authentication endpoints."""

import re
from datetime import datetime
from pydantic import BaseModel, EmailStr, field_validator


class AdminLogin(BaseModel):
    """Request schema for admin login."""
    email: EmailStr
    password: str


class AdminCreate(BaseModel):
    """Request schema for creating another admin."""
    email: EmailStr
    password: str
    name: str | None = None

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain at least one number")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        if v is not None and len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class AdminOut(BaseModel):
    """Response schema for admin info."""
    id: int
    email: str
    name: str | None = None
    role: str = "admin"
    last_login_at: datetime | None = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Response schema for login with the JWT token."""
    access_token: str
    token_type: str = "bearer"
    admin: AdminOut


class AdminCreated(BaseModel):
    message: str
    admin: AdminOut


class MessageResponse(BaseModel):
    """Generic success message response."""
    message: str
