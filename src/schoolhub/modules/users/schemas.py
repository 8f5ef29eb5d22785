"""
User Schemas

Pydantic schemas for user profiles. Password hashes never leave the
service layer.
"""

from pydantic import EmailStr, Field

from schoolhub.modules.shared import CamelModel, UTCDateTime
from schoolhub.modules.users.models import UserRole


class UserResponse(CamelModel):
    """Public user profile."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    phone: str | None = None
    address: str | None = None
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserSummary(CamelModel):
    """Compact user reference used inside rosters and request listings."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserUpdate(CamelModel):
    """
    Request body for PUT /users/{id}.

    email and role are accepted so that an attempt to change them can be
    rejected explicitly rather than silently ignored.
    """

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)
    is_active: bool | None = None
    email: EmailStr | None = None
    role: UserRole | None = None
