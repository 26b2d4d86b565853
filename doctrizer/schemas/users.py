"""User and profile schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Account role; decides which dashboard a user gets."""

    PATIENT = "patient"
    DOCTOR = "doctor"


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's profile."""

    display_name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)


class ProfileResponse(BaseModel):
    """Profile as returned to its owner."""

    user_id: UUID
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: UserRole = UserRole.PATIENT
    doctor_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
