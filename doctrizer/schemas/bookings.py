"""Booking wizard session schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from doctrizer.core.wizard import BookingStep
from doctrizer.schemas.appointments import AppointmentType


class BookingStart(BaseModel):
    """Open the booking dialog for a doctor."""

    doctor_id: UUID


class BookingTypeSelection(BaseModel):
    type: AppointmentType


class BookingDateSelection(BaseModel):
    date: date


class BookingTimeSelection(BaseModel):
    time: str = Field(..., pattern=r"^\d{2}:\d{2}$", examples=["09:30"])


class BookingBack(BaseModel):
    step: BookingStep


class BookingConfirm(BaseModel):
    location: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class BookingSessionResponse(BaseModel):
    """Wizard state plus the choices for the current step."""

    session_id: str
    doctor_id: UUID
    step: BookingStep
    type: AppointmentType
    selected_date: date | None = None
    selected_time: str | None = None
    type_options: list[AppointmentType] = Field(default_factory=list)
    date_options: list[date] = Field(default_factory=list)
    time_options: list[str] = Field(default_factory=list)
