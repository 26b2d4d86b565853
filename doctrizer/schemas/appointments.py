"""Appointment schemas for request/response validation."""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class AppointmentType(str, Enum):
    """How the consultation takes place."""

    IN_PERSON = "in-person"
    VIDEO = "video"
    PHONE = "phone"


class AppointmentView(str, Enum):
    """Tabs on the patient's appointment list."""

    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELLED = "cancelled"


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment directly."""

    doctor_id: UUID
    appointment_date: date
    appointment_time: time
    type: AppointmentType = AppointmentType.IN_PERSON
    location: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID
    appointment_date: date
    appointment_time: time
    type: AppointmentType
    status: AppointmentStatus
    location: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AppointmentDetail(AppointmentResponse):
    """Appointment joined with the doctor and the doctor's profile."""

    doctor_name: str = "Unknown Doctor"
    doctor_email: str | None = None
    specialty: str = "General Practice"
    doctor_avatar_url: str | None = None
    consultation_fee: Decimal | None = None
    date_label: str
    time_label: str


class PatientAppointmentListResponse(BaseModel):
    """Patient appointment list for one view."""

    view: AppointmentView
    total: int
    items: list[AppointmentDetail]


class AppointmentSummary(BaseModel):
    """Counts shown above the patient's appointment tabs."""

    upcoming: int
    past: int
    cancelled: int


class DoctorAppointmentItem(AppointmentResponse):
    """Appointment as the doctor sees it."""

    patient_name: str = "Unknown Patient"
    patient_email: str = ""
    date_label: str
    time_label: str


class DoctorAppointmentListResponse(BaseModel):
    """List of a doctor's appointments."""

    total: int
    items: list[DoctorAppointmentItem]


class PatientSummary(BaseModel):
    """One row of the doctor's patient list."""

    user_id: UUID
    display_name: str
    email: str
    phone: str | None = None
    total_appointments: int
    last_appointment: date | None = None
    upcoming_appointments: int


class DoctorDashboardResponse(BaseModel):
    """Numbers and today's agenda for the doctor dashboard."""

    today_appointments: list[DoctorAppointmentItem]
    pending_requests: int
    total_patients: int
    rating: Decimal | None = None
    review_count: int = 0
