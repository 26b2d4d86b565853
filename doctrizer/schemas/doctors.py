"""Doctor schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer

SPECIALTIES = [
    "Cardiology",
    "Dermatology",
    "Neurology",
    "Orthopedics",
    "Pediatrics",
    "Psychiatry",
    "General Medicine",
    "General Practice",
    "Endocrinology",
]

ALL_SPECIALTIES = "All Specialties"


class DoctorAvailabilityFilter(str, Enum):
    """Availability choices offered by the doctor search."""

    ANY = "any"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    NEXT_30_DAYS = "next_30_days"


# ============================================================================
# Doctor Profile Schemas
# ============================================================================


class DoctorUpdate(BaseModel):
    """Fields a doctor can change on their own profile."""

    specialty: str | None = Field(None, min_length=1, max_length=200)
    bio: str | None = None
    location: str | None = None
    years_experience: int | None = Field(None, ge=0, le=80)
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    avatar_url: str | None = None
    offers_video_consult: bool | None = None


class DoctorResponse(BaseModel):
    """Doctor row joined with the owner's profile."""

    id: UUID
    user_id: UUID
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None
    specialty: str | None = None
    bio: str | None = None
    location: str | None = None
    years_experience: int | None = None
    consultation_fee: Decimal | None = None
    avatar_url: str | None = None
    offers_video_consult: bool = True
    rating: Decimal | None = None
    review_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_serializer("consultation_fee", "rating", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None


# ============================================================================
# Doctor Search Schemas
# ============================================================================


class DoctorCard(BaseModel):
    """Doctor as listed in the patient's search results."""

    id: UUID
    name: str
    specialty: str
    rating: Decimal | None = None
    review_count: int = 0
    experience: str
    location: str | None = None
    consultation_fee: Decimal | None = None
    avatar: str | None = None
    is_available_today: bool = False
    offers_video_consult: bool = True

    @field_serializer("consultation_fee", "rating", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None


class DoctorSearchParams(BaseModel):
    """Doctor search parameters."""

    q: str | None = None
    specialty: str | None = None
    availability: DoctorAvailabilityFilter = DoctorAvailabilityFilter.ANY
    skip: int = Field(0, ge=0)
    limit: int = Field(20, ge=1, le=100)


class DoctorSearchResponse(BaseModel):
    """Doctor search results."""

    total: int
    items: list[DoctorCard]


class DoctorSlotsResponse(BaseModel):
    """Bookable start times for a doctor on one date."""

    doctor_id: UUID
    date: date
    slots: list[str]
