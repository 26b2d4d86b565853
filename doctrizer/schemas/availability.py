"""Availability schemas for the doctor's weekly schedule editor."""

from datetime import datetime, time
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class AvailabilitySlotIn(BaseModel):
    """
    One row from the editor.

    Rows without ``id`` are new and get inserted; rows with ``id`` update the
    stored row's times and flag. ``day_of_week`` is only used on insert.
    """

    id: UUID | None = None
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    is_available: bool = True


class AvailabilitySave(BaseModel):
    """Batch save request."""

    slots: list[AvailabilitySlotIn] = Field(default_factory=list)


class AvailabilitySlotResponse(BaseModel):
    """Stored availability row."""

    id: UUID
    doctor_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]


class AvailabilityListResponse(BaseModel):
    """A doctor's availability, ordered by day then start time."""

    items: list[AvailabilitySlotResponse]
