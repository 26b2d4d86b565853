"""Booking wizard state machine.

The flow is linear: ``type -> date -> time -> confirm``. Each selection
advances one step; going back to an earlier step discards every selection
made after it. Confirming only produces a :class:`BookingIntent`; writing
the appointment is the caller's job.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from doctrizer.core.exceptions import BadRequestException
from doctrizer.core.slots import booking_dates, generate_time_slots, parse_slot
from doctrizer.schemas.appointments import AppointmentType


class BookingStep(str, Enum):
    """Wizard steps in order."""

    TYPE = "type"
    DATE = "date"
    TIME = "time"
    CONFIRM = "confirm"

    @property
    def position(self) -> int:
        return STEP_ORDER.index(self)


STEP_ORDER = [BookingStep.TYPE, BookingStep.DATE, BookingStep.TIME, BookingStep.CONFIRM]


class WizardStateError(BadRequestException):
    """Raised when a selection does not fit the wizard's current step."""


class BookingIntent(BaseModel):
    """What the patient asked for once the wizard is confirmed."""

    doctor_id: UUID
    appointment_date: date
    appointment_time: time
    type: AppointmentType


class BookingWizard:
    """Collects type, date and time for one doctor."""

    def __init__(
        self,
        doctor_id: UUID,
        step: BookingStep = BookingStep.TYPE,
        appointment_type: AppointmentType = AppointmentType.IN_PERSON,
        selected_date: date | None = None,
        selected_time: str | None = None,
    ):
        self.doctor_id = doctor_id
        self.step = step
        self.appointment_type = appointment_type
        self.selected_date = selected_date
        self.selected_time = selected_time

    def _enter(self, step: BookingStep) -> None:
        # Selecting for an earlier step rewinds to it first.
        if step.position > self.step.position:
            raise WizardStateError(
                f"Cannot choose a {step.value} before completing the {self.step.value} step"
            )
        if step.position < self.step.position:
            self.go_back(step)

    def select_type(self, appointment_type: AppointmentType) -> BookingStep:
        """Choose the consultation type and move on to the date."""
        self._enter(BookingStep.TYPE)
        self.appointment_type = AppointmentType(appointment_type)
        self.step = BookingStep.DATE
        return self.step

    def select_date(self, day: date, today: date | None = None) -> BookingStep:
        """Choose a date within the booking horizon and move on to the time."""
        self._enter(BookingStep.DATE)
        if day not in booking_dates(today):
            raise WizardStateError(f"{day.isoformat()} is not open for booking")
        self.selected_date = day
        self.selected_time = None
        self.step = BookingStep.TIME
        return self.step

    def select_time(self, slot: str, now: datetime | None = None) -> BookingStep:
        """Choose one of the generated slots for the selected date."""
        self._enter(BookingStep.TIME)
        if self.selected_date is None:
            raise WizardStateError("Choose a date before choosing a time")
        if slot not in self.available_slots(now):
            raise WizardStateError(f"{slot} is not an available time slot")
        self.selected_time = slot
        self.step = BookingStep.CONFIRM
        return self.step

    def go_back(self, step: BookingStep) -> BookingStep:
        """Return to an earlier step, dropping the selections after it."""
        step = BookingStep(step)
        if step.position >= self.step.position:
            raise WizardStateError(f"Cannot go back from {self.step.value} to {step.value}")

        if step.position < BookingStep.DATE.position:
            self.selected_date = None
        if step.position < BookingStep.TIME.position:
            self.selected_time = None

        self.step = step
        return self.step

    def available_slots(self, now: datetime | None = None) -> list[str]:
        if self.selected_date is None:
            return []
        return generate_time_slots(self.selected_date, now)

    def confirm(self) -> BookingIntent:
        """Finish the flow and hand back the booking intent."""
        if self.step is not BookingStep.CONFIRM:
            raise WizardStateError(f"Cannot confirm from the {self.step.value} step")
        if self.selected_date is None or self.selected_time is None:
            raise WizardStateError("Date and time are required to confirm")

        return BookingIntent(
            doctor_id=self.doctor_id,
            appointment_date=self.selected_date,
            appointment_time=parse_slot(self.selected_time),
            type=self.appointment_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "doctor_id": str(self.doctor_id),
            "step": self.step.value,
            "type": self.appointment_type.value,
            "date": self.selected_date.isoformat() if self.selected_date else None,
            "time": self.selected_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookingWizard":
        return cls(
            doctor_id=UUID(data["doctor_id"]),
            step=BookingStep(data["step"]),
            appointment_type=AppointmentType(data["type"]),
            selected_date=date.fromisoformat(data["date"]) if data.get("date") else None,
            selected_time=data.get("time"),
        )
