"""Booking wizard sessions kept in Redis."""

import json
from datetime import date, datetime
from uuid import UUID, uuid4

import redis
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.config import settings
from doctrizer.core.exceptions import AppException, NotFoundException
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.slots import booking_dates
from doctrizer.core.wizard import BookingStep, BookingWizard
from doctrizer.schemas.appointments import AppointmentResponse, AppointmentType
from doctrizer.schemas.bookings import BookingConfirm, BookingSessionResponse
from doctrizer.services.appointment_service import AppointmentService
from doctrizer.services.doctor_service import DoctorService

logger = structlog.get_logger()


class BookingService:
    """
    Server-side home for the booking dialog.

    Each session holds one :class:`BookingWizard` for one patient. Closing
    the dialog deletes the session; an abandoned one expires with its TTL.
    """

    def __init__(self, cache_manager: CacheManager):
        """Initialize service with the cache that stores sessions."""
        self.cache = cache_manager

    @staticmethod
    def _get_session_key(session_id: str) -> str:
        return f"booking:{session_id}"

    def _save(self, session_id: str, patient_id: UUID, wizard: BookingWizard) -> None:
        stored = self.cache.set_json(
            self._get_session_key(session_id),
            {"patient_id": str(patient_id), "wizard": wizard.to_dict()},
            ttl=settings.booking_session_ttl_seconds,
        )
        if not stored:
            raise AppException("Booking is temporarily unavailable", status_code=503)

    def _load(self, session_id: str, patient_id: UUID) -> BookingWizard:
        # An outage is a 503, never an expired session.
        try:
            raw = self.cache.redis.get(self._get_session_key(session_id))
        except redis.RedisError as e:
            logger.warning("booking_session_read_failed", session_id=session_id, error=str(e))
            raise AppException("Booking is temporarily unavailable", status_code=503) from e

        data = json.loads(raw) if raw else None

        # Someone else's session looks the same as an expired one.
        if not data or data.get("patient_id") != str(patient_id):
            raise NotFoundException("Booking session not found or expired")

        return BookingWizard.from_dict(data["wizard"])

    @staticmethod
    def describe(
        session_id: str,
        wizard: BookingWizard,
        now: datetime | None = None,
    ) -> BookingSessionResponse:
        """Session state plus the options the current step offers."""
        now = now or datetime.now()
        response = BookingSessionResponse(
            session_id=session_id,
            doctor_id=wizard.doctor_id,
            step=wizard.step,
            type=wizard.appointment_type,
            selected_date=wizard.selected_date,
            selected_time=wizard.selected_time,
        )

        if wizard.step == BookingStep.TYPE:
            response.type_options = list(AppointmentType)
        elif wizard.step == BookingStep.DATE:
            response.date_options = booking_dates(now.date())
        elif wizard.step == BookingStep.TIME:
            response.time_options = wizard.available_slots(now)

        return response

    async def start(
        self,
        db: AsyncSession,
        patient_id: UUID,
        doctor_id: UUID,
    ) -> BookingSessionResponse:
        """Open a booking session for a doctor."""
        await DoctorService(self.cache).require_doctor(db, doctor_id)

        session_id = uuid4().hex
        wizard = BookingWizard(doctor_id)
        self._save(session_id, patient_id, wizard)

        logger.info(
            "booking_started",
            session_id=session_id,
            doctor_id=str(doctor_id),
            patient_id=str(patient_id),
        )
        return self.describe(session_id, wizard)

    def get(self, session_id: str, patient_id: UUID) -> BookingSessionResponse:
        """Current state of a session."""
        return self.describe(session_id, self._load(session_id, patient_id))

    def select_type(
        self, session_id: str, patient_id: UUID, appointment_type: AppointmentType
    ) -> BookingSessionResponse:
        wizard = self._load(session_id, patient_id)
        wizard.select_type(appointment_type)
        self._save(session_id, patient_id, wizard)
        return self.describe(session_id, wizard)

    def select_date(self, session_id: str, patient_id: UUID, day: date) -> BookingSessionResponse:
        wizard = self._load(session_id, patient_id)
        wizard.select_date(day)
        self._save(session_id, patient_id, wizard)
        return self.describe(session_id, wizard)

    def select_time(self, session_id: str, patient_id: UUID, slot: str) -> BookingSessionResponse:
        wizard = self._load(session_id, patient_id)
        wizard.select_time(slot)
        self._save(session_id, patient_id, wizard)
        return self.describe(session_id, wizard)

    def go_back(
        self, session_id: str, patient_id: UUID, step: BookingStep
    ) -> BookingSessionResponse:
        wizard = self._load(session_id, patient_id)
        wizard.go_back(step)
        self._save(session_id, patient_id, wizard)
        return self.describe(session_id, wizard)

    async def confirm(
        self,
        db: AsyncSession,
        session_id: str,
        patient_id: UUID,
        data: BookingConfirm,
    ) -> AppointmentResponse:
        """
        Confirm the wizard and book the appointment.

        The session is only removed once the insert succeeded, so a failed
        booking can be retried from the confirm step.
        """
        wizard = self._load(session_id, patient_id)
        intent = wizard.confirm()

        appointment = await AppointmentService(db).book_from_intent(
            patient_id,
            intent,
            location=data.location,
            notes=data.notes,
        )

        self.cache.delete(self._get_session_key(session_id))
        logger.info(
            "booking_confirmed",
            session_id=session_id,
            appointment_id=str(appointment.id),
        )
        return appointment

    def close(self, session_id: str, patient_id: UUID) -> None:
        """Abandon a session."""
        self._load(session_id, patient_id)
        self.cache.delete(self._get_session_key(session_id))
        logger.info("booking_closed", session_id=session_id)
