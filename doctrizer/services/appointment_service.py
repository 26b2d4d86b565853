"""Appointment service for business logic."""

from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.core.exceptions import AppointmentNotFoundException, DoctorNotFoundException
from doctrizer.core.formatting import format_date_label, format_time_label
from doctrizer.core.wizard import BookingIntent
from doctrizer.models.appointments import appointments
from doctrizer.models.doctors import doctors
from doctrizer.models.profiles import profiles
from doctrizer.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentSummary,
    AppointmentView,
    DoctorAppointmentItem,
    DoctorAppointmentListResponse,
    DoctorDashboardResponse,
    PatientAppointmentListResponse,
    PatientSummary,
)

logger = structlog.get_logger()

ACTIVE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)


def matches_view(appointment: dict, view: AppointmentView, today: date) -> bool:
    """
    Decide which tab of the patient's list an appointment belongs to.

    The tabs overlap: a cancelled appointment dated before today is listed
    under both "past" and "cancelled".
    """
    status = appointment["status"]
    appointment_date = appointment["appointment_date"]

    if view == AppointmentView.UPCOMING:
        return appointment_date >= today and status in ACTIVE_STATUSES
    if view == AppointmentView.PAST:
        return appointment_date < today or status == AppointmentStatus.COMPLETED.value
    if view == AppointmentView.CANCELLED:
        return status == AppointmentStatus.CANCELLED.value
    return True


def summarize_patients(rows: list[dict], today: date) -> list[PatientSummary]:
    """
    Group a doctor's appointments by patient.

    ``rows`` must carry ``patient_id`` plus the patient's profile fields and
    be ordered newest first; the output keeps that order of first appearance.
    """
    grouped: dict[UUID, list[dict]] = {}
    for row in rows:
        grouped.setdefault(row["patient_id"], []).append(row)

    summaries = []
    for patient_id, items in grouped.items():
        first = items[0]
        upcoming = [
            item
            for item in items
            if item["appointment_date"] >= today
            and item["status"] != AppointmentStatus.CANCELLED.value
        ]
        past_dates = [item["appointment_date"] for item in items if item["appointment_date"] < today]

        summaries.append(
            PatientSummary(
                user_id=patient_id,
                display_name=first.get("patient_name") or "Unknown Patient",
                email=first.get("patient_email") or "",
                phone=first.get("patient_phone"),
                total_appointments=len(items),
                last_appointment=max(past_dates) if past_dates else None,
                upcoming_appointments=len(upcoming),
            )
        )

    return summaries


def _to_detail(row: dict, today: date) -> AppointmentDetail:
    data = dict(row)
    data["doctor_name"] = data.get("doctor_name") or "Unknown Doctor"
    data["specialty"] = data.get("specialty") or "General Practice"
    data["date_label"] = format_date_label(row["appointment_date"], today)
    data["time_label"] = format_time_label(row["appointment_time"])
    return AppointmentDetail.model_validate(data)


def _to_doctor_item(row: dict, today: date) -> DoctorAppointmentItem:
    data = dict(row)
    data["patient_name"] = data.get("patient_name") or "Unknown Patient"
    data["patient_email"] = data.get("patient_email") or ""
    data["date_label"] = format_date_label(row["appointment_date"], today)
    data["time_label"] = format_time_label(row["appointment_time"])
    return DoctorAppointmentItem.model_validate(data)


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    @staticmethod
    def _patient_view_query():
        """Appointments joined with the doctor and the doctor's profile."""
        return select(
            appointments,
            doctors.c.specialty,
            doctors.c.consultation_fee,
            doctors.c.avatar_url.label("doctor_avatar_url"),
            profiles.c.display_name.label("doctor_name"),
            profiles.c.email.label("doctor_email"),
        ).select_from(
            appointments.join(doctors, appointments.c.doctor_id == doctors.c.id).outerjoin(
                profiles, profiles.c.user_id == doctors.c.user_id
            )
        )

    @staticmethod
    def _doctor_view_query():
        """Appointments joined with the patient's profile."""
        return select(
            appointments,
            profiles.c.display_name.label("patient_name"),
            profiles.c.email.label("patient_email"),
            profiles.c.phone.label("patient_phone"),
        ).select_from(
            appointments.outerjoin(profiles, profiles.c.user_id == appointments.c.patient_id)
        )

    # ------------------------------------------------------------------
    # Patient side
    # ------------------------------------------------------------------

    async def create_appointment(
        self,
        patient_id: UUID,
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Book an appointment in ``pending`` state.

        Nothing checks whether the slot is already taken.

        Args:
            patient_id: ID of the patient booking
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            DoctorNotFoundException: If the doctor does not exist
        """
        doctor_exists = await self.db.execute(
            select(doctors.c.id).where(doctors.c.id == data.doctor_id)
        )
        if doctor_exists.first() is None:
            raise DoctorNotFoundException()

        values = {
            "patient_id": patient_id,
            "doctor_id": data.doctor_id,
            "appointment_date": data.appointment_date,
            "appointment_time": data.appointment_time,
            "type": data.type.value,
            "location": data.location,
            "notes": data.notes,
            "status": AppointmentStatus.PENDING.value,
        }

        try:
            result = await self.db.execute(
                insert(appointments).values(**values).returning(appointments)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointment_create_failed", patient_id=str(patient_id), error=str(e))
            raise

        row = result.mappings().one()
        logger.info(
            "appointment_created",
            appointment_id=str(row["id"]),
            doctor_id=str(data.doctor_id),
            patient_id=str(patient_id),
        )
        return AppointmentResponse.model_validate(dict(row))

    async def book_from_intent(
        self,
        patient_id: UUID,
        intent: BookingIntent,
        location: str | None = None,
        notes: str | None = None,
    ) -> AppointmentResponse:
        """Insert the appointment a confirmed booking wizard produced."""
        return await self.create_appointment(
            patient_id,
            AppointmentCreate(
                doctor_id=intent.doctor_id,
                appointment_date=intent.appointment_date,
                appointment_time=intent.appointment_time,
                type=intent.type,
                location=location,
                notes=notes,
            ),
        )

    async def get_patient_appointment(
        self,
        appointment_id: UUID,
        patient_id: UUID,
        today: date | None = None,
    ) -> AppointmentDetail:
        """
        Get one of the patient's appointments with doctor details.

        Raises:
            AppointmentNotFoundException: If missing or owned by someone else
        """
        stmt = self._patient_view_query().where(
            and_(
                appointments.c.id == appointment_id,
                appointments.c.patient_id == patient_id,
            )
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if not row:
            raise AppointmentNotFoundException()

        return _to_detail(dict(row), today or date.today())

    async def _fetch_patient_rows(self, patient_id: UUID) -> list[dict]:
        stmt = (
            self._patient_view_query()
            .where(appointments.c.patient_id == patient_id)
            .order_by(
                appointments.c.appointment_date.desc(),
                appointments.c.appointment_time.desc(),
            )
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_patient_appointments(
        self,
        patient_id: UUID,
        view: AppointmentView = AppointmentView.ALL,
        today: date | None = None,
    ) -> PatientAppointmentListResponse:
        """List the patient's appointments for one tab, newest first."""
        today = today or date.today()
        rows = await self._fetch_patient_rows(patient_id)
        items = [_to_detail(row, today) for row in rows if matches_view(row, view, today)]
        return PatientAppointmentListResponse(view=view, total=len(items), items=items)

    async def summarize_patient_appointments(
        self,
        patient_id: UUID,
        today: date | None = None,
    ) -> AppointmentSummary:
        """Count the patient's appointments per tab."""
        today = today or date.today()
        rows = await self._fetch_patient_rows(patient_id)
        return AppointmentSummary(
            upcoming=sum(matches_view(r, AppointmentView.UPCOMING, today) for r in rows),
            past=sum(matches_view(r, AppointmentView.PAST, today) for r in rows),
            cancelled=sum(matches_view(r, AppointmentView.CANCELLED, today) for r in rows),
        )

    async def cancel_appointment(
        self,
        appointment_id: UUID,
        patient_id: UUID,
    ) -> AppointmentResponse:
        """Cancel one of the patient's own appointments."""
        return await self._set_status(
            and_(
                appointments.c.id == appointment_id,
                appointments.c.patient_id == patient_id,
            ),
            AppointmentStatus.CANCELLED,
            actor="patient",
        )

    # ------------------------------------------------------------------
    # Doctor side
    # ------------------------------------------------------------------

    async def approve_appointment(
        self, appointment_id: UUID, doctor_id: UUID
    ) -> AppointmentResponse:
        """Doctor accepts a request."""
        return await self._set_status(
            and_(appointments.c.id == appointment_id, appointments.c.doctor_id == doctor_id),
            AppointmentStatus.CONFIRMED,
            actor="doctor",
        )

    async def reject_appointment(
        self, appointment_id: UUID, doctor_id: UUID
    ) -> AppointmentResponse:
        """Doctor turns a request down."""
        return await self._set_status(
            and_(appointments.c.id == appointment_id, appointments.c.doctor_id == doctor_id),
            AppointmentStatus.CANCELLED,
            actor="doctor",
        )

    async def _set_status(
        self,
        condition,
        status: AppointmentStatus,
        actor: str,
    ) -> AppointmentResponse:
        # Single-row write: no version check and no guard on the current status.
        stmt = (
            update(appointments)
            .where(condition)
            .values(status=status.value, updated_at=datetime.now(UTC))
            .returning(appointments)
        )

        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointment_status_update_failed", status=status.value, error=str(e))
            raise

        row = result.mappings().first()
        if not row:
            raise AppointmentNotFoundException()

        logger.info(
            "appointment_status_updated",
            appointment_id=str(row["id"]),
            status=status.value,
            actor=actor,
        )
        return AppointmentResponse.model_validate(dict(row))

    async def _fetch_doctor_rows(
        self,
        doctor_id: UUID,
        status: AppointmentStatus | None = None,
        patient_id: UUID | None = None,
    ) -> list[dict]:
        conditions = [appointments.c.doctor_id == doctor_id]
        if status:
            conditions.append(appointments.c.status == status.value)
        if patient_id:
            conditions.append(appointments.c.patient_id == patient_id)

        stmt = (
            self._doctor_view_query()
            .where(and_(*conditions))
            .order_by(
                appointments.c.appointment_date.desc(),
                appointments.c.appointment_time.desc(),
            )
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list_doctor_appointments(
        self,
        doctor_id: UUID,
        status: AppointmentStatus | None = None,
        today: date | None = None,
    ) -> DoctorAppointmentListResponse:
        """List a doctor's appointments with patient names, newest first."""
        today = today or date.today()
        rows = await self._fetch_doctor_rows(doctor_id, status=status)
        items = [_to_doctor_item(row, today) for row in rows]
        return DoctorAppointmentListResponse(total=len(items), items=items)

    async def list_doctor_patients(
        self,
        doctor_id: UUID,
        today: date | None = None,
    ) -> list[PatientSummary]:
        """Everyone who has booked with the doctor, with visit counts."""
        rows = await self._fetch_doctor_rows(doctor_id)
        return summarize_patients(rows, today or date.today())

    async def patient_history(
        self,
        doctor_id: UUID,
        patient_id: UUID,
        today: date | None = None,
    ) -> DoctorAppointmentListResponse:
        """One patient's appointments with this doctor, newest first."""
        today = today or date.today()
        rows = await self._fetch_doctor_rows(doctor_id, patient_id=patient_id)
        items = [_to_doctor_item(row, today) for row in rows]
        return DoctorAppointmentListResponse(total=len(items), items=items)

    async def doctor_dashboard(
        self,
        doctor: dict,
        today: date | None = None,
    ) -> DoctorDashboardResponse:
        """Today's agenda and headline numbers for the doctor dashboard."""
        today = today or date.today()
        rows = await self._fetch_doctor_rows(doctor["id"])

        todays = sorted(
            (
                row
                for row in rows
                if row["appointment_date"] == today
                and row["status"] != AppointmentStatus.CANCELLED.value
            ),
            key=lambda row: row["appointment_time"],
        )

        return DoctorDashboardResponse(
            today_appointments=[_to_doctor_item(row, today) for row in todays],
            pending_requests=sum(
                row["status"] == AppointmentStatus.PENDING.value for row in rows
            ),
            total_patients=len({row["patient_id"] for row in rows}),
            rating=doctor.get("rating"),
            review_count=doctor.get("review_count") or 0,
        )
