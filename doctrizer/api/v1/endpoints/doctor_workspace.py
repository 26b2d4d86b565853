"""Doctor workspace endpoints: requests, patients and dashboard."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from doctrizer.dependencies import CacheManagerDep, CurrentDoctor, DatabaseSession
from doctrizer.schemas.appointments import (
    AppointmentResponse,
    AppointmentStatus,
    DoctorAppointmentListResponse,
    DoctorDashboardResponse,
    PatientSummary,
)
from doctrizer.services.appointment_service import AppointmentService
from doctrizer.services.doctor_service import DoctorService

router = APIRouter(prefix="/doctor")


@router.get(
    "/appointments",
    response_model=DoctorAppointmentListResponse,
    summary="List appointments booked with me",
)
async def list_doctor_appointments(
    current_user: CurrentDoctor,
    db: DatabaseSession,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
) -> DoctorAppointmentListResponse:
    """Appointments with patient names, newest first, optionally by status."""
    service = AppointmentService(db)
    return await service.list_doctor_appointments(current_user["doctor_id"], status=status_filter)


@router.patch(
    "/appointments/{appointment_id}/approve",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve appointment request",
)
async def approve_appointment(
    appointment_id: UUID,
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Mark the appointment confirmed."""
    service = AppointmentService(db)
    return await service.approve_appointment(appointment_id, current_user["doctor_id"])


@router.patch(
    "/appointments/{appointment_id}/reject",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject appointment request",
)
async def reject_appointment(
    appointment_id: UUID,
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Mark the appointment cancelled."""
    service = AppointmentService(db)
    return await service.reject_appointment(appointment_id, current_user["doctor_id"])


@router.get("/patients", response_model=list[PatientSummary], summary="List my patients")
async def list_patients(
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> list[PatientSummary]:
    """
    Everyone who has booked with the doctor.

    Each entry carries the total visit count, the most recent past visit
    and the number of upcoming, non-cancelled visits.
    """
    service = AppointmentService(db)
    return await service.list_doctor_patients(current_user["doctor_id"])


@router.get(
    "/patients/{patient_id}/appointments",
    response_model=DoctorAppointmentListResponse,
    summary="Patient history",
)
async def patient_history(
    patient_id: UUID,
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> DoctorAppointmentListResponse:
    """One patient's appointments with the doctor, newest first."""
    service = AppointmentService(db)
    return await service.patient_history(current_user["doctor_id"], patient_id)


@router.get("/dashboard", response_model=DoctorDashboardResponse, summary="Doctor dashboard")
async def dashboard(
    current_user: CurrentDoctor,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> DoctorDashboardResponse:
    """Today's agenda, pending requests, patient count and rating."""
    doctor = await DoctorService(cache_manager).require_doctor(db, current_user["doctor_id"])
    return await AppointmentService(db).doctor_dashboard(doctor)
