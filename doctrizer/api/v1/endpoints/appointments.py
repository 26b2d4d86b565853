"""Patient appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from doctrizer.dependencies import CurrentPatient, DatabaseSession
from doctrizer.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentResponse,
    AppointmentSummary,
    AppointmentView,
    PatientAppointmentListResponse,
)
from doctrizer.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: CurrentPatient,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Book an appointment for the authenticated patient.

    Args:
        data: Appointment creation data
        current_user: Authenticated patient
        db: Database session

    Returns:
        Created appointment in pending state
    """
    service = AppointmentService(db)
    return await service.create_appointment(current_user["user_id"], data)


@router.get(
    "/",
    response_model=PatientAppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my appointments",
)
async def list_appointments(
    current_user: CurrentPatient,
    db: DatabaseSession,
    view: AppointmentView = Query(AppointmentView.ALL),
) -> PatientAppointmentListResponse:
    """
    List the patient's appointments for one tab.

    - **upcoming**: today or later, pending or confirmed
    - **past**: before today, or completed
    - **cancelled**: cancelled by either side
    """
    service = AppointmentService(db)
    return await service.list_patient_appointments(current_user["user_id"], view)


@router.get(
    "/summary",
    response_model=AppointmentSummary,
    status_code=status.HTTP_200_OK,
    summary="Count my appointments per tab",
)
async def appointment_summary(
    current_user: CurrentPatient,
    db: DatabaseSession,
) -> AppointmentSummary:
    """Counts shown on the appointments tabs."""
    service = AppointmentService(db)
    return await service.summarize_patient_appointments(current_user["user_id"])


@router.get(
    "/{appointment_id}",
    response_model=AppointmentDetail,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentPatient,
    db: DatabaseSession,
) -> AppointmentDetail:
    """
    Get one of the patient's appointments with doctor details.

    Raises:
        AppointmentNotFoundException: If missing or not the patient's own
    """
    service = AppointmentService(db)
    return await service.get_patient_appointment(appointment_id, current_user["user_id"])


@router.patch(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    current_user: CurrentPatient,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Cancel one of the patient's own appointments."""
    service = AppointmentService(db)
    return await service.cancel_appointment(appointment_id, current_user["user_id"])
