"""Booking dialog endpoints.

A session walks a patient through type, date, time and confirmation for
one doctor. Every response carries the options for the current step.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from doctrizer.core.redis_client import CacheManager
from doctrizer.dependencies import CurrentPatient, DatabaseSession, get_cache_manager
from doctrizer.schemas.appointments import AppointmentResponse
from doctrizer.schemas.bookings import (
    BookingBack,
    BookingConfirm,
    BookingDateSelection,
    BookingSessionResponse,
    BookingStart,
    BookingTimeSelection,
    BookingTypeSelection,
)
from doctrizer.services.booking_service import BookingService

router = APIRouter()


def get_booking_service(
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> BookingService:
    """Dependency to get booking service instance."""
    return BookingService(cache_manager)


BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]


@router.post("/", response_model=BookingSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_booking(
    data: BookingStart,
    current_user: CurrentPatient,
    db: DatabaseSession,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Open the booking dialog for a doctor."""
    return await booking_service.start(db, current_user["user_id"], data.doctor_id)


@router.get("/{session_id}", response_model=BookingSessionResponse)
async def get_booking(
    session_id: str,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Current step and its options."""
    return booking_service.get(session_id, current_user["user_id"])


@router.put("/{session_id}/type", response_model=BookingSessionResponse)
async def select_booking_type(
    session_id: str,
    data: BookingTypeSelection,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Pick in-person, video or phone and move on to the date."""
    return booking_service.select_type(session_id, current_user["user_id"], data.type)


@router.put("/{session_id}/date", response_model=BookingSessionResponse)
async def select_booking_date(
    session_id: str,
    data: BookingDateSelection,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Pick a date in the booking horizon and move on to the time."""
    return booking_service.select_date(session_id, current_user["user_id"], data.date)


@router.put("/{session_id}/time", response_model=BookingSessionResponse)
async def select_booking_time(
    session_id: str,
    data: BookingTimeSelection,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Pick one of the offered slots and move on to confirmation."""
    return booking_service.select_time(session_id, current_user["user_id"], data.time)


@router.post("/{session_id}/back", response_model=BookingSessionResponse)
async def go_back(
    session_id: str,
    data: BookingBack,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> BookingSessionResponse:
    """Return to an earlier step; later selections are cleared."""
    return booking_service.go_back(session_id, current_user["user_id"], data.step)


@router.post(
    "/{session_id}/confirm",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def confirm_booking(
    session_id: str,
    data: BookingConfirm,
    current_user: CurrentPatient,
    db: DatabaseSession,
    booking_service: BookingServiceDep,
) -> AppointmentResponse:
    """
    Book the appointment.

    The appointment starts out **pending** until the doctor approves it.
    """
    return await booking_service.confirm(db, session_id, current_user["user_id"], data)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_booking(
    session_id: str,
    current_user: CurrentPatient,
    booking_service: BookingServiceDep,
) -> None:
    """Close the dialog without booking."""
    booking_service.close(session_id, current_user["user_id"])
