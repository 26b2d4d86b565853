"""Doctor search and profile endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from doctrizer.core.exceptions import DoctorNotFoundException
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.slots import generate_time_slots
from doctrizer.dependencies import CurrentDoctor, DatabaseSession, get_cache_manager
from doctrizer.schemas.doctors import (
    SPECIALTIES,
    DoctorAvailabilityFilter,
    DoctorResponse,
    DoctorSearchParams,
    DoctorSearchResponse,
    DoctorSlotsResponse,
    DoctorUpdate,
)
from doctrizer.services.doctor_service import DoctorService

router = APIRouter()


def get_doctor_service(
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> DoctorService:
    """Dependency to get doctor service instance."""
    return DoctorService(cache_manager)


DoctorServiceDep = Annotated[DoctorService, Depends(get_doctor_service)]


@router.get("/", response_model=DoctorSearchResponse)
async def search_doctors(
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
    q: str | None = Query(None, description="Name, specialty or location"),
    specialty: str | None = Query(None, description="Specialty or 'All Specialties'"),
    availability: DoctorAvailabilityFilter = Query(DoctorAvailabilityFilter.ANY),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of records"),
) -> DoctorSearchResponse:
    """
    Search doctors for the patient dashboard.

    - **q**: Case-insensitive match on name, specialty or location
    - **specialty**: Exact specialty, empty or 'All Specialties' for any
    - **availability**: Weekly availability window
    """
    params = DoctorSearchParams(
        q=q,
        specialty=specialty,
        availability=availability,
        skip=skip,
        limit=limit,
    )
    return await doctor_service.search_doctors(db, params)


@router.get("/specialties", response_model=list[str])
async def list_specialties() -> list[str]:
    """Specialties offered in the search filter."""
    return SPECIALTIES


@router.get("/me", response_model=DoctorResponse)
async def get_my_doctor_profile(
    current_user: CurrentDoctor,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> DoctorResponse:
    """Get the calling doctor's practice profile."""
    doctor = await doctor_service.require_doctor(db, current_user["doctor_id"])
    return DoctorResponse.model_validate(doctor)


@router.patch("/me", response_model=DoctorResponse)
async def update_my_doctor_profile(
    data: DoctorUpdate,
    current_user: CurrentDoctor,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> DoctorResponse:
    """Update the calling doctor's practice profile."""
    doctor = await doctor_service.update_doctor(db, current_user["doctor_id"], data)

    if not doctor:
        raise DoctorNotFoundException()

    return DoctorResponse.model_validate(doctor)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: UUID,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> DoctorResponse:
    """Get doctor details by ID."""
    doctor = await doctor_service.require_doctor(db, doctor_id)
    return DoctorResponse.model_validate(doctor)


@router.get(
    "/{doctor_id}/slots",
    response_model=DoctorSlotsResponse,
    status_code=status.HTTP_200_OK,
)
async def get_doctor_slots(
    doctor_id: UUID,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
    day: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
) -> DoctorSlotsResponse:
    """
    Bookable start times for a date.

    The fixed daily window is used; already booked times are not removed.
    """
    await doctor_service.require_doctor(db, doctor_id)
    return DoctorSlotsResponse(doctor_id=doctor_id, date=day, slots=generate_time_slots(day))
