"""Weekly availability editor endpoints (doctor only)."""

from uuid import UUID

from fastapi import APIRouter, status

from doctrizer.dependencies import CurrentDoctor, DatabaseSession
from doctrizer.schemas.availability import AvailabilityListResponse, AvailabilitySave
from doctrizer.services.availability_service import AvailabilityService

router = APIRouter()


@router.get("/", response_model=AvailabilityListResponse)
async def list_availability(
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> AvailabilityListResponse:
    """Own availability rows ordered by weekday and start time."""
    return await AvailabilityService(db).list_availability(current_user["doctor_id"])


@router.put("/", response_model=AvailabilityListResponse)
async def save_availability(
    data: AvailabilitySave,
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> AvailabilityListResponse:
    """
    Save the editor's rows.

    - Rows without **id** are inserted together
    - Rows with **id** are updated one at a time

    Returns the refreshed list.
    """
    return await AvailabilityService(db).save_availability(current_user["doctor_id"], data.slots)


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability_slot(
    slot_id: UUID,
    current_user: CurrentDoctor,
    db: DatabaseSession,
) -> None:
    """Remove one availability row."""
    await AvailabilityService(db).delete_slot(current_user["doctor_id"], slot_id)
