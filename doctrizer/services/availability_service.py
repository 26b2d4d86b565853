"""Availability service for the doctor's weekly schedule."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.core.exceptions import NotFoundException, ValidationException
from doctrizer.models.doctor_availability import doctor_availability
from doctrizer.schemas.availability import (
    AvailabilityListResponse,
    AvailabilitySlotIn,
    AvailabilitySlotResponse,
)

logger = structlog.get_logger()


class AvailabilityService:
    """Service for managing doctor availability rows."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def list_availability(self, doctor_id: UUID) -> AvailabilityListResponse:
        """List a doctor's rows ordered by weekday, then start time."""
        stmt = (
            select(doctor_availability)
            .where(doctor_availability.c.doctor_id == doctor_id)
            .order_by(doctor_availability.c.day_of_week, doctor_availability.c.start_time)
        )
        result = await self.db.execute(stmt)

        return AvailabilityListResponse(
            items=[
                AvailabilitySlotResponse.model_validate(dict(row))
                for row in result.mappings().all()
            ]
        )

    async def save_availability(
        self,
        doctor_id: UUID,
        slots: list[AvailabilitySlotIn],
    ) -> AvailabilityListResponse:
        """
        Save the editor's rows.

        New rows go in with a single insert. Existing rows are updated one by
        one, each committed on its own, so a failure part way through leaves
        the earlier rows saved.

        Args:
            doctor_id: Owning doctor
            slots: Rows from the editor

        Returns:
            The refreshed availability list

        Raises:
            NotFoundException: If an existing row does not belong to the doctor
            ValidationException: If a row does not end after it starts
        """
        for slot in slots:
            if slot.end_time <= slot.start_time:
                raise ValidationException(
                    f"End time must be after start time on day {slot.day_of_week}"
                )

        new_slots = [slot for slot in slots if slot.id is None]
        existing_slots = [slot for slot in slots if slot.id is not None]

        if new_slots:
            await self.db.execute(
                insert(doctor_availability),
                [
                    {
                        "doctor_id": doctor_id,
                        "day_of_week": slot.day_of_week,
                        "start_time": slot.start_time,
                        "end_time": slot.end_time,
                        "is_available": slot.is_available,
                    }
                    for slot in new_slots
                ],
            )
            await self.db.commit()

        for slot in existing_slots:
            stmt = (
                update(doctor_availability)
                .where(
                    and_(
                        doctor_availability.c.id == slot.id,
                        doctor_availability.c.doctor_id == doctor_id,
                    )
                )
                .values(
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    is_available=slot.is_available,
                    updated_at=datetime.now(UTC),
                )
                .returning(doctor_availability.c.id)
            )
            result = await self.db.execute(stmt)
            await self.db.commit()

            if result.first() is None:
                logger.warning(
                    "availability_slot_missing",
                    doctor_id=str(doctor_id),
                    slot_id=str(slot.id),
                )
                raise NotFoundException("Availability slot not found")

        logger.info(
            "availability_saved",
            doctor_id=str(doctor_id),
            inserted=len(new_slots),
            updated=len(existing_slots),
        )

        return await self.list_availability(doctor_id)

    async def delete_slot(self, doctor_id: UUID, slot_id: UUID) -> None:
        """
        Remove one availability row.

        Raises:
            NotFoundException: If the row is missing or owned by another doctor
        """
        stmt = (
            delete(doctor_availability)
            .where(
                and_(
                    doctor_availability.c.id == slot_id,
                    doctor_availability.c.doctor_id == doctor_id,
                )
            )
            .returning(doctor_availability.c.id)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        if result.first() is None:
            raise NotFoundException("Availability slot not found")

        logger.info("availability_slot_removed", doctor_id=str(doctor_id), slot_id=str(slot_id))
