"""Doctor service for business logic."""

from datetime import UTC, date, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.core.exceptions import DoctorNotFoundException
from doctrizer.core.formatting import format_experience
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.slots import day_of_week
from doctrizer.models.doctor_availability import doctor_availability
from doctrizer.models.doctors import doctors
from doctrizer.models.profiles import profiles
from doctrizer.schemas.doctors import (
    ALL_SPECIALTIES,
    DoctorAvailabilityFilter,
    DoctorCard,
    DoctorResponse,
    DoctorSearchParams,
    DoctorSearchResponse,
    DoctorUpdate,
)

logger = structlog.get_logger()


def _days_for_filter(availability: DoctorAvailabilityFilter, today: date) -> set[int] | None:
    """Weekdays a doctor must cover to pass the filter; None means no filter."""
    if availability == DoctorAvailabilityFilter.TODAY:
        return {day_of_week(today)}
    if availability == DoctorAvailabilityFilter.TOMORROW:
        return {day_of_week(today + timedelta(days=1))}
    if availability == DoctorAvailabilityFilter.THIS_WEEK:
        # From today through Saturday
        return set(range(day_of_week(today), 7))
    if availability in (
        DoctorAvailabilityFilter.NEXT_WEEK,
        DoctorAvailabilityFilter.NEXT_30_DAYS,
    ):
        return set(range(7))
    return None


def matches_search(doctor: dict, params: DoctorSearchParams) -> bool:
    """Apply the free-text and specialty filters to one joined doctor row."""
    if params.specialty and params.specialty != ALL_SPECIALTIES:
        if (doctor.get("specialty") or "").lower() != params.specialty.lower():
            return False

    if params.q:
        needle = params.q.strip().lower()
        haystack = [
            doctor.get("display_name") or "",
            doctor.get("specialty") or "",
            doctor.get("location") or "",
        ]
        if not any(needle in value.lower() for value in haystack):
            return False

    return True


def to_card(doctor: dict, available_days: set[int], today: date) -> DoctorCard:
    """Shape a joined doctor row into a search result card."""
    return DoctorCard(
        id=doctor["id"],
        name=doctor.get("display_name") or "Unknown Doctor",
        specialty=doctor.get("specialty") or "General Practice",
        rating=doctor.get("rating"),
        review_count=doctor.get("review_count") or 0,
        experience=format_experience(doctor.get("years_experience")),
        location=doctor.get("location"),
        consultation_fee=doctor.get("consultation_fee"),
        avatar=doctor.get("avatar_url"),
        is_available_today=day_of_week(today) in available_days,
        offers_video_consult=bool(doctor.get("offers_video_consult", True)),
    )


class DoctorService:
    """Service for doctor operations."""

    # Cache TTL in seconds
    DOCTOR_CACHE_TTL = 900  # 15 minutes for individual doctors

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_doctor_cache_key(doctor_id: UUID) -> str:
        """Generate cache key for doctor."""
        return f"doctor:{doctor_id}"

    @staticmethod
    def _joined_query():
        """Doctor rows with the owner's display name and contact details."""
        return select(
            doctors,
            profiles.c.display_name,
            profiles.c.email,
            profiles.c.phone,
        ).select_from(doctors.outerjoin(profiles, profiles.c.user_id == doctors.c.user_id))

    async def get_doctor_by_id(self, db: AsyncSession, doctor_id: UUID) -> dict | None:
        """Get doctor joined with profile, with caching."""
        if self.cache:
            cached = self.cache.get_json(self._get_doctor_cache_key(doctor_id))
            if cached:
                return DoctorResponse.model_validate(cached).model_dump()

        result = await db.execute(self._joined_query().where(doctors.c.id == doctor_id))
        doctor = result.mappings().first()

        if not doctor:
            return None

        doctor_dict = DoctorResponse.model_validate(dict(doctor)).model_dump()

        if self.cache:
            self.cache.set_json(
                self._get_doctor_cache_key(doctor_id),
                doctor_dict,
                ttl=self.DOCTOR_CACHE_TTL,
            )

        return doctor_dict

    async def require_doctor(self, db: AsyncSession, doctor_id: UUID) -> dict:
        """Get a doctor or raise DoctorNotFoundException."""
        doctor = await self.get_doctor_by_id(db, doctor_id)
        if doctor is None:
            raise DoctorNotFoundException()
        return doctor

    async def update_doctor(
        self, db: AsyncSession, doctor_id: UUID, data: DoctorUpdate
    ) -> dict | None:
        """Update practice details and drop the cached copy."""
        update_values = data.model_dump(exclude_unset=True, exclude_none=True)

        if update_values:
            update_values["updated_at"] = datetime.now(UTC)
            result = await db.execute(
                update(doctors)
                .where(doctors.c.id == doctor_id)
                .values(**update_values)
                .returning(doctors.c.id)
            )
            await db.commit()

            if result.first() is None:
                return None

            if self.cache:
                self.cache.delete(self._get_doctor_cache_key(doctor_id))

            logger.info("doctor_profile_updated", doctor_id=str(doctor_id))

        return await self.get_doctor_by_id(db, doctor_id)

    async def get_available_days(self, db: AsyncSession) -> dict[UUID, set[int]]:
        """Map each doctor to the weekdays they have open availability on."""
        result = await db.execute(
            select(doctor_availability.c.doctor_id, doctor_availability.c.day_of_week).where(
                doctor_availability.c.is_available.is_(True)
            )
        )

        days: dict[UUID, set[int]] = {}
        for row in result.mappings().all():
            days.setdefault(row["doctor_id"], set()).add(row["day_of_week"])
        return days

    async def search_doctors(
        self,
        db: AsyncSession,
        params: DoctorSearchParams,
        today: date | None = None,
    ) -> DoctorSearchResponse:
        """
        Search doctors for the patient dashboard.

        All doctors are loaded and filtered in memory by text, specialty and
        weekly availability, then ordered by rating and experience.

        Args:
            db: Database session
            params: Search parameters
            today: Reference date for availability filters

        Returns:
            Total match count and the requested page of cards
        """
        today = today or date.today()

        result = await db.execute(self._joined_query())
        rows = [dict(row) for row in result.mappings().all()]
        available_days = await self.get_available_days(db)
        required_days = _days_for_filter(params.availability, today)

        matches = [
            doctor
            for doctor in rows
            if matches_search(doctor, params)
            and (
                required_days is None
                or available_days.get(doctor["id"], set()) & required_days
            )
        ]
        matches.sort(
            key=lambda doctor: (
                doctor.get("rating") is None,
                -(doctor.get("rating") or 0),
                -(doctor.get("years_experience") or 0),
            )
        )

        page = matches[params.skip : params.skip + params.limit]
        return DoctorSearchResponse(
            total=len(matches),
            items=[to_card(d, available_days.get(d["id"], set()), today) for d in page],
        )
