"""User and profile service for business logic."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.core.exceptions import ConflictException, NotFoundException
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.security import get_password_hash
from doctrizer.models.doctors import doctors
from doctrizer.models.profiles import profiles
from doctrizer.models.users import users
from doctrizer.schemas.auth import RegisterRequest
from doctrizer.schemas.users import ProfileResponse, ProfileUpdate, UserRole
from doctrizer.services.doctor_service import DoctorService

logger = structlog.get_logger()


class UserService:
    """Service for user accounts and their profiles."""

    # Cache TTL in seconds (30 minutes for profiles)
    PROFILE_CACHE_TTL = 1800

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_profile_cache_key(user_id: UUID) -> str:
        """Generate cache key for a profile."""
        return f"profile:{user_id}"

    @staticmethod
    def _to_profile(data: dict) -> dict:
        # Round-trip through the schema so cached JSON comes back with UUIDs.
        return ProfileResponse.model_validate(data).model_dump()

    async def create_account(self, db: AsyncSession, data: RegisterRequest) -> dict:
        """
        Create a user, its profile and, for doctors, the doctor row.

        Args:
            db: Database session
            data: Validated sign-up request

        Returns:
            The new profile

        Raises:
            ConflictException: If the email is already registered
        """
        email = data.email.lower()

        if await self.get_user_by_email(db, email):
            raise ConflictException(
                "An account with this email already exists. Please try logging in instead."
            )

        try:
            user_result = await db.execute(
                users.insert()
                .values(email=email, password_hash=get_password_hash(data.password))
                .returning(users.c.id)
            )
            user_id = user_result.scalar_one()

            await db.execute(
                profiles.insert().values(
                    user_id=user_id,
                    display_name=data.display_name,
                    email=email,
                    phone=data.phone,
                    role=data.role.value,
                )
            )

            if data.role == UserRole.DOCTOR:
                await db.execute(
                    doctors.insert().values(
                        user_id=user_id,
                        specialty=data.specialty,
                        bio=data.bio,
                        location=data.location,
                        years_experience=data.years_experience,
                        consultation_fee=data.consultation_fee,
                    )
                )

            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictException(
                "An account with this email already exists. Please try logging in instead."
            )

        logger.info("account_created", user_id=str(user_id), role=data.role.value)

        profile = await self.get_profile(db, user_id)
        if profile is None:
            raise NotFoundException("Profile not found")
        return profile

    async def get_user_by_id(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get the account row by ID. Never cached: it carries the password hash."""
        result = await db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_user_by_email(self, db: AsyncSession, email: str) -> dict | None:
        """Get the account row by email."""
        result = await db.execute(select(users).where(users.c.email == email.lower()))
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get a profile with the linked doctor ID, using the cache when possible."""
        if self.cache:
            cached = self.cache.get_json(self._get_profile_cache_key(user_id))
            if cached:
                return self._to_profile(cached)

        query = (
            select(
                profiles.c.user_id,
                profiles.c.display_name,
                profiles.c.email,
                profiles.c.phone,
                profiles.c.role,
                profiles.c.created_at,
                profiles.c.updated_at,
                doctors.c.id.label("doctor_id"),
            )
            .select_from(profiles.outerjoin(doctors, doctors.c.user_id == profiles.c.user_id))
            .where(profiles.c.user_id == user_id)
        )
        result = await db.execute(query)
        row = result.mappings().first()

        if not row:
            return None

        profile = self._to_profile(dict(row))

        if self.cache:
            self.cache.set_json(
                self._get_profile_cache_key(user_id),
                profile,
                ttl=self.PROFILE_CACHE_TTL,
            )

        return profile

    async def update_profile(
        self, db: AsyncSession, user_id: UUID, data: ProfileUpdate
    ) -> dict | None:
        """Update display name or phone."""
        update_values = data.model_dump(exclude_unset=True, exclude_none=True)

        if update_values:
            update_values["updated_at"] = datetime.now(UTC)
            result = await db.execute(
                update(profiles)
                .where(profiles.c.user_id == user_id)
                .values(**update_values)
                .returning(profiles.c.id)
            )
            await db.commit()

            if result.first() is None:
                return None

            if self.cache:
                self.cache.delete(self._get_profile_cache_key(user_id))

        profile = await self.get_profile(db, user_id)

        # Doctor details embed the profile name and contact fields.
        if self.cache and update_values and profile and profile.get("doctor_id"):
            self.cache.delete(DoctorService._get_doctor_cache_key(profile["doctor_id"]))

        return profile

    async def update_last_login(self, db: AsyncSession, user_id: UUID) -> None:
        """Stamp the last successful login."""
        await db.execute(
            update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        )
        await db.commit()
