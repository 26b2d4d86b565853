"""Profile endpoints."""

from fastapi import APIRouter

from doctrizer.core.exceptions import NotFoundException
from doctrizer.dependencies import CacheManagerDep, CurrentUser, DatabaseSession
from doctrizer.schemas.users import ProfileResponse, ProfileUpdate
from doctrizer.services.user_service import UserService

router = APIRouter(prefix="/users")


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(current_user: CurrentUser) -> ProfileResponse:
    """Get current user's profile; the role decides which dashboard to show."""
    return ProfileResponse.model_validate(current_user)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: CurrentUser,
    cache_manager: CacheManagerDep,
    db: DatabaseSession,
) -> ProfileResponse:
    """Update current user's display name or phone."""
    profile = await UserService(cache_manager).update_profile(db, current_user["user_id"], data)

    if not profile:
        raise NotFoundException("Profile not found")

    return ProfileResponse.model_validate(profile)
