"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.core.exceptions import RoleRequiredException
from doctrizer.core.redis_client import CacheManager, get_redis_client
from doctrizer.core.security import decode_access_token
from doctrizer.database import get_db
from doctrizer.schemas.users import UserRole
from doctrizer.services.user_service import UserService

# Security
security = HTTPBearer()

_CREDENTIALS_ERROR = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def get_cache_manager() -> CacheManager:
    """Cache manager over the shared Redis client."""
    return CacheManager(get_redis_client())


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise _CREDENTIALS_ERROR

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise _CREDENTIALS_ERROR

    try:
        return UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> dict:
    """
    Resolve the caller's profile.

    A user whose profile row is missing is treated as a patient.

    Raises:
        HTTPException: If the user is unknown or deactivated
    """
    user_service = UserService(cache_manager)
    user = await user_service.get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    profile = await user_service.get_profile(db, user_id)
    if profile is None:
        profile = {
            "user_id": user_id,
            "email": user["email"],
            "display_name": None,
            "phone": None,
            "role": UserRole.PATIENT,
            "doctor_id": None,
        }

    return profile


async def require_patient(
    current_user: Annotated[dict, Depends(get_current_user)],
) -> dict:
    """Allow only patient accounts."""
    if current_user["role"] != UserRole.PATIENT:
        raise RoleRequiredException(UserRole.PATIENT.value)
    return current_user


async def require_doctor(
    current_user: Annotated[dict, Depends(get_current_user)],
) -> dict:
    """Allow only doctor accounts that have a doctor row."""
    if current_user["role"] != UserRole.DOCTOR or current_user.get("doctor_id") is None:
        raise RoleRequiredException(UserRole.DOCTOR.value)
    return current_user


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
CurrentPatient = Annotated[dict, Depends(require_patient)]
CurrentDoctor = Annotated[dict, Depends(require_doctor)]
