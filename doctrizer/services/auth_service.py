"""Authentication service for email/password accounts and JWT."""

from datetime import timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from doctrizer.config import settings
from doctrizer.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from doctrizer.core.redis_client import CacheManager
from doctrizer.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)
from doctrizer.schemas.auth import LoginRequest, RegisterRequest, Token
from doctrizer.services.user_service import UserService

logger = structlog.get_logger()


class AuthService:
    """Authentication service for sign-up, login and token rotation."""

    def __init__(self, cache_manager: CacheManager):
        """Initialize auth service with cache manager."""
        self.cache = cache_manager

    async def register(self, db: AsyncSession, data: RegisterRequest) -> tuple[dict, Token]:
        """
        Create an account and sign the user in.

        Args:
            db: Database session
            data: Sign-up request

        Returns:
            Tuple of (profile dict, token pair)

        Raises:
            BadRequestException: If the password is too short
            ConflictException: If the email is taken
        """
        if len(data.password) < settings.password_min_length:
            raise BadRequestException(
                f"Password must be at least {settings.password_min_length} characters long."
            )

        profile = await UserService(self.cache).create_account(db, data)
        return profile, self.create_tokens(str(profile["user_id"]))

    async def login(self, db: AsyncSession, data: LoginRequest) -> tuple[dict, Token]:
        """
        Check credentials and issue tokens.

        Raises:
            UnauthorizedException: If the email or password is wrong
            ForbiddenException: If the account is deactivated
        """
        user_service = UserService(self.cache)
        user = await user_service.get_user_by_email(db, data.email)

        if not user or not verify_password(data.password, user["password_hash"]):
            logger.info("login_failed", email=data.email)
            raise UnauthorizedException("Invalid email or password")

        if not user["is_active"]:
            raise ForbiddenException("User account is deactivated")

        await user_service.update_last_login(db, user["id"])

        profile = await user_service.get_profile(db, user["id"])
        if profile is None:
            raise NotFoundException("Profile not found")

        logger.info("login_succeeded", user_id=str(user["id"]))
        return profile, self.create_tokens(str(user["id"]))

    def create_tokens(self, user_id: str) -> Token:
        """Create access and refresh tokens for a user."""
        access_token = create_access_token(
            data={"sub": user_id},
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )

        refresh_token = create_refresh_token(
            data={"sub": user_id},
            expires_delta=timedelta(days=settings.refresh_token_expire_days),
        )

        return Token(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
        )

    def refresh_access_token(self, refresh_token: str) -> Token:
        """
        Create a new token pair from a refresh token.

        Raises:
            UnauthorizedException: If the refresh token is invalid or revoked
        """
        payload = decode_refresh_token(refresh_token)

        if payload is None or payload.get("sub") is None:
            raise UnauthorizedException("Invalid refresh token")

        if self.cache.exists(f"blacklist:{refresh_token}"):
            raise UnauthorizedException("Token has been revoked")

        return self.create_tokens(payload["sub"])

    def revoke_token(self, token: str) -> None:
        """Blacklist a refresh token for the rest of its lifetime."""
        ttl = settings.refresh_token_expire_days * 86400
        self.cache.set(f"blacklist:{token}", "1", ttl=ttl)
