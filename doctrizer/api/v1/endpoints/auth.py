"""Authentication endpoints."""

from fastapi import APIRouter, status

from doctrizer.dependencies import CacheManagerDep, DatabaseSession
from doctrizer.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, Token, TokenRefresh
from doctrizer.schemas.users import ProfileResponse
from doctrizer.services.auth_service import AuthService

router = APIRouter()


def _login_response(profile: dict, tokens: Token) -> LoginResponse:
    return LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        profile=ProfileResponse.model_validate(profile),
    )


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a patient or doctor account",
)
async def register(
    request: RegisterRequest,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> LoginResponse:
    """
    Sign up and receive tokens.

    Doctors also get a doctor profile built from the practice fields.

    Raises:
        BadRequestException: Password too short
        ConflictException: Email already registered
    """
    profile, tokens = await AuthService(cache_manager).register(db, request)
    return _login_response(profile, tokens)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with email and password",
)
async def login(
    request: LoginRequest,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> LoginResponse:
    """Exchange credentials for an access/refresh token pair."""
    profile, tokens = await AuthService(cache_manager).login(db, request)
    return _login_response(profile, tokens)


@router.post(
    "/refresh",
    response_model=Token,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh_token(
    request: TokenRefresh,
    cache_manager: CacheManagerDep,
) -> Token:
    """
    Refresh access token using refresh token.

    Raises:
        UnauthorizedException: If refresh token is invalid or revoked
    """
    return AuthService(cache_manager).refresh_access_token(request.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout and revoke tokens",
)
async def logout(
    request: TokenRefresh,
    cache_manager: CacheManagerDep,
) -> None:
    """Logout user by revoking refresh token."""
    AuthService(cache_manager).revoke_token(request.refresh_token)
