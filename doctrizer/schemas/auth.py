"""Authentication schemas."""

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, model_validator

from doctrizer.schemas.users import ProfileResponse, UserRole


class Token(BaseModel):
    """JWT token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    """Token refresh request schema."""

    refresh_token: str


class LoginRequest(BaseModel):
    """Email/password login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """
    Sign-up request.

    Doctors may also send their practice details; they are ignored for
    patients.
    """

    email: EmailStr
    password: str
    confirm_password: str
    display_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = UserRole.PATIENT
    phone: str | None = Field(None, max_length=20)

    # Doctor only
    specialty: str | None = Field(None, max_length=200)
    bio: str | None = None
    location: str | None = None
    years_experience: int | None = Field(None, ge=0, le=80)
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)

    @model_validator(mode="after")
    def check_passwords_match(self) -> "RegisterRequest":
        """Reject mismatched password confirmation."""
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginResponse(BaseModel):
    """Login response with tokens and the caller's profile."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    profile: ProfileResponse
