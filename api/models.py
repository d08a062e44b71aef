"""
API request and response models for SessionKit REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from auth.models import User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt reads at most 72 bytes of password input.
MAX_PASSWORD_BYTES = 72


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=255)


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Username and email are trimmed. The password is kept byte-exact so the
    same string works at login. Its length is also checked in UTF-8 bytes:
    72 characters of multi-byte text would overrun bcrypt's input limit.
    """

    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=MAX_PASSWORD_BYTES)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identity(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password hash."""

    id: int
    username: str
    email: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class TokenResponse(BaseModel):
    """Response body for POST /api/v1/token/refresh."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(TokenResponse):
    """Response body for POST /api/v1/auth/login."""

    user: UserResponse


class SessionStatusResponse(BaseModel):
    """Response body for GET /api/v1/auth/session (optional auth)."""

    authenticated: bool
    user_id: Optional[int] = None
    username: Optional[str] = None


class ErrorDetail(BaseModel):
    """Machine-readable error body. code is stable; message is for humans."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every exception handler."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
