"""Request/response schemas for auth endpoints."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Deliberately loose: one @, something on each side, a dot in the domain.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """Strip and lower-case an email; raise ValueError if it does not look like one."""
    email = (value or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("email must be a valid email address")
    return email


class RegisterRequest(BaseModel):
    """New account: name, email and password are all required."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: str = Field(..., min_length=3, max_length=255, description="Email (unique)")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        # Not validated as an address: a malformed email is just an unknown account.
        return v.strip().lower()


class RefreshRequest(BaseModel):
    """Body of POST /auth/refresh; the access token travels in the access-token header."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class PublicUser(BaseModel):
    """Public projection of a user: never includes password hash or refresh token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    avatar: str


class CurrentUser(BaseModel):
    """Authenticated user resolved by the session gate, passed to protected handlers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str


class TokenPairResponse(BaseModel):
    """Access and refresh tokens issued by login or refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token; rotates on every refresh")
    token_type: str = Field(default="bearer", description="Token type")


class LoginResponse(TokenPairResponse):
    """Tokens plus the public profile of the logged-in user."""

    user: PublicUser


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[PublicUser]
