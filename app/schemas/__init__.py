"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    PublicUser,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UsersListResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "PublicUser",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPairResponse",
    "UsersListResponse",
]
