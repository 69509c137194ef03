"""Request/response schemas for profile endpoints."""

from pydantic import BaseModel, Field, field_validator

from app.schemas.auth import PublicUser


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=1, max_length=128)


class ChangeNameRequest(BaseModel):
    new_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("new_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("new_name must be non-empty")
        return name


class ChangeNameResponse(BaseModel):
    message: str
    user: PublicUser


class DeleteUserResponse(BaseModel):
    message: str
    result: bool
