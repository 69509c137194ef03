"""Profile endpoints for the current user and admin-only user management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.api.v1.auth import get_current_user, get_user_store, require_admin
from app.core.config import Settings, get_settings
from app.core.security import hash_password
from app.models.user import User
from app.schemas.auth import CurrentUser, PublicUser, UsersListResponse
from app.schemas.user import (
    ChangeNameRequest,
    ChangeNameResponse,
    ChangePasswordRequest,
    DeleteUserResponse,
)
from app.services.avatars import AvatarError, remove_avatar, store_avatar, validate_avatar
from app.services.credential_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter()


def _user_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"code": "user_not_found", "message": "user not found"},
    )


def _load_current(store: UserStore, current_user: CurrentUser) -> User:
    user = store.find_by_id(current_user.id)
    if user is None:
        # Deleted between the session check and here.
        raise _user_not_found()
    return user


@router.get("/profile", response_model=PublicUser)
def get_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> PublicUser:
    """Public profile of the authenticated user."""
    return PublicUser.model_validate(_load_current(store, current_user))


@router.get("/public-info", response_model=PublicUser)
def get_public_info(
    store: Annotated[UserStore, Depends(get_user_store)],
    user_id: Annotated[int, Query(alias="id", ge=1)],
) -> PublicUser:
    user = store.find_by_id(user_id)
    if user is None:
        raise _user_not_found()
    return PublicUser.model_validate(user)


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(users=[PublicUser.model_validate(u) for u in store.list_all()])


@router.delete("/{user_id}", response_model=DeleteUserResponse)
def delete_user(
    user_id: int,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[UserStore, Depends(get_user_store)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> DeleteUserResponse:
    """Delete a user with their reviews, ratings, bookmarks and watched list (admin only)."""
    user = store.find_by_id(user_id)
    if user is None:
        raise _user_not_found()
    avatar = user.avatar
    store.delete(user)
    remove_avatar(app_settings.AVATAR_DIR, avatar)
    logger.info("User deleted", extra={"user_id": user_id, "admin_id": admin.id})
    return DeleteUserResponse(message=f"User with id {user_id} has been deleted", result=True)


@router.post("/reset-password", response_model=PublicUser)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> PublicUser:
    """
    Set a new password. The stored refresh token is cleared, so every session
    has to log in again once its access token expires.
    """
    user = _load_current(store, current_user)
    user.password_hash = hash_password(body.new_password, rounds=app_settings.BCRYPT_ROUNDS)
    user.refresh_token = None
    store.save(user)
    logger.info("Password changed", extra={"user_id": user.id})
    return PublicUser.model_validate(user)


@router.post("/set-name", response_model=ChangeNameResponse)
def change_name(
    body: ChangeNameRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> ChangeNameResponse:
    user = _load_current(store, current_user)
    user.name = body.new_name
    store.save(user)
    return ChangeNameResponse(
        message="Name changed successfully", user=PublicUser.model_validate(user)
    )


@router.post("/avatar", response_model=PublicUser)
async def upload_avatar(
    image: Annotated[UploadFile, File(description="png, jpg, jpeg, gif or webp image")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> PublicUser:
    """Replace the avatar of the current user; the previous file is removed."""
    content = await image.read()
    try:
        suffix = validate_avatar(image.filename, content, app_settings.AVATAR_MAX_BYTES)
    except AvatarError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    user = _load_current(store, current_user)
    old_avatar = user.avatar
    user.avatar = store_avatar(app_settings.AVATAR_DIR, suffix, content)
    store.save(user)
    remove_avatar(app_settings.AVATAR_DIR, old_avatar)
    return PublicUser.model_validate(user)
