"""Register, login, refresh and logout endpoints plus auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import TokenConfig
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    PublicUser,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
)
from app.services import auth as auth_service
from app.services.auth import AuthServiceError
from app.services.credential_store import UserStore
from app.services.session import authenticate, extract_token

router = APIRouter()

STATUS_BY_CODE = {
    auth_service.VALIDATION_ERROR: 422,
    auth_service.EMAIL_TAKEN: status.HTTP_409_CONFLICT,
    auth_service.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    auth_service.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    auth_service.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    auth_service.SIGNATURE_INVALID: status.HTTP_401_UNAUTHORIZED,
    auth_service.REFRESH_TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    auth_service.USER_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    auth_service.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
}


def auth_http_error(e: AuthServiceError) -> HTTPException:
    """Translate a service error into the HTTP response clients see."""
    status_code = STATUS_BY_CODE.get(e.code, status.HTTP_400_BAD_REQUEST)
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return HTTPException(
        status_code=status_code,
        detail={"code": e.code, "message": e.message},
        headers=headers,
    )


def access_token_header(
    request: Request,
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Dependency: raw value of the configured access-token header, or None."""
    return request.headers.get(app_settings.ACCESS_TOKEN_HEADER)


def get_token_config(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> TokenConfig:
    """Dependency: signing secrets and lifetimes from the process-wide settings."""
    return TokenConfig.from_settings(app_settings)


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_current_user(
    raw_token: Annotated[str | None, Depends(access_token_header)],
    store: Annotated[UserStore, Depends(get_user_store)],
    token_config: Annotated[TokenConfig, Depends(get_token_config)],
) -> CurrentUser:
    """Dependency: require a valid access token and return the current user. Raises 401 otherwise."""
    try:
        user = authenticate(store, raw_token, token_config)
    except AuthServiceError as e:
        raise auth_http_error(e) from e
    return CurrentUser.model_validate(user)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "forbidden", "message": "Admin access required"},
        )
    return current_user


@router.post("/register", response_model=PublicUser, status_code=201)
def register(
    body: RegisterRequest,
    store: Annotated[UserStore, Depends(get_user_store)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> PublicUser:
    """Create an account with role 'user'. 409 if the email is already registered."""
    try:
        user = auth_service.register_user(
            store,
            name=body.name,
            email=body.email,
            password=body.password,
            bcrypt_rounds=app_settings.BCRYPT_ROUNDS,
        )
    except AuthServiceError as e:
        raise auth_http_error(e) from e
    return PublicUser.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    store: Annotated[UserStore, Depends(get_user_store)],
    token_config: Annotated[TokenConfig, Depends(get_token_config)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns an access and a refresh token.
    Send the access token in the x_authorization header (configurable via ACCESS_TOKEN_HEADER).
    Logging in again replaces the stored refresh token.
    """
    try:
        user, tokens = auth_service.login(
            store, email=body.email, password=body.password, token_config=token_config
        )
    except AuthServiceError as e:
        raise auth_http_error(e) from e
    return LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=PublicUser.model_validate(user),
    )


@router.post("/refresh", response_model=TokenPairResponse)
def refresh(
    body: RefreshRequest,
    raw_token: Annotated[str | None, Depends(access_token_header)],
    store: Annotated[UserStore, Depends(get_user_store)],
    token_config: Annotated[TokenConfig, Depends(get_token_config)],
) -> TokenPairResponse:
    """
    Exchange the current (possibly expired) access token and the refresh token
    for a new pair. The refresh token rotates: the one presented stops working.
    """
    try:
        return auth_service.refresh_session(
            store,
            access_token=extract_token(raw_token),
            refresh_token=body.refresh_token,
            token_config=token_config,
        )
    except AuthServiceError as e:
        raise auth_http_error(e) from e


@router.post("/logout", status_code=204)
def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> Response:
    """Revoke the stored refresh token of the current user."""
    auth_service.logout(store, current_user.id)
    return Response(status_code=204)
