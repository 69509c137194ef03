"""Account registration, login, refresh-token rotation and logout."""

from __future__ import annotations

import hmac
import logging
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import IntegrityError

from app.core.security import (
    ACCESS_TOKEN_TYPE,
    DEFAULT_BCRYPT_ROUNDS,
    REFRESH_TOKEN_TYPE,
    TokenConfig,
    TokenFailure,
    hash_password,
    issue_access_token,
    issue_refresh_token,
    verify_password,
    verify_token,
)
from app.models.user import User
from app.schemas.auth import TokenPairResponse
from app.services.credential_store import UserStore

logger = logging.getLogger(__name__)

# Error codes surfaced to API clients.
VALIDATION_ERROR = "validation_error"
EMAIL_TAKEN = "email_taken"
INVALID_CREDENTIALS = "invalid_credentials"
TOKEN_EXPIRED = "token_expired"
TOKEN_INVALID = "token_invalid"
SIGNATURE_INVALID = "signature_invalid"
REFRESH_TOKEN_INVALID = "refresh_token_invalid"
USER_NOT_FOUND = "user_not_found"
NOT_AUTHENTICATED = "not_authenticated"

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

_REFRESH_FAILURE_CODES = {
    TokenFailure.EXPIRED: TOKEN_EXPIRED,
    TokenFailure.SIGNATURE_INVALID: SIGNATURE_INVALID,
    TokenFailure.MALFORMED: TOKEN_INVALID,
}


@lru_cache
def _dummy_password_hash() -> str:
    return hash_password("not-a-real-password", rounds=DEFAULT_BCRYPT_ROUNDS)


class AuthServiceError(Exception):
    """Raised when an auth operation is refused; code is one of the module constants."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


def register_user(
    store: UserStore,
    *,
    name: str,
    email: str,
    password: str,
    bcrypt_rounds: int | None = None,
) -> User:
    """Create a user with role 'user'. Raises AuthServiceError(EMAIL_TAKEN) on duplicates."""
    if not name or not email or not password:
        raise AuthServiceError(VALIDATION_ERROR, "name, email and password are required")
    if store.find_by_email(email) is not None:
        raise AuthServiceError(EMAIL_TAKEN, "Email has already existed")

    password_hash = hash_password(password, rounds=bcrypt_rounds)
    try:
        user = store.create(email=email, password_hash=password_hash, name=name)
    except IntegrityError as e:
        # Lost a race against a concurrent registration with the same email.
        raise AuthServiceError(EMAIL_TAKEN, "Email has already existed") from e
    logger.info("User registered", extra={"user_id": user.id})
    return user


def login(
    store: UserStore,
    *,
    email: str,
    password: str,
    token_config: TokenConfig,
    now: datetime | None = None,
) -> tuple[User, TokenPairResponse]:
    """
    Verify credentials and issue a token pair.

    Unknown email and wrong password fail identically. The new refresh token
    replaces any previously stored one, which stops that one from refreshing.
    """
    user = store.find_by_email(email)
    if user is None:
        # Pay for one bcrypt check anyway so response time does not reveal the email.
        verify_password(password, _dummy_password_hash())
    if user is None or not verify_password(password, user.password_hash):
        logger.info(
            "Login failed",
            extra={"reason": "unknown_email" if user is None else "wrong_password"},
        )
        raise AuthServiceError(INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    access_token = issue_access_token(user.id, token_config, now=now)
    refresh_token = issue_refresh_token(user.id, token_config, now=now)
    store.set_refresh_token(user.id, refresh_token)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return user, TokenPairResponse(access_token=access_token, refresh_token=refresh_token)


def refresh_session(
    store: UserStore,
    *,
    access_token: str | None,
    refresh_token: str | None,
    token_config: TokenConfig,
    now: datetime | None = None,
) -> TokenPairResponse:
    """
    Exchange a (possibly expired) access token plus the stored refresh token for a new pair.

    The refresh token rotates on every call: the presented one is swapped for
    the new one only if it is still the stored value, so a superseded token,
    or the loser of two concurrent refreshes, gets REFRESH_TOKEN_INVALID.
    """
    if not access_token or not refresh_token:
        raise AuthServiceError(
            VALIDATION_ERROR, "Access token and refresh token are both required"
        )

    refresh_check = verify_token(
        refresh_token,
        token_config.refresh_secret,
        algorithm=token_config.algorithm,
        expected_type=REFRESH_TOKEN_TYPE,
        now=now,
    )
    if not refresh_check.ok:
        logger.info("Refresh rejected", extra={"reason": refresh_check.reason.value})
        raise AuthServiceError(
            _REFRESH_FAILURE_CODES[refresh_check.reason], "Refresh token is not valid"
        )

    # The access token is expected to be expired here; only its signature matters.
    access_check = verify_token(
        access_token,
        token_config.access_secret,
        algorithm=token_config.algorithm,
        expected_type=ACCESS_TOKEN_TYPE,
        allow_expired=True,
    )
    if not access_check.ok or access_check.subject != refresh_check.subject:
        reason = access_check.reason.value if access_check.reason else "subject_mismatch"
        logger.info("Refresh rejected", extra={"reason": f"access_{reason}"})
        code = (
            SIGNATURE_INVALID
            if access_check.reason == TokenFailure.SIGNATURE_INVALID
            else TOKEN_INVALID
        )
        raise AuthServiceError(code, "Invalid access token or refresh token")

    try:
        user_id = int(refresh_check.subject)
    except (TypeError, ValueError):
        raise AuthServiceError(TOKEN_INVALID, "Invalid token payload")
    user = store.find_by_id(user_id)
    if user is None:
        logger.info("Refresh rejected", extra={"reason": USER_NOT_FOUND, "user_id": user_id})
        raise AuthServiceError(USER_NOT_FOUND, "User does not exist")

    stored = user.refresh_token or ""
    if not hmac.compare_digest(stored.encode("utf-8"), refresh_token.encode("utf-8")):
        logger.warning(
            "Refresh rejected: token superseded or revoked", extra={"user_id": user_id}
        )
        raise AuthServiceError(REFRESH_TOKEN_INVALID, "Refresh token is not valid")

    new_access = issue_access_token(user_id, token_config, now=now)
    new_refresh = issue_refresh_token(user_id, token_config, now=now)
    if not store.swap_refresh_token(user_id, refresh_token, new_refresh):
        logger.warning(
            "Refresh rejected: concurrent rotation won", extra={"user_id": user_id}
        )
        raise AuthServiceError(REFRESH_TOKEN_INVALID, "Refresh token is not valid")

    logger.info("Session refreshed", extra={"user_id": user_id})
    return TokenPairResponse(access_token=new_access, refresh_token=new_refresh)


def logout(store: UserStore, user_id: int) -> None:
    """End the refresh lineage; access tokens already issued run until they expire."""
    store.set_refresh_token(user_id, None)
    logger.info("User logged out", extra={"user_id": user_id})
