"""Password hashing and JWT issuance/verification for access and refresh tokens."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from app.core.config import Settings

DEFAULT_BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
REQUIRED_CLAIMS = ["sub", "type", "iat", "exp"]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. A fresh salt is generated on every call."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or DEFAULT_BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Mismatch is False, not an error."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenConfig(BaseModel):
    """Signing secrets and lifetimes, built once from settings and passed explicitly."""

    model_config = ConfigDict(frozen=True)

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_expires=timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            refresh_expires=timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
        )


class TokenFailure(str, Enum):
    """Why a token did not verify."""

    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    MALFORMED = "malformed"


class TokenVerification(BaseModel):
    """Outcome of verify_token: ok with claims, or not ok with a reason."""

    ok: bool
    claims: dict[str, Any] | None = None
    reason: TokenFailure | None = None

    @property
    def subject(self) -> str | None:
        return self.claims.get("sub") if self.claims else None


def _issue_token(
    user_id: int,
    token_type: str,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
    now: datetime | None,
) -> str:
    issued_at = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        # Makes every token unique, even two minted for the same user in the same second.
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def issue_access_token(
    user_id: int, config: TokenConfig, now: datetime | None = None
) -> str:
    """Create a short-lived access token for user_id. Pure: nothing is persisted."""
    return _issue_token(
        user_id,
        ACCESS_TOKEN_TYPE,
        config.access_secret,
        config.algorithm,
        config.access_expires,
        now,
    )


def issue_refresh_token(
    user_id: int, config: TokenConfig, now: datetime | None = None
) -> str:
    """
    Create a long-lived refresh token for user_id, signed with the refresh secret.
    The caller is responsible for storing it on the user record.
    """
    return _issue_token(
        user_id,
        REFRESH_TOKEN_TYPE,
        config.refresh_secret,
        config.algorithm,
        config.refresh_expires,
        now,
    )


def verify_token(
    token: str,
    secret: str,
    *,
    algorithm: str = "HS256",
    expected_type: str | None = None,
    now: datetime | None = None,
    allow_expired: bool = False,
) -> TokenVerification:
    """
    Check signature, required claims, type and expiry of a token.

    The token is valid while now < exp; at exp and after it is expired.
    allow_expired skips only the expiry check, never the signature check.
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            # Time checks are done below against an injectable clock.
            options={
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "require": REQUIRED_CLAIMS,
            },
        )
    except jwt.InvalidSignatureError:
        return TokenVerification(ok=False, reason=TokenFailure.SIGNATURE_INVALID)
    except jwt.PyJWTError:
        return TokenVerification(ok=False, reason=TokenFailure.MALFORMED)

    if expected_type is not None and claims.get("type") != expected_type:
        return TokenVerification(ok=False, reason=TokenFailure.MALFORMED)
    try:
        exp = int(claims["exp"])
    except (TypeError, ValueError):
        return TokenVerification(ok=False, reason=TokenFailure.MALFORMED)

    if not allow_expired:
        current = (now or datetime.now(UTC)).timestamp()
        if current >= exp:
            return TokenVerification(ok=False, reason=TokenFailure.EXPIRED)
    return TokenVerification(ok=True, claims=claims)
