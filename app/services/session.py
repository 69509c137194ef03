"""Session gate: resolve the user behind an access token, or reject the request."""

from __future__ import annotations

import logging
from datetime import datetime

from app.core.security import ACCESS_TOKEN_TYPE, TokenConfig, verify_token
from app.models.user import User
from app.services.auth import NOT_AUTHENTICATED, AuthServiceError
from app.services.credential_store import UserStore

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"

# Internal rejection reasons; only ever logged, never returned to the client.
REASON_MISSING = "missing"
REASON_MALFORMED = "malformed"
REASON_USER_NOT_FOUND = "user_not_found"


class SessionRejected(AuthServiceError):
    """
    Every rejection carries the same client-facing code and message;
    reason says why, for logging only.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(NOT_AUTHENTICATED, "Invalid or missing access token")
        self.reason = reason


def extract_token(raw_header: str | None) -> str | None:
    """Return the token from a header value, accepting an optional 'Bearer ' prefix."""
    if raw_header is None:
        return None
    value = raw_header.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = rest.strip()
    return value or None


def authenticate(
    store: UserStore,
    raw_header: str | None,
    token_config: TokenConfig,
    now: datetime | None = None,
) -> User:
    """
    Run one request through NoToken -> TokenPresent -> Verified | Rejected.

    Read-only against the store. Raises SessionRejected on every failure.
    """
    token = extract_token(raw_header)
    if token is None:
        raise _reject(REASON_MISSING)

    check = verify_token(
        token,
        token_config.access_secret,
        algorithm=token_config.algorithm,
        expected_type=ACCESS_TOKEN_TYPE,
        now=now,
    )
    if not check.ok:
        raise _reject(check.reason.value)

    try:
        user_id = int(check.subject)
    except (TypeError, ValueError):
        raise _reject(REASON_MALFORMED)

    user = store.find_by_id(user_id)
    if user is None:
        raise _reject(REASON_USER_NOT_FOUND, user_id=user_id)
    return user


def _reject(reason: str, **context: object) -> SessionRejected:
    logger.info("Request rejected by session gate", extra={"reason": reason, **context})
    return SessionRejected(reason)
