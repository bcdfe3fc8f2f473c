"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token is
header.payload.signature, HMAC-SHA256 signed with the shared secret from
settings. The payload carries:

- sub: the user id (stringified) — the claim authorization relies on
- name: the username, for display
- jti: a random token id, so no two tokens are ever byte-identical
- iat / exp: issue time and expiry (iat + CANWEGAME_JWT_EXPIRY_MINUTES)
- iss / aud: fixed configured strings, checked on every verification

There is no revocation list. A token stays valid until exp, even if the
user changes their password. Changing the secret invalidates every
outstanding token at once.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog

from canwegame.config import settings

logger = structlog.get_logger()

_REQUIRED_CLAIMS = ["sub", "name", "jti", "iat", "exp", "iss", "aud"]


class TokenError(Exception):
    """Raised when token verification fails.

    The message is the same whatever went wrong; the cause is only logged.
    """

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


@dataclass(frozen=True)
class TokenClaims:
    """The trusted identity extracted from a verified token."""

    user_id: int
    username: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


def issue_token(
    user_id: int,
    username: str,
    now: Optional[datetime] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for a verified user."""
    issued_at = now or datetime.now(timezone.utc)
    expires = issued_at + timedelta(
        minutes=expires_minutes or settings.jwt_expiry_minutes
    )
    payload = {
        "sub": str(user_id),
        "name": username,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": expires,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenClaims:
    """Verify signature, issuer, audience and expiry, and return the claims.

    Raises TokenError on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("auth.token_rejected", reason="expired")
        raise TokenError()
    except jwt.InvalidTokenError as e:
        logger.debug("auth.token_rejected", reason=type(e).__name__)
        raise TokenError()

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.debug("auth.token_rejected", reason="non_numeric_sub")
        raise TokenError()

    return TokenClaims(
        user_id=user_id,
        username=str(payload["name"]),
        token_id=str(payload["jti"]),
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
