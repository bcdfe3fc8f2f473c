"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract and
validate the caller's identity from the Authorization header. The token
is the whole proof — no database lookup happens here, so a deleted
user's token keeps working until it expires (services that need the
user row check for that themselves).
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Header

from canwegame.auth.jwt import TokenError, verify_token
from canwegame.errors import Unauthenticated


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request.

    All downstream code uses user_id for ownership checks; username is the
    display name captured when the token was issued.
    """

    user_id: int
    username: str
    token_id: str


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Resolve the caller from a Bearer token (401 if missing or invalid).

    Missing header, wrong scheme, bad signature, wrong issuer/audience and
    expiry all end in the same Unauthenticated error.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthenticated()

    try:
        claims = verify_token(token)
    except TokenError:
        raise Unauthenticated()

    structlog.contextvars.bind_contextvars(user_id=claims.user_id)
    return CurrentIdentity(
        user_id=claims.user_id,
        username=claims.username,
        token_id=claims.token_id,
    )
