"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. Every call
to hash_password() draws a fresh salt, so two hashes of the same
password never compare equal — always go through verify_password().

The work factor comes from CANWEGAME_BCRYPT_ROUNDS (12 by default,
~250ms per hash). Tests turn it down to keep the suite fast.
"""

import bcrypt
import structlog

from canwegame.config import settings
from canwegame.errors import InternalError

logger = structlog.get_logger()

# bcrypt only looks at the first 72 bytes of the password.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt. Hashes start with "$2b$"."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    Returns False for a wrong password. A stored hash that bcrypt cannot
    parse means the users table is corrupt, which is our problem rather
    than the caller's, so that raises InternalError instead of looking
    like a failed login.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError) as e:
        logger.error("auth.malformed_password_hash", error=str(e))
        raise InternalError() from e
