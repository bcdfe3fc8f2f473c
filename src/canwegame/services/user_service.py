"""User service — registration, login, and account management.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database and raise
errors from canwegame.errors; main.py turns those into responses.

Uniqueness of username and email is enforced twice:
1. A SELECT first, so the common case gets a precise message
   ("Username already exists.")
2. The unique indexes on the users table, for the race where two
   requests pass step 1 at the same time. The loser's INSERT fails with
   IntegrityError, which we report as the same Conflict — never a 500.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.auth.jwt import issue_token
from canwegame.auth.password import hash_password, verify_password
from canwegame.config import settings
from canwegame.db.models import Friendship, User
from canwegame.errors import Conflict, InvalidRequest, NotFound, Unauthenticated

logger = structlog.get_logger()

INVALID_LOGIN = "Invalid username or password"


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Checked against when the username does not exist, so an unknown user
    # costs the same bcrypt work as a wrong password.
    return hash_password("not-a-real-password")


class UserService:
    """Business logic for accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ────────────────────────────────────────

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound(f"User with ID {user_id} not found.")
        return user

    async def require_current_user(self, user_id: int) -> User:
        """Load the row behind a verified token.

        The token can outlive the account (no revocation), so a missing row
        is an authentication failure, not a 404.
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise Unauthenticated()
        return user

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.username))
        return list(result.scalars().all())

    # ─── Registration / login ───────────────────────────

    async def register(self, username: str, email: str, password: str) -> User:
        await self._check_available(username=username, email=email)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        await self._flush_unique("Username or email already exists.")
        await self.db.commit()

        logger.info("auth.registered", user_id=user.id, username=user.username)
        return user

    async def login(self, username: str, password: str) -> tuple[User, str, datetime]:
        """Verify credentials and issue a token.

        Returns (user, token, expires_at). Unknown username and wrong
        password fail identically.
        """
        user = await self.get_by_username(username)
        if user is None:
            verify_password(password, _dummy_hash())
            logger.info("auth.login_failed")
            raise Unauthenticated(INVALID_LOGIN)

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise Unauthenticated(INVALID_LOGIN)

        issued_at = datetime.now(timezone.utc)
        token = issue_token(user.id, user.username, now=issued_at)
        expires_at = issued_at + timedelta(minutes=settings.jwt_expiry_minutes)

        logger.info("auth.login", user_id=user.id)
        return user, token, expires_at

    # ─── Account management ─────────────────────────────

    async def update_profile(
        self,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """Change username and/or email.

        Learn: Schedules keep the username they were saved with. They pick
        up the new name the next time their owner updates them.
        """
        user = await self.require_current_user(user_id)

        new_username = username if username and username != user.username else None
        new_email = email if email and email != user.email else None
        if new_username is None and new_email is None:
            return user

        await self._check_available(username=new_username, email=new_email)
        if new_username is not None:
            user.username = new_username
        if new_email is not None:
            user.email = new_email

        await self._flush_unique("Username or email already exists.")
        await self.db.commit()

        logger.info("users.profile_updated", user_id=user.id)
        return user

    async def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        """Replace the password hash.

        Tokens issued before the change stay valid until they expire.
        """
        user = await self.require_current_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise InvalidRequest("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("users.password_changed", user_id=user.id)

    async def delete_account(self, user_id: int) -> None:
        """Delete the account and, via ON DELETE CASCADE, its schedules.

        Friendships are not cascaded. An account that still has friends
        cannot be deleted until they are removed.
        """
        user = await self.require_current_user(user_id)

        result = await self.db.execute(
            select(func.count())
            .select_from(Friendship)
            .where(or_(Friendship.low_id == user_id, Friendship.high_id == user_id))
        )
        if result.scalar_one():
            raise Conflict("Remove all friends before deleting the account.")

        await self.db.delete(user)
        await self._flush_unique("Remove all friends before deleting the account.")
        await self.db.commit()
        logger.info("users.deleted", user_id=user_id)

    # ─── Helpers ────────────────────────────────────────

    async def _check_available(
        self, username: Optional[str] = None, email: Optional[str] = None
    ) -> None:
        if username is not None:
            result = await self.db.execute(select(User.id).where(User.username == username))
            if result.first() is not None:
                raise Conflict("Username already exists.")
        if email is not None:
            result = await self.db.execute(select(User.id).where(User.email == email))
            if result.first() is not None:
                raise Conflict("Email already exists.")

    async def _flush_unique(self, conflict_detail: str) -> None:
        """Flush, turning a constraint violation into Conflict."""
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info("db.constraint_violation", error=str(e.orig))
            raise Conflict(conflict_detail) from e
