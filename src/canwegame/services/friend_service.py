"""Friend service — the symmetric friendship ledger.

Learn: A friendship is one row, (low_id, high_id), no matter who added
whom. canonical_pair() produces that ordering and is used on every path
that writes or looks up a pair. If any path skipped it, alice→bob and
bob→alice would land as two different rows, or a lookup would miss a row
that exists.

Reading is symmetric: list_friends(user) returns the *other* member of
every row the user appears in, on either side.

Friends are added unilaterally — there is no request/accept step.
"""

from datetime import datetime

import structlog
from sqlalchemy import case, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.db.models import Friendship, User
from canwegame.errors import Conflict, InvalidRequest, NotFound, Unauthenticated
from canwegame.schemas.user import is_user_id

logger = structlog.get_logger()

FRIEND_NOT_FOUND = "Friend user not found."


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    """Order two user ids as (low, high)."""
    return (a, b) if a < b else (b, a)


class FriendService:
    """Business logic for friendships."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_user(self, identifier: str) -> User:
        """Find a user by numeric id or, failing that, exact username.

        Learn: "42" is always treated as an id, while "-55" or "1_000" are
        usernames. Registration refuses usernames that would read as an id
        (schemas.user.is_user_id), so every user can be found by name.
        """
        identifier = identifier.strip()
        if is_user_id(identifier):
            user_id = int(identifier)
            # Out of range for the integer primary key: cannot exist.
            user = await self.db.get(User, user_id) if 0 < user_id < 2**31 else None
        else:
            result = await self.db.execute(select(User).where(User.username == identifier))
            user = result.scalars().first()

        if user is None:
            raise NotFound(FRIEND_NOT_FOUND)
        return user

    async def _get_pair(self, low_id: int, high_id: int) -> Friendship | None:
        return await self.db.get(Friendship, (low_id, high_id))

    async def add_friend(
        self, requester_id: int, identifier: str
    ) -> tuple[Friendship, User]:
        """Befriend the user named by `identifier`.

        Raises NotFound, InvalidRequest (yourself) or Conflict (already
        friends, from either direction).
        """
        friend = await self.resolve_user(identifier)
        if friend.id == requester_id:
            raise InvalidRequest("Cannot add yourself as a friend.")

        friend_id = friend.id
        low_id, high_id = canonical_pair(requester_id, friend_id)
        if await self._get_pair(low_id, high_id) is not None:
            raise Conflict("Friendship already exists.")

        friendship = Friendship(low_id=low_id, high_id=high_id)
        self.db.add(friendship)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race: the same pair was added concurrently, or one of
            # the two accounts was deleted (foreign key).
            await self.db.rollback()
            logger.info("friends.add_race", low_id=low_id, high_id=high_id)
            if await self.db.get(User, friend_id) is None:
                raise NotFound(FRIEND_NOT_FOUND) from e
            if await self.db.get(User, requester_id) is None:
                raise Unauthenticated() from e
            raise Conflict("Friendship already exists.") from e
        await self.db.commit()

        logger.info("friends.added", user_id=requester_id, friend_id=friend_id)
        return friendship, friend

    async def remove_friend(self, requester_id: int, identifier: str) -> None:
        friend = await self.resolve_user(identifier)

        low_id, high_id = canonical_pair(requester_id, friend.id)
        friendship = await self._get_pair(low_id, high_id)
        if friendship is None:
            raise NotFound("Friendship not found.")

        await self.db.delete(friendship)
        await self.db.commit()
        logger.info("friends.removed", user_id=requester_id, friend_id=friend.id)

    async def list_friends(self, user_id: int) -> list[tuple[User, datetime]]:
        """Every user on the other side of a friendship with `user_id`.

        Returns (friend, established_at) pairs ordered by username.
        """
        other_id = case(
            (Friendship.low_id == user_id, Friendship.high_id),
            else_=Friendship.low_id,
        )
        result = await self.db.execute(
            select(User, Friendship.established_at)
            .join(Friendship, User.id == other_id)
            .where(or_(Friendship.low_id == user_id, Friendship.high_id == user_id))
            .order_by(User.username)
        )
        return [(user, established_at) for user, established_at in result.all()]
