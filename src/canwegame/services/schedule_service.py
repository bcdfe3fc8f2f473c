"""Schedule service — gaming availability windows and who may change them.

Learn: Ownership is checked inside the query, not after it. Update and
delete look the schedule up with

    WHERE schedules.id = :id AND schedules.user_id = :caller

so a schedule that belongs to someone else is simply not found. The
caller gets the same 404 whether the id does not exist or is not theirs,
and never learns which.

Reading is open: any signed-in user can list any other user's schedules.
"""

from datetime import time
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.db.models import Schedule, User
from canwegame.errors import NotFound, Unauthenticated, ValidationError
from canwegame.schemas.schedule import normalize_days

logger = structlog.get_logger()

SCHEDULE_NOT_FOUND = "Schedule not found"


class ScheduleService:
    """Business logic for schedules."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────

    async def list_for_user(self, user_id: int) -> list[Schedule]:
        result = await self.db.execute(
            select(Schedule)
            .where(Schedule.user_id == user_id)
            .order_by(Schedule.created_at, Schedule.id)
        )
        return list(result.scalars().all())

    async def list_user_schedules(self, user_id: int) -> list[Schedule]:
        """Schedules of any user. NotFound if the user does not exist."""
        if await self.db.get(User, user_id) is None:
            raise NotFound(f"User with ID {user_id} not found.")
        return await self.list_for_user(user_id)

    # ─── Writes (owner only) ────────────────────────────

    async def create_schedule(
        self,
        owner_id: int,
        game_title: str,
        days_of_week: list[str],
        start_time: time,
        end_time: time,
        weekly: bool = True,
        description: Optional[str] = None,
    ) -> Schedule:
        owner = await self._owner(owner_id)
        schedule = Schedule(
            user_id=owner.id,
            username=owner.username,
            game_title=game_title,
            days_of_week=_days(days_of_week),
            start_time=start_time,
            end_time=end_time,
            is_weekly=weekly,
            description=description,
        )
        self.db.add(schedule)
        await self.db.commit()
        await self.db.refresh(schedule)

        logger.info("schedules.created", schedule_id=schedule.id, user_id=owner.id)
        return schedule

    async def update_schedule(
        self,
        owner_id: int,
        schedule_id: int,
        game_title: str,
        days_of_week: list[str],
        start_time: time,
        end_time: time,
        weekly: bool = True,
        description: Optional[str] = None,
    ) -> Schedule:
        """Replace every field of a schedule the caller owns."""
        schedule = await self._owned(owner_id, schedule_id)
        days = _days(days_of_week)
        owner = await self._owner(owner_id)

        schedule.username = owner.username
        schedule.game_title = game_title
        schedule.days_of_week = days
        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.is_weekly = weekly
        schedule.description = description
        await self.db.commit()

        logger.info("schedules.updated", schedule_id=schedule.id, user_id=owner_id)
        return schedule

    async def delete_schedule(self, owner_id: int, schedule_id: int) -> None:
        schedule = await self._owned(owner_id, schedule_id)
        await self.db.delete(schedule)
        await self.db.commit()
        logger.info("schedules.deleted", schedule_id=schedule_id, user_id=owner_id)

    # ─── Helpers ────────────────────────────────────────

    async def _owned(self, owner_id: int, schedule_id: int) -> Schedule:
        result = await self.db.execute(
            select(Schedule).where(
                Schedule.id == schedule_id,
                Schedule.user_id == owner_id,
            )
        )
        schedule = result.scalars().first()
        if schedule is None:
            raise NotFound(SCHEDULE_NOT_FOUND)
        return schedule

    async def _owner(self, owner_id: int) -> User:
        # The token may outlive the account.
        owner = await self.db.get(User, owner_id)
        if owner is None:
            raise Unauthenticated()
        return owner


def _days(days_of_week: list[str]) -> list[str]:
    try:
        return normalize_days(days_of_week)
    except ValueError as e:
        raise ValidationError(
            [{"loc": ["days_of_week"], "msg": str(e), "type": "value_error"}]
        ) from e
