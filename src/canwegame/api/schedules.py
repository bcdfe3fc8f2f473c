"""Schedule API routes.

Learn: The owner of a new schedule is always the caller from the token —
there is no user_id in the request body to trust or mistrust. Updates and
deletes on someone else's schedule answer 404, the same as a missing id.
"""

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.auth.dependencies import CurrentIdentity, get_current_user
from canwegame.db.engine import get_db
from canwegame.schemas.schedule import ScheduleRead, ScheduleWrite
from canwegame.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedules")

MAX_ID = 2**31 - 1


def _svc(db: AsyncSession = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


@router.get("/my", response_model=list[ScheduleRead])
async def list_my_schedules(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ScheduleService = Depends(_svc),
):
    return await svc.list_for_user(identity.user_id)


@router.get("/user/{user_id}", response_model=list[ScheduleRead])
async def list_user_schedules(
    user_id: int = Path(..., ge=1, le=MAX_ID),
    svc: ScheduleService = Depends(_svc),
):
    """Any user's schedules (e.g. a friend's). Open to every signed-in user."""
    return await svc.list_user_schedules(user_id)


@router.post("", response_model=ScheduleRead, status_code=201)
async def create_schedule(
    body: ScheduleWrite,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ScheduleService = Depends(_svc),
):
    return await svc.create_schedule(
        owner_id=identity.user_id,
        game_title=body.game_title,
        days_of_week=body.days_of_week,
        start_time=body.start_time,
        end_time=body.end_time,
        weekly=body.weekly,
        description=body.description,
    )


@router.put("/{schedule_id}", response_model=ScheduleRead)
async def update_schedule(
    body: ScheduleWrite,
    schedule_id: int = Path(..., ge=1, le=MAX_ID),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ScheduleService = Depends(_svc),
):
    """Replace a schedule you own."""
    return await svc.update_schedule(
        owner_id=identity.user_id,
        schedule_id=schedule_id,
        game_title=body.game_title,
        days_of_week=body.days_of_week,
        start_time=body.start_time,
        end_time=body.end_time,
        weekly=body.weekly,
        description=body.description,
    )


@router.delete("/{schedule_id}", status_code=204)
async def delete_schedule(
    schedule_id: int = Path(..., ge=1, le=MAX_ID),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ScheduleService = Depends(_svc),
):
    await svc.delete_schedule(identity.user_id, schedule_id)
    return Response(status_code=204)
