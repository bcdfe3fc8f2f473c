"""User and friend API routes.

Learn: The /users/friends and /users/me routes are declared before
/users/{user_id}. FastAPI matches in declaration order, and "friends"
would otherwise be tried as a user id.
"""

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.auth.dependencies import CurrentIdentity, get_current_user
from canwegame.db.engine import get_db
from canwegame.schemas.user import (
    FriendAdd,
    FriendRead,
    PasswordChange,
    UserRead,
    UserUpdate,
)
from canwegame.services.friend_service import FriendService
from canwegame.services.user_service import UserService

router = APIRouter(prefix="/users")

MAX_ID = 2**31 - 1


def _users(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _friends(db: AsyncSession = Depends(get_db)) -> FriendService:
    return FriendService(db)


def _friend_read(user, friends_since) -> FriendRead:
    return FriendRead(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        friends_since=friends_since,
    )


@router.get("", response_model=list[UserRead])
async def list_users(svc: UserService = Depends(_users)):
    """All registered users — for finding people to add."""
    return await svc.list_users()


# ─── Friends ────────────────────────────────────────────

@router.get("/friends", response_model=list[FriendRead])
async def list_friends(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: FriendService = Depends(_friends),
):
    rows = await svc.list_friends(identity.user_id)
    return [_friend_read(user, since) for user, since in rows]


@router.post("/friends", response_model=FriendRead, status_code=201)
async def add_friend(
    body: FriendAdd,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: FriendService = Depends(_friends),
):
    """Add a friend by user id or username. Takes effect immediately."""
    friendship, friend = await svc.add_friend(identity.user_id, body.friend_identifier)
    return _friend_read(friend, friendship.established_at)


@router.delete("/friends/{friend_identifier}", status_code=204)
async def remove_friend(
    friend_identifier: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: FriendService = Depends(_friends),
):
    await svc.remove_friend(identity.user_id, friend_identifier)
    return Response(status_code=204)


# ─── Own account ────────────────────────────────────────

@router.patch("/me", response_model=UserRead)
async def update_me(
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    return await svc.update_profile(
        identity.user_id, username=body.username, email=body.email
    )


@router.put("/me/password", status_code=204)
async def change_password(
    body: PasswordChange,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    """Change password. Tokens already issued stay valid until they expire."""
    await svc.change_password(
        identity.user_id, body.current_password, body.new_password
    )
    return Response(status_code=204)


@router.delete("/me", status_code=204)
async def delete_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    """Delete the account and its schedules. Friends must be removed first."""
    await svc.delete_account(identity.user_id)
    return Response(status_code=204)


# ─── Any user ───────────────────────────────────────────

@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int = Path(..., ge=1, le=MAX_ID),
    svc: UserService = Depends(_users),
):
    return await svc.get_user(user_id)
