"""Auth API — registration, login, current user.

Learn: Routes for account creation and token issuing:
- POST /auth/register → create a new user account
- POST /auth/login → username/password → JWT access token
- GET /auth/me → the user behind the presented token

There is no refresh endpoint: when a token expires, log in again.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from canwegame.auth.dependencies import CurrentIdentity, get_current_user
from canwegame.db.engine import get_db
from canwegame.schemas.user import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from canwegame.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_svc)):
    """Create a new user account."""
    return await svc.register(
        username=body.username,
        email=body.email,
        password=body.password,
    )


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: UserService = Depends(_svc)):
    """Login with username and password → JWT."""
    user, token, expires_at = await svc.login(body.username, body.password)
    return TokenResponse(
        token=token,
        user_id=user.id,
        username=user.username,
        expires_at=expires_at,
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    return await svc.require_current_user(identity.user_id)
