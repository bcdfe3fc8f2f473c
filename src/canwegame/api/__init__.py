"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health, register and login are
open; the auth router guards /auth/me itself.
"""

from fastapi import APIRouter, Depends

from canwegame.api.auth import router as auth_router
from canwegame.api.health import router as health_router
from canwegame.api.schedules import router as schedules_router
from canwegame.api.users import router as users_router
from canwegame.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes (no auth)
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes (valid Bearer token required)
api_router.include_router(users_router, tags=["users", "friends"], dependencies=_auth)
api_router.include_router(schedules_router, tags=["schedules"], dependencies=_auth)
