"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown. Middleware, CORS, error
handlers and routers are all registered here.

Configuration is validated when canwegame.config is imported, which
happens before create_app() runs: a missing JWT secret/issuer/audience/
expiry stops the process here, before it serves a single request.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from canwegame import __version__
from canwegame.api import api_router
from canwegame.config import settings
from canwegame.errors import DomainError, Unauthenticated

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown.
    """
    logger.info(
        "canwegame.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        token_ttl_minutes=settings.jwt_expiry_minutes,
    )

    yield

    logger.info("canwegame.shutdown")

    from canwegame.db.engine import engine
    await engine.dispose()


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map service-layer errors to JSON responses.

    Only the error's public detail goes to the client. 5xx errors are
    logged with their traceback.
    """
    if exc.status_code >= 500:
        logger.error("http.domain_error", path=request.url.path, exc_info=exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="CanWeGame API",
        description="Share gaming availability with your friends",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → UnhandledError → handler

    from canwegame.middleware.errors import UnhandledErrorMiddleware
    from canwegame.middleware.request_id import RequestIdMiddleware
    from canwegame.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: canwegame.main:app)
app = create_app()
