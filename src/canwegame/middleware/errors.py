"""Catch-all for unexpected exceptions.

Learn: FastAPI's handler for plain Exception runs in Starlette's outermost
ServerErrorMiddleware, outside every middleware added with add_middleware.
A 500 produced there would skip the request ID, the security headers and
the access log. This middleware is registered first, so it sits innermost
and turns the exception into an ordinary response that travels back out
through the rest of the stack.

Domain errors never reach it: their handler runs inside the router.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from canwegame.errors import InternalError

logger = structlog.get_logger()


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Log the traceback and answer a generic 500."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error("http.unhandled_error", path=request.url.path, exc_info=exc)
            return JSONResponse(
                status_code=500,
                content={"detail": InternalError.default_detail},
            )
