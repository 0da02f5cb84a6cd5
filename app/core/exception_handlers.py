"""Global exception handlers for consistent error responses.

Every non-200 response has the body ``{"error": str, "details": str?}``:
- ConfigurationAppError -> 500
- UpstreamAppError -> 502
- RateLimitExceededAppError -> 429 with Retry-After and X-RateLimit-* headers
- Starlette HTTP errors (404, 405, ...) -> their own status
- Unexpected Exception -> generic 500 (safety net, no internals leaked)
"""

import logging
import math
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import AppError, RateLimitExceededAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _error_body(error: str, details: str | None = None) -> dict:
    body: dict = {"error": error}
    if details:
        body["details"] = details
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors using the status code carried by the error class.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code and body.
    """
    status_code = exc.status_code
    log = logger.warning if status_code < 500 else logger.error
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    content = _error_body(exc.message, exc.details)
    headers: dict[str, str] = {}

    if isinstance(exc, RateLimitExceededAppError) and exc.result is not None:
        retry_after = exc.result.retry_after_seconds
        if retry_after is None:
            retry_after = max(1, int(math.ceil(exc.result.reset_at - time.time())))
        content["retryAfter"] = retry_after
        if settings.rate_limit.include_headers:
            headers.update(exc.result.headers())
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (404, 405) in the same error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure for debugging while returning a generic message, so no
    stack traces or upstream internals reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "An unexpected error occurred. Please try again later."),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
