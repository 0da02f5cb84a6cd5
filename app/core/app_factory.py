"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import health_router, resources_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import EmptyPreflightCORSMiddleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import parse_header_list


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Sheets Data Gateway",
        description=(
            "Read-only JSON API serving the data breach tracker and the conference "
            "calendar from Google Sheets. Responses are cached per resource, rate "
            "limited per client and normalized to canonical YYYY-MM-DD dates."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    # Permissive CORS; answers OPTIONS pre-flight without a body
    app.add_middleware(
        EmptyPreflightCORSMiddleware,
        allow_origins=parse_header_list(settings.app.cors_allow_origins) or ["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[
            "X-Cache",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
            settings.log.request_id_header,
        ],
        max_age=86400,
    )

    setup_exception_handlers(app)

    app.include_router(resources_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
