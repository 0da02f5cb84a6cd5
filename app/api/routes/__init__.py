from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.resources import router as resources_router

__all__ = ["health_router", "resources_router"]
