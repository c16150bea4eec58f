from __future__ import annotations

from idea_validator.api.routes.health import router as health_router
from idea_validator.api.routes.ideas import router as ideas_router
from idea_validator.api.routes.quota import router as quota_router

__all__ = ["health_router", "ideas_router", "quota_router"]
