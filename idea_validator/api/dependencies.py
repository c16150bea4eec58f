from __future__ import annotations

from fastapi import Depends, Request

from idea_validator.core.container import ServiceContainer
from idea_validator.services.idea_service import IdeaService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_idea_service(
    container: ServiceContainer = Depends(get_container),
) -> IdeaService:
    """Return the shared IdeaService, building its clients on first use."""
    return container.idea_service
