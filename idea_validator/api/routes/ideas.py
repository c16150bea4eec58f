from __future__ import annotations

from fastapi import APIRouter, Depends, status

from idea_validator.api.dependencies import get_idea_service
from idea_validator.core.auth import get_current_user_id, verify_api_key
from idea_validator.schemas.idea import (
    FollowUpQA,
    FollowUpRequest,
    Idea,
    IdeaCreateRequest,
    IdeaSummary,
)
from idea_validator.services.idea_service import IdeaService

router = APIRouter(
    prefix="/ideas",
    tags=["Ideas"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("", response_model=list[IdeaSummary])
async def list_ideas(
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
) -> list[IdeaSummary]:
    """List the caller's ideas, newest first."""
    return await service.list_ideas(user_id)


@router.post("", response_model=Idea, status_code=status.HTTP_201_CREATED)
async def submit_idea(
    payload: IdeaCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
) -> Idea:
    """Submit a business idea for validation.

    Runs the full pipeline (keywords, news search, analysis) before
    responding, and consumes one question credit.

    Returns:
        Idea: The stored idea with its news articles and analysis.

    Raises:
        ValidationAppError: 400 if the idea text is blank or too long.
        QuotaExceededAppError: 429 if no question credits remain.
    """
    return await service.submit_idea(user_id, payload.idea_text)


@router.get("/{idea_id}", response_model=Idea)
async def get_idea(
    idea_id: str,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
) -> Idea:
    """Return one of the caller's ideas with its analysis and Q&A history."""
    return await service.get_idea(user_id, idea_id)


@router.post(
    "/{idea_id}/questions",
    response_model=FollowUpQA,
    status_code=status.HTTP_201_CREATED,
)
async def ask_follow_up(
    idea_id: str,
    payload: FollowUpRequest,
    user_id: str = Depends(get_current_user_id),
    service: IdeaService = Depends(get_idea_service),
) -> FollowUpQA:
    """Ask a follow-up question about an analysed idea.

    Consumes one question credit.
    """
    return await service.ask_follow_up(user_id, idea_id, payload.question)
