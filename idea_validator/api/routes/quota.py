from __future__ import annotations

from fastapi import APIRouter, Depends

from idea_validator.api.dependencies import get_container
from idea_validator.core.auth import get_current_user_id, verify_api_key
from idea_validator.core.container import ServiceContainer
from idea_validator.schemas.idea import QuotaStatus

router = APIRouter(tags=["Quota"], dependencies=[Depends(verify_api_key)])


@router.get("/quota", response_model=QuotaStatus)
async def get_quota(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> QuotaStatus:
    """Return how many question credits the caller has used and has left.

    Served from the local cache while it is fresh, so it may lag behind
    activity from other processes.
    """
    limit = container.settings.quota.question_limit
    return await container.quota_tracker.status(user_id, limit)
