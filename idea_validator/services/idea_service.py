"""Idea submission and follow-up workflow.

Every idea submitted and every follow-up question asked consumes one
question credit from the caller's quota.
"""

from __future__ import annotations

import logging
from typing import Callable

from idea_validator.adapters.news.base import AbstractNewsClient
from idea_validator.core.errors import (
    PermissionAppError,
    QuotaExceededAppError,
    StoreAppError,
    ValidationAppError,
)
from idea_validator.schemas.idea import FollowUpQA, Idea, IdeaSummary, QuotaStatus
from idea_validator.schemas.news import NewsArticle
from idea_validator.services.analysis_service import AnalysisService
from idea_validator.services.idea_repository import IdeaRepository
from idea_validator.services.quota_tracker import QuotaTracker
from idea_validator.utils.analysis_transformer import transform_analysis_format

logger = logging.getLogger(__name__)


def _require_text(value: str, *, field: str, max_chars: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationAppError(
            code=f"{field}_empty",
            message=f"{field.replace('_', ' ').capitalize()} must not be empty",
        )
    if len(text) > max_chars:
        raise ValidationAppError(
            code=f"{field}_too_long",
            message=f"{field.replace('_', ' ').capitalize()} exceeds {max_chars} characters",
            details={"limit": max_chars, "count": len(text)},
        )
    return text


class IdeaService:
    """Coordinates persistence, quota, news search and analysis.

    The analysis service and news client are obtained from providers when a
    submission or follow-up first needs them, so listing and viewing stored
    ideas works without model or news credentials.

    Attributes:
        question_limit: Credits available to each user.
    """

    def __init__(
        self,
        repository: IdeaRepository,
        quota: QuotaTracker,
        analysis_provider: Callable[[], AnalysisService],
        news_provider: Callable[[], AbstractNewsClient],
        *,
        question_limit: int = 10,
        max_idea_chars: int = 5000,
        max_question_chars: int = 1000,
    ) -> None:
        self.repository = repository
        self.quota = quota
        self._analysis_provider = analysis_provider
        self._news_provider = news_provider
        self.question_limit = question_limit
        self.max_idea_chars = max_idea_chars
        self.max_question_chars = max_question_chars

    @property
    def analysis(self) -> AnalysisService:
        return self._analysis_provider()

    @property
    def news(self) -> AbstractNewsClient:
        return self._news_provider()

    def _limit_error(self) -> QuotaExceededAppError:
        return QuotaExceededAppError(
            code="question_limit_reached",
            message=(
                f"You've reached your question limit of {self.question_limit}. "
                "Please request more questions to continue."
            ),
            details={"limit": self.question_limit},
        )

    async def _ensure_within_limit(self, user_id: str, *, strict: bool) -> None:
        try:
            reached = await self.quota.check_limit(user_id, self.question_limit)
        except StoreAppError as exc:
            if strict:
                raise
            # Quota checks are advisory for new ideas
            logger.warning("ideas.limit_check_failed", extra={"error_code": exc.code})
            return
        if reached:
            raise self._limit_error()

    async def _owned_idea(self, user_id: str, idea_id: str) -> Idea:
        idea = await self.repository.get(idea_id)
        if idea.user_id != user_id:
            raise PermissionAppError(
                code="idea_forbidden",
                message="You do not have permission to view this idea",
                details={"document_id": idea_id},
            )
        if idea.analysis:
            idea.analysis = transform_analysis_format(idea.analysis)
        return idea

    async def _search_news(
        self, news: AbstractNewsClient, keywords: list[str]
    ) -> list[NewsArticle]:
        try:
            return await news.search(keywords)
        except ValidationAppError as exc:
            logger.warning("ideas.news_skipped", extra={"error_code": exc.code})
            return []

    async def submit_idea(self, user_id: str, idea_text: str) -> Idea:
        """Save, analyse and return a new idea.

        Args:
            user_id: Submitting user.
            idea_text: Free-text idea description.

        Returns:
            The completed idea including news and analysis.

        Raises:
            ValidationAppError: If the text is blank or too long.
            QuotaExceededAppError: If the user has no credits left.
            ConfigurationAppError: If model or news credentials are missing;
                raised before anything is stored or charged.
        """
        text = _require_text(idea_text, field="idea", max_chars=self.max_idea_chars)
        analysis_service = self.analysis
        news = self.news
        await self._ensure_within_limit(user_id, strict=False)

        idea_id = await self.repository.add_idea(user_id, text, [])
        await self.quota.increment(user_id)

        keywords = await analysis_service.extract_keywords(text)
        articles = await self._search_news(news, keywords)
        analysis = await analysis_service.analyze_idea(text, articles)

        await self.repository.update_with_analysis(
            idea_id,
            articles,
            analysis.model_dump(by_alias=True, exclude_none=True),
            keywords=keywords,
        )
        logger.info(
            "ideas.analysed",
            extra={
                "idea_id": idea_id,
                "keyword_count": len(keywords),
                "article_count": len(articles),
                "fallback": analysis.error is not None,
            },
        )
        return await self.repository.get(idea_id)

    async def get_idea(self, user_id: str, idea_id: str) -> Idea:
        """Return an idea owned by ``user_id`` with its analysis normalised.

        Raises:
            NotFoundAppError: If the idea does not exist.
            PermissionAppError: If another user owns it.
        """
        return await self._owned_idea(user_id, idea_id)

    async def ask_follow_up(self, user_id: str, idea_id: str, question: str) -> FollowUpQA:
        """Answer a question about an idea and record it.

        Raises:
            ValidationAppError: If the question is blank or too long.
            NotFoundAppError: If the idea does not exist.
            PermissionAppError: If another user owns it.
            QuotaExceededAppError: If the user has no credits left.
        """
        text = _require_text(question, field="question", max_chars=self.max_question_chars)
        idea = await self._owned_idea(user_id, idea_id)
        analysis_service = self.analysis
        await self._ensure_within_limit(user_id, strict=True)

        answer = await analysis_service.answer_follow_up(
            text,
            idea.idea_text,
            idea.analysis,
            idea.questions,
        )
        entry = await self.repository.add_follow_up(idea_id, text, answer)
        await self.quota.increment(user_id)
        return entry

    async def list_ideas(self, user_id: str) -> list[IdeaSummary]:
        ideas = await self.repository.list_for_user(user_id)
        return [
            IdeaSummary(
                id=idea.id,
                idea_text=idea.idea_text,
                status=idea.status,
                idea_summary=(idea.analysis or {}).get("ideaSummary"),
                created_at=idea.created_at,
            )
            for idea in ideas
        ]

    async def quota_status(self, user_id: str) -> QuotaStatus:
        return await self.quota.status(user_id, self.question_limit)
