"""Lazily built service graph shared by the HTTP layer.

Clients that need credentials (document store, LLM, news) are created on
first use, so a missing key fails the first request that needs it with a
descriptive ``ConfigurationAppError`` instead of preventing startup.
"""

from __future__ import annotations

import logging

from idea_validator.adapters.llm.base import AbstractLLMClient
from idea_validator.adapters.llm.factory import create_llm_client
from idea_validator.adapters.news.base import AbstractNewsClient
from idea_validator.adapters.news.factory import create_news_client
from idea_validator.adapters.quota_cache.base import AbstractQuotaCache
from idea_validator.adapters.quota_cache.factory import create_quota_cache
from idea_validator.adapters.store.base import AbstractDocumentStore
from idea_validator.adapters.store.factory import create_document_store
from idea_validator.core.config import Settings
from idea_validator.services.analysis_service import AnalysisService
from idea_validator.services.idea_repository import IdeaRepository
from idea_validator.services.idea_service import IdeaService
from idea_validator.services.quota_tracker import QuotaTracker

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Owns one instance of each adapter and service per application.

    Any adapter may be passed in explicitly (tests inject fakes); the rest
    are built from ``settings`` when first accessed.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        store: AbstractDocumentStore | None = None,
        cache: AbstractQuotaCache | None = None,
        llm: AbstractLLMClient | None = None,
        news: AbstractNewsClient | None = None,
    ) -> None:
        self.settings = settings
        self._store = store
        self._cache = cache
        self._llm = llm
        self._news = news
        self._quota_tracker: QuotaTracker | None = None
        self._analysis_service: AnalysisService | None = None
        self._idea_service: IdeaService | None = None

    @property
    def store(self) -> AbstractDocumentStore:
        if self._store is None:
            self._store = create_document_store(self.settings.store)
        return self._store

    @property
    def cache(self) -> AbstractQuotaCache:
        if self._cache is None:
            self._cache = create_quota_cache(self.settings.quota)
        return self._cache

    @property
    def llm(self) -> AbstractLLMClient:
        if self._llm is None:
            self._llm = create_llm_client(self.settings.llm)
            logger.info(
                "container.llm_ready",
                extra={"provider": self._llm.provider, "model": self._llm.model},
            )
        return self._llm

    @property
    def news(self) -> AbstractNewsClient:
        if self._news is None:
            self._news = create_news_client(self.settings.news)
        return self._news

    @property
    def quota_tracker(self) -> QuotaTracker:
        if self._quota_tracker is None:
            self._quota_tracker = QuotaTracker.from_settings(
                self.store, self.cache, self.settings.quota
            )
        return self._quota_tracker

    @property
    def analysis_service(self) -> AnalysisService:
        if self._analysis_service is None:
            self._analysis_service = AnalysisService(
                self.llm, temperature=self.settings.llm.temperature
            )
        return self._analysis_service

    @property
    def idea_service(self) -> IdeaService:
        # Model and news clients stay unbuilt until a submission or follow-up
        if self._idea_service is None:
            self._idea_service = IdeaService(
                IdeaRepository(self.store),
                self.quota_tracker,
                lambda: self.analysis_service,
                lambda: self.news,
                question_limit=self.settings.quota.question_limit,
                max_idea_chars=self.settings.app.max_idea_chars,
                max_question_chars=self.settings.app.max_question_chars,
            )
        return self._idea_service

    async def aclose(self) -> None:
        """Write any pending quota increments before shutdown."""
        if self._quota_tracker is not None:
            await self._quota_tracker.flush_all()
