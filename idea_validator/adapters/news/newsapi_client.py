"""NewsAPI (newsapi.org) client adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from idea_validator.adapters.news.base import AbstractNewsClient
from idea_validator.core.errors import ConfigurationAppError, ValidationAppError
from idea_validator.schemas.news import NewsArticle

logger = logging.getLogger(__name__)

NO_ARTICLES_PLACEHOLDER = NewsArticle(
    title="No relevant articles found",
    description="Please try a different set of keywords or refine your idea description.",
    url="https://example.com/no-articles",
)

FETCH_ERROR_PLACEHOLDER = NewsArticle(
    title="Error fetching articles",
    description="There was an error connecting to the news service. Please try again later.",
    url="https://example.com/error",
)


def _to_article(raw: dict[str, Any]) -> NewsArticle | None:
    if not raw.get("title") or not raw.get("url"):
        return None
    source = raw.get("source")
    return NewsArticle(
        title=raw["title"],
        description=raw.get("description"),
        url=raw["url"],
        source=source.get("name") if isinstance(source, dict) else source,
        published_at=raw.get("publishedAt"),
    )


class NewsAPIClient(AbstractNewsClient):
    """Keyword search over the NewsAPI ``/everything`` endpoint.

    Attributes:
        base_url: API root, without trailing slash.
        language: Article language filter.
        page_size: Maximum number of articles per search.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://newsapi.org/v2",
        language: str = "en",
        page_size: int = 5,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the NewsAPI client.

        Args:
            api_key: NewsAPI key.
            base_url: API root URL.
            language: Article language filter.
            page_size: Articles per search.
            timeout_seconds: Timeout for requests in seconds.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).

        Raises:
            ConfigurationAppError: If ``api_key`` is missing.
        """
        if not api_key:
            raise ConfigurationAppError(
                code="news_missing_api_key",
                message="NewsAPI key is not configured. Set the NEWS_API_KEY environment variable",
            )
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.page_size = page_size
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    async def search(self, keywords: list[str]) -> list[NewsArticle]:
        if not isinstance(keywords, list):
            raise ValidationAppError(
                code="news_invalid_keywords",
                message="Keywords must be a list",
            )
        if not keywords:
            raise ValidationAppError(
                code="news_invalid_keywords",
                message="At least one keyword is required",
            )

        params = {
            "q": " OR ".join(str(keyword) for keyword in keywords),
            "apiKey": self._api_key,
            "language": self.language,
            "sortBy": "relevancy",
            "pageSize": self.page_size,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/everything", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "news.request_failed",
                extra={"status_code": exc.response.status_code, "keyword_count": len(keywords)},
            )
            return [FETCH_ERROR_PLACEHOLDER.model_copy()]
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "news.request_failed",
                extra={"error_type": type(exc).__name__, "keyword_count": len(keywords)},
            )
            return [FETCH_ERROR_PLACEHOLDER.model_copy()]

        raw_articles = payload.get("articles") if isinstance(payload, dict) else None
        articles = [
            article
            for article in (_to_article(raw) for raw in raw_articles or [] if isinstance(raw, dict))
            if article is not None
        ]

        if not articles:
            logger.warning("news.no_articles", extra={"keyword_count": len(keywords)})
            return [NO_ARTICLES_PLACEHOLDER.model_copy()]

        logger.info("news.articles_found", extra={"article_count": len(articles)})
        return articles
