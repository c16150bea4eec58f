"""Factory for the news-search client."""

from idea_validator.adapters.news.base import AbstractNewsClient
from idea_validator.adapters.news.newsapi_client import NewsAPIClient
from idea_validator.core.config import NewsSettings, settings


def create_news_client(news_settings: NewsSettings | None = None) -> AbstractNewsClient:
    """Build the NewsAPI client from settings.

    Raises:
        ConfigurationAppError: If NEWS_API_KEY is missing.
    """
    cfg = news_settings or settings.news
    return NewsAPIClient(
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        language=cfg.language,
        page_size=cfg.page_size,
        timeout_seconds=cfg.timeout_seconds,
    )
