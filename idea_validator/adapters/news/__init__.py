from idea_validator.adapters.news.base import AbstractNewsClient
from idea_validator.adapters.news.factory import create_news_client
from idea_validator.adapters.news.newsapi_client import NewsAPIClient

__all__ = ["AbstractNewsClient", "NewsAPIClient", "create_news_client"]
