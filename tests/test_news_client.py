"""Unit tests for the NewsAPI client using httpx.MockTransport."""

import httpx
import pytest

from idea_validator.adapters.news.factory import create_news_client
from idea_validator.adapters.news.newsapi_client import NewsAPIClient
from idea_validator.core.config import NewsSettings
from idea_validator.core.errors import ConfigurationAppError, ValidationAppError

ARTICLES_PAYLOAD = {
    "status": "ok",
    "totalResults": 2,
    "articles": [
        {
            "source": {"id": None, "name": "TechCrunch"},
            "title": "Meal kit startups raise funding",
            "description": "Investors bet on convenience.",
            "url": "https://example.com/meal-kits",
            "publishedAt": "2025-01-02T10:00:00Z",
        },
        {
            "source": {"id": "bbc-news", "name": "BBC News"},
            "title": "Students cook at home more",
            "description": None,
            "url": "https://example.com/students",
            "publishedAt": "2025-01-01T08:00:00Z",
        },
    ],
}


def _client(handler) -> NewsAPIClient:
    return NewsAPIClient(
        api_key="news-key",
        base_url="https://newsapi.test/v2",
        transport=httpx.MockTransport(handler),
    )


class TestNewsAPIClient:
    """Test request shape, mapping and placeholder fallbacks."""

    @pytest.mark.asyncio
    async def test_builds_request_and_maps_articles(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ARTICLES_PAYLOAD)

        articles = await _client(handler).search(["meal kits", "students"])

        request = seen[0]
        assert request.url.path == "/v2/everything"
        assert request.url.params["q"] == "meal kits OR students"
        assert request.url.params["apiKey"] == "news-key"
        assert request.url.params["language"] == "en"
        assert request.url.params["sortBy"] == "relevancy"
        assert request.url.params["pageSize"] == "5"

        assert [article.title for article in articles] == [
            "Meal kit startups raise funding",
            "Students cook at home more",
        ]
        assert articles[0].source == "TechCrunch"
        assert articles[0].published_at == "2025-01-02T10:00:00Z"
        assert articles[1].description is None

    @pytest.mark.asyncio
    async def test_empty_results_return_placeholder(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "ok", "totalResults": 0, "articles": []})

        articles = await _client(handler).search(["nothing"])

        assert len(articles) == 1
        assert articles[0].title == "No relevant articles found"
        assert articles[0].url == "https://example.com/no-articles"

    @pytest.mark.asyncio
    async def test_http_error_returns_placeholder(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"status": "error", "code": "rateLimited"})

        articles = await _client(handler).search(["meal kits"])

        assert len(articles) == 1
        assert articles[0].title == "Error fetching articles"
        assert articles[0].url == "https://example.com/error"

    @pytest.mark.asyncio
    async def test_network_error_returns_placeholder(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        articles = await _client(handler).search(["meal kits"])

        assert articles[0].title == "Error fetching articles"

    @pytest.mark.asyncio
    async def test_invalid_json_returns_placeholder(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        articles = await _client(handler).search(["meal kits"])

        assert articles[0].title == "Error fetching articles"

    @pytest.mark.asyncio
    async def test_empty_keywords_rejected(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=ARTICLES_PAYLOAD))

        with pytest.raises(ValidationAppError):
            await client.search([])

    @pytest.mark.asyncio
    async def test_non_list_keywords_rejected(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=ARTICLES_PAYLOAD))

        with pytest.raises(ValidationAppError):
            await client.search("meal kits")  # type: ignore[arg-type]

    def test_missing_api_key_rejected(self) -> None:
        with pytest.raises(ConfigurationAppError) as exc_info:
            NewsAPIClient(api_key=None)

        assert exc_info.value.code == "news_missing_api_key"


class TestCreateNewsClient:
    """Test the factory."""

    def test_builds_from_settings(self) -> None:
        client = create_news_client(NewsSettings(api_key="k", page_size=3, language="de"))

        assert isinstance(client, NewsAPIClient)
        assert client.page_size == 3
        assert client.language == "de"

    def test_missing_key(self) -> None:
        with pytest.raises(ConfigurationAppError):
            create_news_client(NewsSettings(api_key=""))
