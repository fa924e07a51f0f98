"""
Shared fixtures: sample NewsAPI payloads, API keys and a NewsAPI mock.
"""
import httpx
import pytest

from newsreader import config
from newsreader.models import Article, Source
from newsreader.services import news_api


@pytest.fixture
def api_keys(monkeypatch):
    monkeypatch.setattr(config, "NEWS_API_KEY", "test-news-key")
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-gemini-key")


@pytest.fixture
def article_payload():
    """One article as NewsAPI returns it."""
    return {
        "source": {"id": "reuters", "name": "Reuters"},
        "author": "Jane Doe",
        "title": "Central bank holds interest rates steady amid inflation worries",
        "description": "<p>The central bank kept interest rates unchanged on Wednesday.</p>",
        "url": "https://example.com/business/central-bank-holds-rates",
        "urlToImage": "https://example.com/img.jpg",
        "publishedAt": "2024-05-01T12:00:00Z",
        "content": "Policymakers voted to keep interest rates unchanged... [+1200 chars]",
    }


@pytest.fixture
def sample_article():
    return Article(
        source=Source(id=None, name="Example News"),
        title="Market rally continues as technology stocks surge",
        description="Technology stocks pushed the market higher for a third day.",
        url="https://example.com/technology/market-rally-continues",
        content="Technology stocks pushed the market higher.",
        category="technology",
    )


@pytest.fixture
def mock_news_api(monkeypatch, api_keys):
    """
    Route NewsAPI calls to a handler. Returns the list of captured requests.

    Usage: requests = mock_news_api(lambda request: httpx.Response(200, json={...}))
    """
    captured = []

    def install(handler):
        def recording_handler(request):
            captured.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        monkeypatch.setattr(
            news_api,
            "_make_client",
            lambda: httpx.AsyncClient(base_url=news_api.NEWS_API_BASE_URL, transport=transport),
        )
        return captured

    return install
