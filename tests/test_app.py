import pytest

import app as app_module
from newsreader import config
from newsreader.models import InsightRecord, Sentiment, TrendingTopic
from newsreader.normalizer import normalize
from newsreader.services.news_api import HOME_CATEGORIES


@pytest.fixture
def client(api_keys):
    app_module.app.config["TESTING"] = True
    app_module.cache.clear()
    with app_module.app.test_client() as client:
        yield client
    app_module.cache.clear()


@pytest.fixture
def insights():
    return InsightRecord(
        summary="Tech stocks **rallied**.",
        key_points=("Third day of gains",),
        keywords=("technology", "stocks"),
        sentiment=Sentiment.POSITIVE,
    )


@pytest.fixture
def news(monkeypatch, sample_article):
    """Replace NewsAPI calls with canned data; returns a call counter."""
    calls = {"home": 0, "article": 0}

    async def fake_home_page():
        calls["home"] += 1
        topic = TrendingTopic("technology", "Technology", "Latest news and updates about technology",
                              "Technology", ["chips"], 2)
        return {
            "headlines": [sample_article],
            "trending": [topic],
            "categories": {name: [sample_article] for name in HOME_CATEGORIES},
        }

    async def fake_article_page(url):
        calls["article"] += 1
        if url != sample_article.url:
            return {"article": None, "related": []}
        return {"article": sample_article, "related": []}

    async def fake_category(category):
        return [sample_article]

    monkeypatch.setattr(app_module, "fetch_home_page", fake_home_page)
    monkeypatch.setattr(app_module, "fetch_article_page", fake_article_page)
    monkeypatch.setattr(app_module, "fetch_news_by_category", fake_category)
    return calls


def test_home_page_is_cached(client, news, sample_article):
    first = client.get("/")
    second = client.get("/")

    assert first.status_code == 200
    assert sample_article.title in first.get_data(as_text=True)
    assert "Trending Topics" in first.get_data(as_text=True)
    assert second.status_code == 200
    assert news["home"] == 1


def test_category_page(client, news, sample_article):
    response = client.get("/category/Technology")
    assert response.status_code == 200
    assert sample_article.title in response.get_data(as_text=True)

    assert client.get("/category/astrology").status_code == 404


def test_article_page(client, news, monkeypatch, sample_article, insights):
    monkeypatch.setattr(app_module, "generate_article_insights", lambda article: insights)

    response = client.get("/article", query_string={"url": sample_article.url})

    body = response.get_data(as_text=True)
    assert response.status_code == 200
    assert "<strong>rallied</strong>" in body
    assert "Third day of gains" in body
    assert "Positive" in body


def test_article_not_found(client, news):
    assert client.get("/article", query_string={"url": "https://missing.test/x"}).status_code == 404
    assert client.get("/article").status_code == 400


def test_insights_for_posted_article(client, monkeypatch, article_payload, insights):
    seen = []

    def fake_insights(article):
        seen.append(article)
        return insights

    monkeypatch.setattr(app_module, "generate_article_insights", fake_insights)

    response = client.post("/api/insights", json={"article": article_payload})

    assert response.status_code == 200
    data = response.get_json()
    assert data["insights"] == {
        "summary": "Tech stocks **rallied**.",
        "keyPoints": ["Third day of gains"],
        "keywords": ["technology", "stocks"],
        "sentiment": "Positive",
    }
    assert data["article"]["source"] == "Reuters"
    assert seen[0].category == "business"


def test_insights_by_url(client, news, monkeypatch, sample_article, insights):
    monkeypatch.setattr(app_module, "generate_article_insights", lambda article: insights)

    ok = client.post("/api/insights", json={"url": sample_article.url})
    missing = client.post("/api/insights", json={"url": "https://missing.test/x"})

    assert ok.status_code == 200
    assert ok.get_json()["insights"]["sentiment"] == "Positive"
    assert missing.status_code == 404
    assert client.post("/api/insights", json={}).status_code == 400


def test_chat(client, news, monkeypatch, sample_article):
    received = {}

    def fake_chat(history, message, article):
        received.update(history=history, message=message, article=article)
        return "Stocks rose on **chip** demand."

    monkeypatch.setattr(app_module, "chat_with_ai", fake_chat)

    response = client.post("/api/chat", json={
        "messages": [{"role": "assistant", "content": "Hello!"}],
        "message": "Why did stocks rise?",
        "url": sample_article.url,
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data["reply"] == "Stocks rose on **chip** demand."
    assert "<strong>chip</strong>" in data["reply_html"]
    assert received["history"][0].role == "assistant"
    assert received["article"] is sample_article or received["article"].url == sample_article.url


def test_chat_requires_message(client):
    response = client.post("/api/chat", json={"message": "   "})
    assert response.status_code == 400
    assert response.get_json()["error"] == "No message provided"


def test_env_check_ok(client):
    response = client.get("/api/env-check")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_env_check_reports_missing_keys(client, monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")

    response = client.get("/api/env-check")

    assert response.status_code == 400
    data = response.get_json()
    assert data["missingKeys"] == ["GEMINI_API_KEY"]
    assert data["message"] == "Missing required environment variables: GEMINI_API_KEY"


def test_failed_insights_are_not_cached(client, news, monkeypatch, sample_article, insights):
    replies = [normalize(None, sample_article.fallback_text), insights]
    monkeypatch.setattr(app_module, "generate_article_insights", lambda article: replies.pop(0))

    first = client.post("/api/insights", json={"url": sample_article.url})
    second = client.post("/api/insights", json={"url": sample_article.url})

    assert first.get_json()["insights"]["summary"] == "Unable to generate summary at this time."
    assert second.get_json()["insights"]["summary"] == "Tech stocks **rallied**."
