import asyncio
import logging
from contextlib import asynccontextmanager

import httpx  # The async-capable requests library

from .. import config
from ..errors import ConfigurationError, NewsAPIError
from ..keywords import HEADLINE_STOP_WORDS, TRENDING_KEYWORD_LIMIT, extract_keywords
from ..models import Article, Source, TrendingTopic
from ..text import strip_html

logger = logging.getLogger(__name__)

NEWS_API_BASE_URL = "https://newsapi.org/v2"

CATEGORIES = ["world", "business", "technology", "science", "health", "sports", "entertainment", "politics"]
HOME_CATEGORIES = ["world", "business", "technology", "science", "health"]

MAX_TRENDING_TOPICS = 4


def _make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=NEWS_API_BASE_URL, timeout=10.0)


@asynccontextmanager
async def _client_scope(client=None):
    """
    Reuse the caller's client without closing it, or open a fresh one.
    """
    if client is not None:
        yield client
        return
    async with _make_client() as owned:
        yield owned


def category_from_url(url):
    """
    Guess a section from the article URL ("/technology/..." -> "technology").
    """
    url_lower = (url or "").lower()
    for category in CATEGORIES:
        if category in url_lower:
            return category
    return None


def transform_article(item: dict) -> Article:
    """
    Convert one NewsAPI article object into our Article.
    """
    source = item.get("source") or {}
    description = strip_html(item.get("description")) or "No description available"
    content = strip_html(item.get("content")) or description or "No content available"
    url = item.get("url") or ""

    return Article(
        source=Source(id=source.get("id"), name=source.get("name") or "Unknown"),
        author=item.get("author"),
        title=item.get("title") or "",
        description=description,
        url=url,
        url_to_image=item.get("urlToImage"),
        published_at=item.get("publishedAt"),
        content=content,
        category=category_from_url(url),
    )


def slug_query(url: str, words: int = 3) -> str:
    # ".../2024/05/fed-holds-rates-steady" -> "fed holds rates"
    slug = (url or "").rstrip("/").split("/")[-1]
    return " ".join(slug.split("-")[:words])


async def _get_articles(client: httpx.AsyncClient, path: str, params: dict) -> list[dict]:
    """
    Call a NewsAPI endpoint and return its raw "articles" list.
    """
    if not config.NEWS_API_KEY:
        raise ConfigurationError("NEWS_API_KEY is not set")

    response = await client.get(path, params={**params, "apiKey": config.NEWS_API_KEY})
    if response.status_code >= 400:
        raise NewsAPIError(response.status_code, response.text[:200])

    data = response.json()
    return data.get("articles") or []


async def fetch_top_headlines(client: httpx.AsyncClient = None) -> list[Article]:
    try:
        async with _client_scope(client) as c:
            items = await _get_articles(c, "/top-headlines", {"country": "us", "pageSize": 10})
        return [transform_article(item) for item in items]
    except Exception as e:
        logger.error("Error fetching top headlines: %s", e)
        return []


async def fetch_news_by_category(category: str, client: httpx.AsyncClient = None) -> list[Article]:
    params = {"country": "us", "category": category, "pageSize": 6}
    try:
        async with _client_scope(client) as c:
            items = await _get_articles(c, "/top-headlines", params)
        return [transform_article(item) for item in items]
    except Exception as e:
        logger.error("Error fetching news for category %s: %s", category, e)
        return []


def build_trending_topics(items: list[dict]) -> list[TrendingTopic]:
    """
    Group raw articles by the section in their URL and describe every
    section with at least two articles as a trending topic.
    """
    by_category: dict[str, list[dict]] = {}
    for item in items:
        category = category_from_url(item.get("url")) or "general"
        by_category.setdefault(category, []).append(item)

    topics = []
    for category, articles in by_category.items():
        if len(articles) < 2:
            continue
        all_titles = " ".join(a.get("title") or "" for a in articles)
        topics.append(TrendingTopic(
            id=category.lower(),
            title=category.capitalize(),
            description=f"Latest news and updates about {category}",
            category=category.capitalize(),
            keywords=extract_keywords(all_titles, HEADLINE_STOP_WORDS, TRENDING_KEYWORD_LIMIT),
            article_count=len(articles),
        ))

    return topics[:MAX_TRENDING_TOPICS]


async def fetch_trending_topics(client: httpx.AsyncClient = None) -> list[TrendingTopic]:
    try:
        async with _client_scope(client) as c:
            items = await _get_articles(c, "/top-headlines", {"country": "us", "pageSize": 20})
        return build_trending_topics(items)
    except Exception as e:
        logger.error("Error fetching trending news: %s", e)
        return []


async def fetch_article_by_url(url: str, client: httpx.AsyncClient = None):
    """
    NewsAPI has no lookup-by-URL endpoint, so search for the URL and pick the
    exact match; failing that, search with words from the URL slug and take
    the first hit.
    """
    try:
        async with _client_scope(client) as c:
            items = await _get_articles(c, "/everything", {"qInTitle": url})
            for item in items:
                if item.get("url") == url:
                    return transform_article(item)

            query = slug_query(url)
            if not query:
                return None
            logger.info("No exact match for %s, searching for '%s'", url, query)
            try:
                fallback = await _get_articles(c, "/everything", {"q": query, "pageSize": 5})
            except NewsAPIError as e:
                logger.warning("Fallback article search failed: %s", e)
                return None
            if fallback:
                return transform_article(fallback[0])
            return None
    except Exception as e:
        logger.error("Error fetching article by URL: %s", e)
        return None


async def fetch_related_articles(article_url: str, client: httpx.AsyncClient = None) -> list[Article]:
    params = {"q": slug_query(article_url), "pageSize": 3}
    try:
        async with _client_scope(client) as c:
            items = await _get_articles(c, "/everything", params)
        related = [transform_article(item) for item in items if item.get("url") != article_url]
        return related[:3]
    except Exception as e:
        logger.error("Error fetching related articles: %s", e)
        return []


async def fetch_home_page() -> dict:
    """
    Everything the home page shows, fetched in parallel over one client.
    """
    async with _make_client() as client:
        tasks = [fetch_top_headlines(client), fetch_trending_topics(client)]
        tasks += [fetch_news_by_category(category, client) for category in HOME_CATEGORIES]

        logger.info("Fetching home page data (%d requests)...", len(tasks))
        headlines, trending, *by_category = await asyncio.gather(*tasks)

    return {
        "headlines": headlines,
        "trending": trending,
        "categories": dict(zip(HOME_CATEGORIES, by_category)),
    }


async def fetch_article_page(url: str) -> dict:
    async with _make_client() as client:
        article = await fetch_article_by_url(url, client)
        if article is None:
            return {"article": None, "related": []}
        related = await fetch_related_articles(article.url, client)
    return {"article": article, "related": related}

