from flask import Flask, render_template, request, jsonify, abort
import asyncio
import logging
import time

# --- Caching Imports ---
from flask_caching import Cache

# --- Our Services ---
from newsreader import config
from newsreader.logging_config import setup_logging
from newsreader.models import ChatMessage
from newsreader.normalizer import UNAVAILABLE_SUMMARY
from newsreader.response_formatter import format_chat_reply, format_insights, format_related, render_markdown
from newsreader.services.ai_service import chat_with_ai, generate_article_insights, welcome_message
from newsreader.services.news_api import (
    CATEGORIES,
    HOME_CATEGORIES,
    fetch_article_page,
    fetch_home_page,
    fetch_news_by_category,
    transform_article,
)

setup_logging()
logger = logging.getLogger("newsreader.app")

app = Flask(__name__)

# --- Configure Caching ---
# In-memory cache; NewsAPI data is refreshed at most once per CACHE_TIMEOUT
app.config["CACHE_TYPE"] = "SimpleCache"
app.config["CACHE_DEFAULT_TIMEOUT"] = config.CACHE_TIMEOUT
cache = Cache(app)


@cache.memoize()
def load_home_page():
    logger.info("[CACHE MISS] Loading home page")
    return asyncio.run(fetch_home_page())


@cache.memoize()
def load_category(category):
    logger.info("[CACHE MISS] Loading category: %s", category)
    return asyncio.run(fetch_news_by_category(category))


@cache.memoize()
def load_article_page(url):
    logger.info("[CACHE MISS] Loading article: %s", url)
    return asyncio.run(fetch_article_page(url))


@cache.memoize()
def load_insights(url):
    """
    Insights for an article we can look up by URL, or None if we can't.
    """
    article = load_article_page(url)["article"]
    if article is None:
        return None
    return article, generate_article_insights(article)


def get_insights(url):
    result = load_insights(url)
    if result is not None and result[1].summary == UNAVAILABLE_SUMMARY:
        # Gemini call failed; don't keep serving the default record
        cache.delete_memoized(load_insights, url)
    return result


@app.route("/")
def home():
    data = load_home_page()
    headlines = data["headlines"]
    return render_template(
        "index.html",
        featured=headlines[0] if headlines else None,
        latest=headlines[1:5],
        categories=data["categories"],
        trending=data["trending"],
    )


@app.route("/category/<name>")
def category(name):
    name = name.lower()
    if name not in CATEGORIES:
        abort(404)
    return render_template("category.html", category=name, articles=load_category(name))


@app.route("/article")
def article():
    url = request.args.get("url")
    if not url:
        abort(400)

    page = load_article_page(url)
    if page["article"] is None:
        abort(404)

    _, insights = get_insights(url)
    return render_template(
        "article.html",
        article=page["article"],
        insights=insights,
        summary_html=render_markdown(insights.summary),
        related=format_related(page["related"]),
        welcome=welcome_message(page["article"]),
    )


@app.route("/api/insights", methods=["POST"])
def insights():
    """
    Accepts either {"article": {...NewsAPI article...}} or {"url": "..."}.
    """
    data = request.get_json(silent=True) or {}

    if isinstance(data.get("article"), dict):
        article = transform_article(data["article"])
        record = generate_article_insights(article)
    elif data.get("url"):
        result = get_insights(data["url"])
        if result is None:
            return jsonify({"error": "Article not found"}), 404
        article, record = result
    else:
        return jsonify({"error": "No article provided"}), 400

    return jsonify(format_insights(article, record))


@app.route("/api/chat", methods=["POST"])
def chat():
    data = request.get_json(silent=True) or {}
    message = (data.get("message") or "").strip()

    if not message:
        return jsonify({"error": "No message provided"}), 400

    history = [ChatMessage.from_dict(m) for m in data.get("messages") or [] if isinstance(m, dict)]
    article = None
    if data.get("url"):
        article = load_article_page(data["url"])["article"]

    logger.info("Chat message received (%d previous messages)", len(history))
    start_time = time.time()
    reply = chat_with_ai(history, message, article)

    response_data = format_chat_reply(reply)
    response_data["time_taken"] = f"{time.time() - start_time:.2f}s"
    return jsonify(response_data)


@app.route("/api/env-check")
def env_check():
    missing = config.missing_keys()
    if missing:
        return jsonify({
            "status": "error",
            "message": f"Missing required environment variables: {', '.join(missing)}",
            "missingKeys": missing,
        }), 400

    return jsonify({
        "status": "ok",
        "message": "All required environment variables are set",
    })


@app.context_processor
def inject_navigation():
    return {"home_categories": HOME_CATEGORIES, "missing_keys": config.missing_keys()}


if __name__ == "__main__":
    app.run(debug=True)
