import markdown2


def render_markdown(text):
    """
    Gemini answers in Markdown (**bold**, lists); the UI shows HTML.
    """
    return markdown2.markdown(text or "", safe_mode="escape")


def format_insights(article, insights):
    """
    Format the insight endpoint payload for one article.
    """
    return {
        "article": {"title": article.title, "url": article.url, "source": article.source.name},
        "insights": insights.to_dict(),
        "summary_html": render_markdown(insights.summary),
    }


def format_chat_reply(reply):
    return {
        "reply": reply,
        "reply_html": render_markdown(reply),
    }


def format_related(articles):
    """
    Related links shown beside an article.
    """
    return [
        {"title": a.title, "url": a.url, "source": a.source.name}
        for a in articles
    ]
