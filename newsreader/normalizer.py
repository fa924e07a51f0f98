"""
Turn the free-form text Gemini returns into a complete InsightRecord.

The model is asked for a JSON object but may wrap it in a ```json fence,
surround it with prose, or skip JSON entirely. Each strategy below looks at
the raw text and either recovers a PartialInsight or returns None; the first
hit wins and assemble() fills whatever is still missing with defaults.
"""
import json
import logging
import re

from .keywords import COMMON_STOP_WORDS, DEFAULT_KEYWORD_LIMIT, extract_keywords
from .models import InsightRecord, PartialInsight, Sentiment

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Unable to generate summary."
UNAVAILABLE_SUMMARY = "Unable to generate summary at this time."
DEFAULT_KEY_POINTS = ("Error analyzing article content.",)

_FENCED_JSON_RE = re.compile(r"```json\n([\s\S]*?)\n```")
_BARE_JSON_RE = re.compile(r"({[\s\S]*})")

_SUMMARY_RE = re.compile(r'summary["\s:]+([^"]+)', re.IGNORECASE)
_KEY_POINTS_RE = re.compile(r'keyPoints["\s:]+\[([\s\S]*?)\]', re.IGNORECASE)
_KEYWORDS_RE = re.compile(r'keywords["\s:]+\[([\s\S]*?)\]', re.IGNORECASE)
_SENTIMENT_RE = re.compile(r'sentiment["\s:]+([^"]+)', re.IGNORECASE)


def _loads(text):
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return None


def from_fenced_block(raw_text):
    match = _FENCED_JSON_RE.search(raw_text)
    if not match:
        return None
    return PartialInsight.from_payload(_loads(match.group(1)))


def from_bare_json(raw_text):
    # Greedy: first "{" through last "}"
    match = _BARE_JSON_RE.search(raw_text)
    if not match:
        return None
    return PartialInsight.from_payload(_loads(match.group(1)))


def from_direct_parse(raw_text):
    return PartialInsight.from_payload(_loads(raw_text))


def _split_array_region(region):
    items = [item.replace('"', "").strip() for item in region.split(",")]
    return [item for item in items if item]


def from_field_scraping(raw_text):
    """
    Last resort for text that is not JSON at all. Always returns a
    PartialInsight; fields that could not be found are left as None.
    """
    partial = PartialInsight()

    match = _SUMMARY_RE.search(raw_text)
    if match:
        partial.summary = match.group(1).strip() or None

    match = _KEY_POINTS_RE.search(raw_text)
    if match:
        partial.key_points = _split_array_region(match.group(1))

    match = _KEYWORDS_RE.search(raw_text)
    if match:
        partial.keywords = _split_array_region(match.group(1))

    match = _SENTIMENT_RE.search(raw_text)
    if match:
        partial.sentiment = match.group(1).strip() or None

    return partial


STRATEGIES = (
    from_fenced_block,
    from_bare_json,
    from_direct_parse,
    from_field_scraping,
)


def extract_partial(raw_text):
    for strategy in STRATEGIES:
        partial = strategy(raw_text)
        if partial is not None:
            logger.debug("Insight fields recovered by %s", strategy.__name__)
            return partial
    return PartialInsight()


def assemble(partial, fallback_text, default_summary=DEFAULT_SUMMARY):
    """
    Merge a PartialInsight with defaults. Missing keywords are computed
    from `fallback_text` (usually the article title and description).
    """
    if partial.keywords:
        keywords = partial.keywords[:DEFAULT_KEYWORD_LIMIT]
    else:
        keywords = extract_keywords(fallback_text, COMMON_STOP_WORDS, DEFAULT_KEYWORD_LIMIT)

    return InsightRecord(
        summary=partial.summary or default_summary,
        key_points=tuple(partial.key_points or DEFAULT_KEY_POINTS),
        keywords=tuple(keywords),
        sentiment=Sentiment.coerce(partial.sentiment),
    )


def default_insights(fallback_text):
    """
    Record returned when the model call failed before producing any text.
    """
    return assemble(PartialInsight(), fallback_text, default_summary=UNAVAILABLE_SUMMARY)


def normalize(raw_text, fallback_text=""):
    """
    Build an InsightRecord from a raw model response.

    `raw_text` of None means the AI call itself failed. Never raises.
    """
    if raw_text is None:
        return default_insights(fallback_text)
    if not isinstance(raw_text, str):
        raw_text = str(raw_text)
    return assemble(extract_partial(raw_text), fallback_text)
