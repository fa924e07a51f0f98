from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"

    @classmethod
    def coerce(cls, value) -> "Sentiment":
        """
        Map a loosely formatted model answer ("positive", " Negative\\n}")
        onto the closed set. Anything unrecognised is Neutral.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.NEUTRAL
        word = value.strip().split(maxsplit=1)
        if not word:
            return cls.NEUTRAL
        candidate = word[0].strip(".,;:!}]\"'").capitalize()
        for member in cls:
            if member.value == candidate:
                return member
        return cls.NEUTRAL


@dataclass
class Source:
    name: str
    id: Optional[str] = None


@dataclass
class Article:
    source: Source
    title: str
    url: str
    description: str = "No description available"
    content: str = "No content available"
    author: Optional[str] = None
    url_to_image: Optional[str] = None
    published_at: Optional[str] = None
    category: Optional[str] = None

    @property
    def fallback_text(self) -> str:
        # Keyword extraction input when the model returns no keywords
        return f"{self.title} {self.description}"

    def to_dict(self) -> dict:
        return {
            "source": {"id": self.source.id, "name": self.source.name},
            "author": self.author,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "urlToImage": self.url_to_image,
            "publishedAt": self.published_at,
            "content": self.content,
            "category": self.category,
        }


@dataclass
class TrendingTopic:
    id: str
    title: str
    description: str
    category: str
    keywords: list = field(default_factory=list)
    article_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "keywords": list(self.keywords),
            "articleCount": self.article_count,
        }


@dataclass
class ChatMessage:
    role: str  # "user" or "assistant"
    content: str

    @classmethod
    def from_dict(cls, data: dict) -> "ChatMessage":
        role = "user" if data.get("role") == "user" else "assistant"
        return cls(role=role, content=str(data.get("content") or ""))


@dataclass
class PartialInsight:
    """
    Whatever could be recovered from an untrusted model response.
    Every field may be missing; see normalizer.assemble for the defaults.
    """
    summary: Optional[str] = None
    key_points: Optional[list] = None
    keywords: Optional[list] = None
    sentiment: Optional[str] = None

    @classmethod
    def from_payload(cls, payload) -> Optional["PartialInsight"]:
        """
        Build from decoded JSON. Returns None unless the payload is an object.
        """
        if not isinstance(payload, dict):
            return None
        summary = payload.get("summary")
        sentiment = payload.get("sentiment")
        return cls(
            summary=summary.strip() if isinstance(summary, str) else None,
            key_points=_clean_items(payload.get("keyPoints")),
            keywords=_clean_items(payload.get("keywords")),
            sentiment=sentiment if isinstance(sentiment, str) else None,
        )


@dataclass(frozen=True)
class InsightRecord:
    summary: str
    key_points: tuple
    keywords: tuple
    sentiment: Sentiment = Sentiment.NEUTRAL

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "keywords": list(self.keywords),
            "sentiment": self.sentiment.value,
        }


def _clean_items(value) -> Optional[list]:
    if not isinstance(value, list):
        return None
    items = []
    for item in value:
        if isinstance(item, (str, int, float)) and not isinstance(item, bool):
            text = str(item).strip()
            if text:
                items.append(text)
    return items
