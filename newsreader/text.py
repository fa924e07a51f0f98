"""
Small text helpers shared by the keyword extractor and the news client.
"""
import re

from bs4 import BeautifulSoup

_WORD_RE = re.compile(r"\w+")


def tokenize(text):
    """
    Lower-case `text` and split it into runs of word characters.
    Everything else is a delimiter and is dropped.
    """
    if not text:
        return []
    return _WORD_RE.findall(text.lower())


def strip_html(text):
    """
    NewsAPI descriptions sometimes carry markup (<p>, <ul>, entities).
    Return plain text with whitespace collapsed.
    """
    if not text:
        return text
    if "<" not in text and "&" not in text:
        return text.strip()
    soup = BeautifulSoup(text, "html.parser")
    return soup.get_text(separator=" ", strip=True)
