from collections import Counter

from .text import tokenize

# Function words excluded when ranking article text
COMMON_STOP_WORDS = frozenset({
    "the", "and", "a", "an", "in", "on", "at", "to",
    "for", "of", "with", "by", "as", "is", "are", "was",
    "were", "be", "this", "that", "it", "from", "or", "but",
    "not", "what", "all", "about", "who", "which", "when", "there",
})

# Headlines repeat reporting filler ("said", "new") that says nothing about the topic
HEADLINE_STOP_WORDS = COMMON_STOP_WORDS | frozenset({
    "new", "more", "their", "has", "will", "one", "after",
    "said", "would", "have", "they", "you", "been", "its",
})

MIN_WORD_LENGTH = 4
DEFAULT_KEYWORD_LIMIT = 7
TRENDING_KEYWORD_LIMIT = 5


def extract_keywords(text, stop_words=COMMON_STOP_WORDS, limit=DEFAULT_KEYWORD_LIMIT):
    """
    Return up to `limit` of the most frequent words in `text`.

    Words shorter than four characters and members of `stop_words` are
    ignored. Words with equal counts keep the order they first appeared in.
    """
    if limit <= 0:
        return []

    counts = Counter(
        word for word in tokenize(text)
        if len(word) >= MIN_WORD_LENGTH and word not in stop_words
    )
    # most_common is stable for ties, so first-seen order wins
    return [word for word, _ in counts.most_common(limit)]
