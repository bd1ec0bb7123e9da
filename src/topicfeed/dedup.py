"""Near-duplicate detection between candidate articles.

Two articles are the same story when their URLs match once the query string
is dropped, or when their titles are similar enough. Title similarity is the
Jaccard index of the normalised word sets (duplicate at >= 0.7 by default).

Headlines for one story often differ only by a verb and an article ("Apple
lanza nuevo iPhone" / "Apple presenta el nuevo iPhone", Jaccard 0.5), so the
title stage also flags pairs whose content words (stopwords removed) are
mostly contained in one another while still overlapping substantially.
"""

import re

from topicfeed.data import CandidateArticle
from topicfeed.text import strip_diacritics
from topicfeed.url import strip_query

DEFAULT_SIMILARITY_THRESHOLD = 0.7
DEFAULT_CONTAINMENT_THRESHOLD = 0.75
DEFAULT_CONTAINMENT_MIN_JACCARD = 0.5

STOPWORDS = frozenset(
    {
        # es
        "a", "al", "con", "de", "del", "el", "en", "es", "la", "las", "lo", "los",
        "para", "por", "que", "se", "su", "sus", "un", "una", "y",
        # en
        "an", "and", "for", "in", "is", "its", "of", "on", "the", "to", "with",
    }
)  # fmt: skip

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_DIGIT = re.compile(r"\d")


def normalize_title(title: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    text = strip_diacritics(title.lower())
    text = _NON_ALNUM.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def title_words(title: str) -> set[str]:
    return set(normalize_title(title).split())


def _jaccard(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def title_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the two titles' word sets.

    Returns 0.0 when either title has no words after normalisation.
    """
    return _jaccard(title_words(a), title_words(b))


def content_containment(a: str, b: str) -> tuple[float, float]:
    """Overlap coefficient and Jaccard index of the titles' content words.

    Returns ``(0.0, 0.0)`` when either title has fewer than three content
    words, so short headlines never match on this measure, and when the
    titles differ by a token containing a digit ("Pixel 9" / "Pixel 10").
    """
    words_a = title_words(a) - STOPWORDS
    words_b = title_words(b) - STOPWORDS
    if len(words_a) < 3 or len(words_b) < 3:
        return (0.0, 0.0)
    if any(_DIGIT.search(word) for word in words_a ^ words_b):
        return (0.0, 0.0)
    shared = len(words_a & words_b)
    return (shared / min(len(words_a), len(words_b)), _jaccard(words_a, words_b))


class DuplicateDetector:
    """Two-stage duplicate test: URL identity, then title similarity.

    Args:
        threshold: Minimum title Jaccard similarity treated as a duplicate.
        containment_threshold: Minimum content-word overlap coefficient for
            the containment check, or None to disable it.
        containment_min_jaccard: Content-word Jaccard index the containment
            check also requires.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        *,
        containment_threshold: float | None = DEFAULT_CONTAINMENT_THRESHOLD,
        containment_min_jaccard: float = DEFAULT_CONTAINMENT_MIN_JACCARD,
    ) -> None:
        self._threshold = threshold
        self._containment_threshold = containment_threshold
        self._containment_min_jaccard = containment_min_jaccard

    @property
    def threshold(self) -> float:
        return self._threshold

    def is_duplicate(self, previous: CandidateArticle, current: CandidateArticle) -> bool:
        if previous.url and current.url and strip_query(previous.url) == strip_query(current.url):
            return True
        return self.titles_match(previous.title or "", current.title or "")

    def titles_match(self, a: str, b: str) -> bool:
        if title_similarity(a, b) >= self._threshold:
            return True
        if self._containment_threshold is None:
            return False
        overlap, jaccard = content_containment(a, b)
        return overlap >= self._containment_threshold and jaccard >= self._containment_min_jaccard

    def duplicates_any(
        self, candidate: CandidateArticle, accepted: list[CandidateArticle]
    ) -> bool:
        """Whether ``candidate`` duplicates any already-accepted article."""
        return any(self.is_duplicate(prev, candidate) for prev in accepted)
