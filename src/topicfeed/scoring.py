"""Topic matching and relevance scoring."""

import math
from datetime import datetime

from topicfeed.data import CandidateArticle, ScoredCandidate, TopicConfig
from topicfeed.recency import hours_since

TITLE_MATCH_POINTS = 3.0
DESCRIPTION_MATCH_POINTS = 1.5
EXCLUDE_PENALTY = 5.0
RECENCY_POINTS = 3.0


def matches_topic(topic: TopicConfig, article: CandidateArticle) -> bool:
    """Whether title + description hit an include pattern and no exclude pattern.

    A topic without include patterns admits everything.
    """
    text = f"{article.title or ''} {article.description or ''}"
    if topic.include_patterns and not any(p.search(text) for p in topic.include_patterns):
        return False
    return not any(p.search(text) for p in topic.exclude_patterns)


def relevance_score(
    topic: TopicConfig,
    article: CandidateArticle,
    *,
    window_hours: float = 24.0,
    now: datetime | None = None,
) -> float:
    """Score an article against a topic.

    Each include pattern adds 3 points when it matches the title, otherwise
    1.5 points when it matches the description. Each exclude pattern found in
    either field subtracts 5. A recency bonus of up to 3 points decays
    linearly to zero over ``window_hours``.

    Args:
        topic: Resolved topic configuration.
        article: Candidate to score.
        window_hours: Recency window used for the decay.
        now: Reference time for the age computation.

    Returns:
        The relevance score (may be negative).
    """
    title = article.title or ""
    description = article.description or ""
    score = 0.0

    for pattern in topic.include_patterns:
        if pattern.search(title):
            score += TITLE_MATCH_POINTS
        elif pattern.search(description):
            score += DESCRIPTION_MATCH_POINTS

    for pattern in topic.exclude_patterns:
        if pattern.search(title) or pattern.search(description):
            score -= EXCLUDE_PENALTY

    age = hours_since(article.published_at, now)
    if math.isfinite(age) and window_hours > 0:
        # Future-dated articles count as brand new.
        age = max(0.0, age)
        score += max(0.0, (window_hours - age) / window_hours) * RECENCY_POINTS

    return score


def score_candidates(
    topic: TopicConfig,
    articles: list[CandidateArticle],
    *,
    window_hours: float = 24.0,
    now: datetime | None = None,
) -> list[ScoredCandidate]:
    """Score and sort candidates by descending score.

    The sort is stable, so equal scores keep their input order.
    """
    scored = [
        ScoredCandidate(
            article=a,
            score=relevance_score(topic, a, window_hours=window_hours, now=now),
        )
        for a in articles
    ]
    return sorted(scored, key=lambda c: c.score, reverse=True)
