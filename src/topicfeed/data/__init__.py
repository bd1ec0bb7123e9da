"""Data models for TopicFeed."""

from topicfeed.data.models import (
    APICallUsage,
    CandidateArticle,
    EnrichedArticle,
    EnrichmentOutcome,
    FeedResult,
    FeedStats,
    ImageRef,
    OutcomeKind,
    ScoredCandidate,
    SourceLanguage,
    TopicConfig,
    Usage,
)

__all__ = [
    "APICallUsage",
    "CandidateArticle",
    "EnrichedArticle",
    "EnrichmentOutcome",
    "FeedResult",
    "FeedStats",
    "ImageRef",
    "OutcomeKind",
    "ScoredCandidate",
    "SourceLanguage",
    "TopicConfig",
    "Usage",
]
