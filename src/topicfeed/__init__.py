"""TopicFeed: curated, language-balanced topic news feeds."""

from topicfeed.allocator import QuotaAllocator
from topicfeed.config import Credentials, TopicFeedConfig, create_from_config, load_config
from topicfeed.data import (
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
from topicfeed.dedup import DuplicateDetector, title_similarity
from topicfeed.enrich import (
    ClaudeTranslator,
    EnrichmentPipeline,
    ImageGenerator,
    OpenAIImageGenerator,
    Summarizer,
    TitleTranslator,
    placeholder_svg,
)
from topicfeed.errors import EnrichmentUnavailableError, TopicFeedError, UpstreamUnavailableError
from topicfeed.handler import FeedHandler, create_handler
from topicfeed.pipeline import FeedPipeline
from topicfeed.recency import hours_since, is_recent
from topicfeed.run_logger import RunLogger
from topicfeed.scoring import matches_topic, relevance_score
from topicfeed.search import ArticleSearcher, NewsAPISearcher
from topicfeed.text import format_to_lines
from topicfeed.topics import TOPIC_RULES, resolve_topic

__all__ = [
    # Models
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
    # Errors
    "EnrichmentUnavailableError",
    "TopicFeedError",
    "UpstreamUnavailableError",
    # Selection core
    "DuplicateDetector",
    "QuotaAllocator",
    "TOPIC_RULES",
    "format_to_lines",
    "hours_since",
    "is_recent",
    "matches_topic",
    "relevance_score",
    "resolve_topic",
    "title_similarity",
    # Protocols
    "ArticleSearcher",
    "ImageGenerator",
    "Summarizer",
    "TitleTranslator",
    # Collaborators
    "ClaudeTranslator",
    "NewsAPISearcher",
    "OpenAIImageGenerator",
    "placeholder_svg",
    # Pipelines
    "EnrichmentPipeline",
    "FeedPipeline",
    # Serving
    "FeedHandler",
    "create_handler",
    # Logging
    "RunLogger",
    # Config
    "Credentials",
    "TopicFeedConfig",
    "create_from_config",
    "load_config",
]
