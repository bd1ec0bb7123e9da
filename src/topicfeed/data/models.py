"""Core data models for TopicFeed."""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar("T")


class SourceLanguage(StrEnum):
    """Cohort an article was fetched for.

    ``PRIMARY`` is the operator's display language, ``SECONDARY`` the other
    supported source language. The concrete language codes live in config.
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"


class OutcomeKind(StrEnum):
    """Which branch produced an enrichment value."""

    SUCCEEDED = "succeeded"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class TopicConfig:
    """Canonical search configuration for a topic.

    Patterns are compiled case-insensitive regular expressions and are
    tested against the raw article title and description.
    """

    name: str
    search_query: str
    include_patterns: tuple[re.Pattern[str], ...] = ()
    exclude_patterns: tuple[re.Pattern[str], ...] = ()
    key: str = "generic"


@dataclass(frozen=True)
class CandidateArticle:
    """An article returned by the search collaborator."""

    title: str
    url: str
    source_language: SourceLanguage
    source_name: str = ""
    description: str | None = None
    published_at: str | None = None
    source_id: str | None = None
    image_url: str | None = None
    raw_body: str | None = None


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with its relevance score for one request."""

    article: CandidateArticle
    score: float


@dataclass(frozen=True)
class EnrichedArticle:
    """Terminal output object, one per selected article."""

    id: str
    title: str
    published_at: str | None
    source_name: str
    url: str
    summary: str
    image_url: str
    image_is_ai: bool = False


@dataclass(frozen=True)
class ImageRef:
    """An image reference and whether it was AI-generated."""

    url: str
    is_ai: bool = False


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single LLM call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Usage:
    """Accumulated external-call usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    newsapi_requests: int = 0
    image_generations: int = 0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            newsapi_requests=self.newsapi_requests + other.newsapi_requests,
            image_generations=self.image_generations + other.image_generations,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.newsapi_requests += other.newsapi_requests
        self.image_generations += other.image_generations
        return self


@dataclass(frozen=True)
class EnrichmentOutcome(Generic[T]):
    """Result of one enrichment operation.

    Either the external collaborator produced ``value`` (``SUCCEEDED``) or a
    local fallback did (``FALLBACK``), in which case ``reason`` names the cause.
    """

    value: T
    kind: OutcomeKind
    reason: str | None = None
    usage: Usage = field(default_factory=Usage)

    @classmethod
    def succeeded(cls, value: T, usage: Usage | None = None) -> "EnrichmentOutcome[T]":
        return cls(value=value, kind=OutcomeKind.SUCCEEDED, usage=usage or Usage())

    @classmethod
    def fallback(cls, value: T, reason: str) -> "EnrichmentOutcome[T]":
        return cls(value=value, kind=OutcomeKind.FALLBACK, reason=reason)

    @property
    def is_fallback(self) -> bool:
        return self.kind == OutcomeKind.FALLBACK


@dataclass
class FeedStats:
    """Internal counters exposed by the debug payload."""

    raw_counts: dict[str, int] = field(default_factory=dict)
    filtered_counts: dict[str, int] = field(default_factory=dict)
    chosen: int = 0
    fallbacks: dict[str, int] = field(default_factory=dict)
    error: str | None = None


@dataclass
class FeedResult:
    """Everything a feed request produces."""

    topic: TopicConfig
    articles: list[EnrichedArticle] = field(default_factory=list)
    warning: str | None = None
    stats: FeedStats = field(default_factory=FeedStats)
    usage: Usage = field(default_factory=Usage)
    log_path: Path | None = None
