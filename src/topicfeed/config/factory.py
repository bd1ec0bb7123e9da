"""Factory functions to create components from configuration."""

import logging
from pathlib import Path

from topicfeed.allocator import QuotaAllocator
from topicfeed.config.models import (
    Credentials,
    EnrichmentConfig,
    NewsAPISearcherConfig,
    SelectionConfig,
    TopicFeedConfig,
)
from topicfeed.dedup import DuplicateDetector
from topicfeed.enrich.claude import ClaudeTranslator
from topicfeed.enrich.openai_images import OpenAIImageGenerator
from topicfeed.enrich.pipeline import EnrichmentPipeline
from topicfeed.pipeline.feed import FeedPipeline
from topicfeed.search.base import ArticleSearcher
from topicfeed.search.newsapi import NewsAPISearcher

logger = logging.getLogger(__name__)


def create_searcher(config: NewsAPISearcherConfig, credentials: Credentials) -> ArticleSearcher:
    """Create the news searcher from config."""
    if isinstance(config, NewsAPISearcherConfig):
        return NewsAPISearcher(
            api_key=credentials.newsapi_key,
            page_size=config.page_size,
            search_in=config.search_in,
            timeout_seconds=config.timeout_seconds,
        )
    msg = f"Unknown searcher config type: {type(config)}"
    raise ValueError(msg)


def ai_images_enabled(config: EnrichmentConfig, credentials: Credentials) -> bool:
    """AI images need the feature flag (config or env) and an OpenAI key."""
    return (config.ai_images or credentials.enable_ai_images) and bool(credentials.openai_api_key)


def create_enrichment(config: EnrichmentConfig, credentials: Credentials) -> EnrichmentPipeline:
    """Create the enrichment pipeline, omitting collaborators without credentials."""
    translator: ClaudeTranslator | None = None
    if credentials.claude_api_key:
        translator = ClaudeTranslator(
            model=config.model,
            api_key=credentials.claude_api_key,
            min_lines=config.min_lines,
            max_lines=config.max_lines,
        )
    else:
        logger.info("CLAUDE_API_KEY not set; titles and summaries use local fallbacks")

    image_generator: OpenAIImageGenerator | None = None
    if ai_images_enabled(config, credentials):
        image_generator = OpenAIImageGenerator(
            model=config.image_model,
            api_key=credentials.openai_api_key,
            size=config.image_size,
        )

    return EnrichmentPipeline(
        translator=translator,
        summarizer=translator,
        image_generator=image_generator,
        language_tag=config.language_tag,
        source_marker=config.source_marker,
        min_lines=config.min_lines,
        max_lines=config.max_lines,
        timeout_seconds=config.timeout_seconds,
        placeholder_title_chars=config.placeholder_title_chars,
    )


def create_allocator(config: SelectionConfig) -> QuotaAllocator:
    """Create the quota allocator and its duplicate detector."""
    detector = DuplicateDetector(
        config.similarity_threshold,
        containment_threshold=config.containment_threshold,
        containment_min_jaccard=config.containment_min_jaccard,
    )
    return QuotaAllocator(
        capacity=config.capacity,
        primary_quota=config.primary_quota,
        secondary_quota=config.secondary_quota,
        detector=detector,
    )


def create_from_config(
    config: TopicFeedConfig,
    credentials: Credentials | None = None,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> FeedPipeline:
    """Create a complete feed pipeline from root config.

    Args:
        config: Root configuration.
        credentials: Credentials (defaults to the process environment).
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        The feed pipeline.
    """
    credentials = credentials or Credentials.from_env()
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    return FeedPipeline(
        searcher=create_searcher(config.search, credentials),
        enrichment=create_enrichment(config.enrichment, credentials),
        allocator=create_allocator(config.selection),
        primary_language=config.languages.primary,
        secondary_language=config.languages.secondary,
        window_hours=config.window.default_hours,
        lookback_days=config.search.lookback_days,
        primary_first=config.selection.primary_first,
        log_dir=log_dir if log_enabled else None,
    )
