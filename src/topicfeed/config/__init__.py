"""Configuration module for TopicFeed."""

from topicfeed.config.factory import (
    ai_images_enabled,
    create_allocator,
    create_enrichment,
    create_from_config,
    create_searcher,
)
from topicfeed.config.loader import get_default_config_path, load_config
from topicfeed.config.models import (
    Credentials,
    EnrichmentConfig,
    LanguagesConfig,
    LoggingConfig,
    NewsAPISearcherConfig,
    SelectionConfig,
    TopicFeedConfig,
    WindowConfig,
)

__all__ = [
    "Credentials",
    "EnrichmentConfig",
    "LanguagesConfig",
    "LoggingConfig",
    "NewsAPISearcherConfig",
    "SelectionConfig",
    "TopicFeedConfig",
    "WindowConfig",
    "ai_images_enabled",
    "create_allocator",
    "create_enrichment",
    "create_from_config",
    "create_searcher",
    "get_default_config_path",
    "load_config",
]
