"""Pydantic configuration models for TopicFeed components."""

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, model_validator

# ============================================================
# Search
# ============================================================


class NewsAPISearcherConfig(BaseModel):
    """Configuration for NewsAPISearcher."""

    type: Literal["newsapi"] = "newsapi"
    page_size: int = Field(default=50, ge=1, le=100)
    search_in: str = "title,description"
    lookback_days: int = Field(default=2, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}


# ============================================================
# Languages / window / selection
# ============================================================


class LanguagesConfig(BaseModel):
    """Provider language codes of the two cohorts."""

    primary: str = "es"
    secondary: str = "en"

    model_config = {"frozen": True}


class WindowConfig(BaseModel):
    """Recency window in hours, and the range callers may pick from."""

    default_hours: float = 24.0
    min_hours: float = 1.0
    max_hours: float = 72.0

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def default_within_range(self) -> "WindowConfig":
        if self.min_hours <= 0 or self.min_hours > self.max_hours:
            raise ValueError("window requires 0 < min_hours <= max_hours")
        if not self.min_hours <= self.default_hours <= self.max_hours:
            raise ValueError("window.default_hours must lie within [min_hours, max_hours]")
        return self

    def clamp(self, hours: float | None) -> float:
        """Clamp a requested window into range (None means the default)."""
        if hours is None:
            return self.default_hours
        return min(self.max_hours, max(self.min_hours, hours))


class SelectionConfig(BaseModel):
    """Quota allocation and duplicate detection policy."""

    capacity: int = Field(default=5, ge=0)
    primary_quota: int = Field(default=3, ge=0)
    secondary_quota: int = Field(default=2, ge=0)
    similarity_threshold: float = Field(default=0.7, gt=0, le=1)
    containment_threshold: float | None = Field(default=0.75, gt=0, le=1)
    containment_min_jaccard: float = Field(default=0.5, ge=0, le=1)
    primary_first: bool = True

    model_config = {"frozen": True}


# ============================================================
# Enrichment
# ============================================================


class EnrichmentConfig(BaseModel):
    """Configuration for translation, summaries and images."""

    model: str = "claude-haiku-4-5-20251001"
    min_lines: int = Field(default=5, ge=1)
    max_lines: int = Field(default=10, ge=1)
    language_tag: str = " (ENG)"
    source_marker: str = "fuente original en inglés"
    timeout_seconds: float = Field(default=20.0, gt=0)
    ai_images: bool = False
    image_model: str = "gpt-image-1"
    image_size: str = "1536x1024"
    placeholder_title_chars: int = Field(default=60, ge=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def line_range(self) -> "EnrichmentConfig":
        if self.min_lines > self.max_lines:
            raise ValueError("enrichment.min_lines must not exceed max_lines")
        return self


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for JSON run logs."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Credentials
# ============================================================


class Credentials(BaseModel):
    """API keys and feature flags read from the environment.

    Every field is optional; a missing key simply disables its collaborator.
    """

    newsapi_key: str | None = None
    claude_api_key: str | None = None
    openai_api_key: str | None = None
    enable_ai_images: bool = False
    deploy_env: str = "unknown"

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Credentials":
        env = os.environ if env is None else env
        return cls(
            newsapi_key=env.get("NEWSAPI_KEY") or None,
            claude_api_key=env.get("CLAUDE_API_KEY") or None,
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            enable_ai_images=env.get("ENABLE_AI_IMAGES") == "1",
            deploy_env=env.get("DEPLOY_ENV") or "unknown",
        )


# ============================================================
# Root Config
# ============================================================


class TopicFeedConfig(BaseModel):
    """Root configuration for TopicFeed."""

    search: NewsAPISearcherConfig = Field(default_factory=NewsAPISearcherConfig)
    languages: LanguagesConfig = Field(default_factory=LanguagesConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
