"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError

from topicfeed.allocator import QuotaAllocator
from topicfeed.config import (
    Credentials,
    EnrichmentConfig,
    NewsAPISearcherConfig,
    SelectionConfig,
    TopicFeedConfig,
    WindowConfig,
    ai_images_enabled,
    create_allocator,
    create_enrichment,
    create_from_config,
    create_searcher,
    get_default_config_path,
    load_config,
)
from topicfeed.enrich.claude import ClaudeTranslator
from topicfeed.enrich.openai_images import OpenAIImageGenerator
from topicfeed.pipeline.feed import FeedPipeline
from topicfeed.search.newsapi import NewsAPISearcher


def _load(yaml_content: str) -> TopicFeedConfig:
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        f.flush()
        return load_config(Path(f.name))


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_root_defaults(self) -> None:
        config = TopicFeedConfig()
        assert config.search.type == "newsapi"
        assert config.search.page_size == 50
        assert config.languages.primary == "es"
        assert config.languages.secondary == "en"
        assert config.window.default_hours == 24
        assert config.selection.capacity == 5
        assert config.selection.primary_quota == 3
        assert config.selection.secondary_quota == 2
        assert config.selection.similarity_threshold == 0.7
        assert config.enrichment.min_lines == 5
        assert config.enrichment.max_lines == 10
        assert config.enrichment.language_tag == " (ENG)"
        assert config.enrichment.source_marker == "fuente original en inglés"
        assert config.logging.enabled is False

    def test_page_size_limit(self) -> None:
        with pytest.raises(ValidationError):
            NewsAPISearcherConfig(page_size=500)

    def test_line_range_validated(self) -> None:
        with pytest.raises(ValidationError):
            EnrichmentConfig(min_lines=8, max_lines=4)

    def test_window_default_in_range(self) -> None:
        with pytest.raises(ValidationError):
            WindowConfig(default_hours=100, max_hours=72)

    def test_window_clamp(self) -> None:
        window = WindowConfig()
        assert window.clamp(None) == 24
        assert window.clamp(0.1) == 1
        assert window.clamp(500) == 72
        assert window.clamp(6) == 6

    def test_configs_are_frozen(self) -> None:
        config = SelectionConfig()
        with pytest.raises(ValidationError):
            config.capacity = 10  # type: ignore[misc]


class TestCredentials:
    """Tests for Credentials.from_env."""

    def test_from_env(self) -> None:
        creds = Credentials.from_env(
            {
                "NEWSAPI_KEY": "n",
                "CLAUDE_API_KEY": "c",
                "OPENAI_API_KEY": "o",
                "ENABLE_AI_IMAGES": "1",
                "DEPLOY_ENV": "production",
            }
        )
        assert creds.newsapi_key == "n"
        assert creds.claude_api_key == "c"
        assert creds.openai_api_key == "o"
        assert creds.enable_ai_images is True
        assert creds.deploy_env == "production"

    def test_from_empty_env(self) -> None:
        creds = Credentials.from_env({"NEWSAPI_KEY": ""})
        assert creds.newsapi_key is None
        assert creds.enable_ai_images is False
        assert creds.deploy_env == "unknown"

    def test_only_literal_one_enables_images(self) -> None:
        assert Credentials.from_env({"ENABLE_AI_IMAGES": "true"}).enable_ai_images is False

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEWSAPI_KEY", "from-env")
        assert Credentials.from_env().newsapi_key == "from-env"


class TestConfigLoader:
    """Tests for YAML config loading."""

    def test_load_partial_config(self) -> None:
        config = _load(
            """
languages:
  primary: fr
selection:
  capacity: 8
  primary_quota: 5
  secondary_quota: 3
enrichment:
  min_lines: 3
  max_lines: 6
"""
        )
        assert config.languages.primary == "fr"
        assert config.languages.secondary == "en"
        assert config.selection.capacity == 8
        assert config.enrichment.min_lines == 3
        assert config.window.default_hours == 24

    def test_load_empty_file(self) -> None:
        assert _load("") == TopicFeedConfig()

    def test_load_invalid_config(self) -> None:
        with pytest.raises(ValidationError):
            _load("selection:\n  similarity_threshold: 3\n")

    def test_get_default_config_path(self) -> None:
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert "configs" in str(path)

    def test_default_config_matches_model_defaults(self) -> None:
        path = get_default_config_path()
        if path.exists():
            assert load_config(path) == TopicFeedConfig()


class TestFactoryFunctions:
    """Tests for component factory functions."""

    def test_create_searcher(self) -> None:
        config = NewsAPISearcherConfig(page_size=20)
        searcher = create_searcher(config, Credentials(newsapi_key="k"))
        assert isinstance(searcher, NewsAPISearcher)
        assert searcher.configured
        assert searcher._page_size == 20

    def test_create_searcher_without_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NEWSAPI_KEY", raising=False)
        searcher = create_searcher(NewsAPISearcherConfig(), Credentials())
        assert not searcher.configured

    def test_create_enrichment_without_keys(self) -> None:
        enrichment = create_enrichment(EnrichmentConfig(), Credentials())
        assert not enrichment.has_translator
        assert not enrichment.has_image_generator

    def test_create_enrichment_with_claude(self) -> None:
        enrichment = create_enrichment(EnrichmentConfig(), Credentials(claude_api_key="c"))
        assert enrichment.has_translator
        assert isinstance(enrichment._translator, ClaudeTranslator)
        assert enrichment._summarizer is enrichment._translator

    def test_create_enrichment_with_images(self) -> None:
        creds = Credentials(openai_api_key="o", enable_ai_images=True)
        enrichment = create_enrichment(EnrichmentConfig(), creds)
        assert isinstance(enrichment._image_generator, OpenAIImageGenerator)

    def test_ai_images_need_key_and_flag(self) -> None:
        config = EnrichmentConfig()
        assert not ai_images_enabled(config, Credentials(openai_api_key="o"))
        assert not ai_images_enabled(config, Credentials(enable_ai_images=True))
        assert ai_images_enabled(config, Credentials(openai_api_key="o", enable_ai_images=True))
        assert ai_images_enabled(EnrichmentConfig(ai_images=True), Credentials(openai_api_key="o"))

    def test_create_allocator(self) -> None:
        allocator = create_allocator(SelectionConfig(capacity=7))
        assert isinstance(allocator, QuotaAllocator)
        assert allocator.capacity == 7

    def test_create_from_config(self) -> None:
        pipeline = create_from_config(TopicFeedConfig(), Credentials(newsapi_key="k"))
        assert isinstance(pipeline, FeedPipeline)
        assert pipeline.window_hours == 24
        assert pipeline._log_dir is None

    def test_create_from_config_log_override(self, tmp_path: Path) -> None:
        pipeline = create_from_config(
            TopicFeedConfig(),
            Credentials(),
            log_override=True,
            log_dir_override=str(tmp_path),
        )
        assert pipeline._log_dir == tmp_path
