"""Concurrent per-article enrichment with local fallbacks."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from topicfeed.data import (
    CandidateArticle,
    EnrichedArticle,
    EnrichmentOutcome,
    ImageRef,
    SourceLanguage,
    Usage,
)
from topicfeed.enrich.base import ImageGenerator, Summarizer, TitleTranslator
from topicfeed.enrich.placeholder import placeholder_svg
from topicfeed.enrich.summary import fit_lines, local_summary, model_lines

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LANGUAGE_TAG = " (ENG)"
DEFAULT_SOURCE_MARKER = "fuente original en inglés"
UNKNOWN_SOURCE = "Desconocida"


@dataclass
class EnrichmentBatch:
    """Enriched articles plus what it took to produce them."""

    articles: list[EnrichedArticle] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    fallbacks: dict[str, int] = field(default_factory=dict)


class EnrichmentPipeline:
    """Produce display title, summary and image for each selected article.

    The three operations for one article run concurrently, and all articles
    are enriched concurrently. Every operation that needs an external
    collaborator degrades to a deterministic local value when the
    collaborator is absent, fails or times out.

    Args:
        translator: Headline translator (None when no credential is configured).
        summarizer: Summarizer (None when no credential is configured).
        image_generator: Illustration generator (None when disabled).
        language_tag: Suffix appended to secondary-language titles.
        source_marker: Final summary line for secondary-language articles.
        min_lines: Minimum summary lines, marker included.
        max_lines: Maximum summary lines, marker included.
        timeout_seconds: Per-call timeout for collaborators.
        placeholder_title_chars: Title length cap for placeholder graphics.
    """

    def __init__(
        self,
        translator: TitleTranslator | None = None,
        summarizer: Summarizer | None = None,
        image_generator: ImageGenerator | None = None,
        *,
        language_tag: str = DEFAULT_LANGUAGE_TAG,
        source_marker: str = DEFAULT_SOURCE_MARKER,
        min_lines: int = 5,
        max_lines: int = 10,
        timeout_seconds: float = 20.0,
        placeholder_title_chars: int = 60,
    ) -> None:
        self._translator = translator
        self._summarizer = summarizer
        self._image_generator = image_generator
        self._language_tag = language_tag
        self._source_marker = source_marker
        self._min_lines = min_lines
        self._max_lines = max_lines
        self._timeout = timeout_seconds
        self._placeholder_chars = placeholder_title_chars

    @property
    def has_translator(self) -> bool:
        return self._translator is not None

    @property
    def has_image_generator(self) -> bool:
        return self._image_generator is not None

    async def enrich(self, articles: list[CandidateArticle], topic_name: str) -> EnrichmentBatch:
        """Enrich every article concurrently, preserving input order."""
        results = await asyncio.gather(
            *(self.enrich_article(a, i, topic_name) for i, a in enumerate(articles))
        )

        batch = EnrichmentBatch()
        for enriched, outcomes in results:
            batch.articles.append(enriched)
            for name, outcome in outcomes.items():
                batch.usage += outcome.usage
                if outcome.is_fallback:
                    batch.fallbacks[name] = batch.fallbacks.get(name, 0) + 1
        return batch

    async def enrich_article(
        self, article: CandidateArticle, index: int, topic_name: str
    ) -> tuple[EnrichedArticle, dict[str, EnrichmentOutcome]]:
        """Run the title, summary and image operations for one article."""
        title, summary, image = await asyncio.gather(
            self.enrich_title(article),
            self.enrich_summary(article),
            self.enrich_image(article, topic_name),
        )
        enriched = EnrichedArticle(
            id=f"{article.source_id or 'news'}-{index}",
            title=title.value,
            published_at=article.published_at,
            source_name=article.source_name or UNKNOWN_SOURCE,
            url=article.url,
            summary=summary.value,
            image_url=image.value.url,
            image_is_ai=image.value.is_ai,
        )
        return (enriched, {"title": title, "summary": summary, "image": image})

    async def enrich_title(self, article: CandidateArticle) -> EnrichmentOutcome[str]:
        """Display title: translated and tagged for secondary-language articles.

        Primary-language titles pass through untouched.
        """
        original = article.title or ""
        if article.source_language != SourceLanguage.SECONDARY:
            return EnrichmentOutcome.succeeded(original)

        if self._translator is None:
            return EnrichmentOutcome.fallback(self._tag(original), "translator not configured")
        try:
            translated, usage = await self._guard(self._translator.translate_title(original))
        except Exception as e:
            logger.warning("Title translation failed for %s: %s", article.url, e)
            return EnrichmentOutcome.fallback(self._tag(original), _reason(e))
        return EnrichmentOutcome.succeeded(self._tag(translated), usage)

    async def enrich_summary(self, article: CandidateArticle) -> EnrichmentOutcome[str]:
        """Summary fitted to the line range, with the marker for secondary articles."""
        secondary = article.source_language == SourceLanguage.SECONDARY
        marker = self._source_marker if secondary else None

        def fallback(reason: str) -> EnrichmentOutcome[str]:
            text = local_summary(
                article, min_lines=self._min_lines, max_lines=self._max_lines, marker=marker
            )
            return EnrichmentOutcome.fallback(text, reason)

        if self._summarizer is None:
            return fallback("summarizer not configured")
        try:
            raw, usage = await self._guard(
                self._summarizer.summarize(article, translate=secondary, source_marker=marker)
            )
        except Exception as e:
            logger.warning("Summary failed for %s: %s", article.url, e)
            return fallback(_reason(e))

        lines = model_lines(raw, self._min_lines, self._max_lines)
        text = fit_lines(
            lines, article, min_lines=self._min_lines, max_lines=self._max_lines, marker=marker
        )
        return EnrichmentOutcome.succeeded(text, usage)

    async def enrich_image(
        self, article: CandidateArticle, topic_name: str
    ) -> EnrichmentOutcome[ImageRef]:
        """The article's own image if it has one, else a generated or placeholder image."""
        if article.image_url:
            return EnrichmentOutcome.succeeded(ImageRef(url=article.image_url))
        return await self.make_image(article.title, topic_name)

    async def make_image(self, title: str, topic_name: str) -> EnrichmentOutcome[ImageRef]:
        """AI illustration for ``title`` when enabled, otherwise a placeholder."""
        placeholder = ImageRef(url=placeholder_svg(title, self._placeholder_chars))
        if self._image_generator is None:
            return EnrichmentOutcome.fallback(placeholder, "image generation disabled")
        try:
            url, usage = await self._guard(self._image_generator.generate(title, topic_name))
        except Exception as e:
            logger.warning("Image generation failed for %r: %s", title, e)
            return EnrichmentOutcome.fallback(placeholder, _reason(e))
        return EnrichmentOutcome.succeeded(ImageRef(url=url, is_ai=True), usage)

    def _tag(self, title: str) -> str:
        if title.endswith(self._language_tag):
            return title
        return f"{title}{self._language_tag}"

    async def _guard(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._timeout)


def _reason(error: BaseException) -> str:
    if isinstance(error, TimeoutError):
        return "timed out"
    return str(error) or type(error).__name__
