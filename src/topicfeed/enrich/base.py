"""Protocols for the external enrichment collaborators."""

from typing import Protocol

from topicfeed.data import CandidateArticle, Usage


class TitleTranslator(Protocol):
    """Translates a secondary-language headline into the display language."""

    async def translate_title(self, title: str) -> tuple[str, Usage]: ...


class Summarizer(Protocol):
    """Produces a translated, line-per-sentence summary of an article."""

    async def summarize(
        self,
        article: CandidateArticle,
        *,
        translate: bool,
        source_marker: str | None = None,
    ) -> tuple[str, Usage]:
        """Summarize an article.

        Args:
            article: Article to summarize.
            translate: Whether the article must also be translated.
            source_marker: Closing line to request for translated articles.

        Returns:
            Tuple of (raw summary text, usage).
        """
        ...


class ImageGenerator(Protocol):
    """Generates an illustration for a headline."""

    async def generate(self, title: str, topic_name: str) -> tuple[str, Usage]:
        """Return an image URL (or data URI) and usage."""
        ...
