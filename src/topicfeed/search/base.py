from typing import Protocol

from topicfeed.data import CandidateArticle, SourceLanguage, Usage


class ArticleSearcher(Protocol):
    """Interface for the keyword news search collaborator."""

    async def search(
        self,
        query: str,
        *,
        language: str,
        cohort: SourceLanguage,
        from_date: str | None = None,
    ) -> tuple[list[CandidateArticle], Usage]:
        """Search for articles in one language.

        Args:
            query: Provider query string.
            language: Provider language code (e.g. "es").
            cohort: Cohort the returned articles belong to.
            from_date: Lower date bound (ISO date, e.g. "2026-01-01").

        Returns:
            Tuple of (articles, usage).

        Raises:
            UpstreamUnavailableError: If the provider call fails.
        """
        ...
