from __future__ import annotations

import logging
import os

import httpx

from topicfeed.data import CandidateArticle, SourceLanguage, Usage
from topicfeed.errors import UpstreamUnavailableError
from topicfeed.url import extract_domain

logger = logging.getLogger(__name__)

NEWSAPI_URL = "https://newsapi.org/v2/everything"


class NewsAPISearcher:
    """Search for news articles using the NewsAPI ``everything`` endpoint.

    A missing key is not an error at construction time; searches then raise
    ``UpstreamUnavailableError`` so the caller can degrade to an empty feed.

    Args:
        api_key: NewsAPI key (defaults to NEWSAPI_KEY env var).
        page_size: Articles requested per call (NewsAPI max is 100).
        search_in: Fields the provider matches the query against.
        timeout_seconds: HTTP timeout.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        page_size: int = 50,
        search_in: str = "title,description",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("NEWSAPI_KEY")
        self._page_size = min(page_size, 100)
        self._search_in = search_in
        self._timeout = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def search(
        self,
        query: str,
        *,
        language: str,
        cohort: SourceLanguage,
        from_date: str | None = None,
    ) -> tuple[list[CandidateArticle], Usage]:
        """Search for recent articles matching ``query`` in ``language``.

        Results are requested newest first.

        Args:
            query: NewsAPI query string.
            language: Two-letter language code.
            cohort: Cohort the returned articles belong to.
            from_date: Lower date bound (ISO date).

        Returns:
            Tuple of (articles, usage).

        Raises:
            UpstreamUnavailableError: On missing key, transport error or non-2xx status.
        """
        if not self._api_key:
            raise UpstreamUnavailableError("NewsAPI key not configured (set NEWSAPI_KEY)")

        params: dict[str, str | int] = {
            "q": query,
            "language": language,
            "sortBy": "publishedAt",
            "searchIn": self._search_in,
            "pageSize": self._page_size,
        }
        if from_date:
            params["from"] = from_date

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    NEWSAPI_URL,
                    params=params,
                    headers={"X-Api-Key": self._api_key},
                )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"NewsAPI request failed: {e}") from e

        if response.status_code >= 400:
            raise UpstreamUnavailableError(
                f"NewsAPI returned {response.status_code}: {response.text}"
            )
        data = response.json()

        articles: list[CandidateArticle] = []
        for item in data.get("articles", []):
            url = item.get("url") or ""
            source = item.get("source") or {}
            articles.append(
                CandidateArticle(
                    title=item.get("title") or "",
                    url=url,
                    source_language=cohort,
                    source_name=source.get("name") or (extract_domain(url) if url else ""),
                    source_id=source.get("id"),
                    description=item.get("description"),
                    published_at=item.get("publishedAt"),
                    image_url=item.get("urlToImage"),
                    raw_body=item.get("content"),
                )
            )

        logger.debug("NewsAPI %s returned %d articles", language, len(articles))
        return (articles, Usage(newsapi_requests=1))
