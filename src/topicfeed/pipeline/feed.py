"""Request-scoped feed pipeline."""

import asyncio
import logging
import math
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path

from topicfeed.allocator import QuotaAllocator
from topicfeed.data import (
    CandidateArticle,
    FeedResult,
    FeedStats,
    ScoredCandidate,
    SourceLanguage,
    TopicConfig,
    Usage,
)
from topicfeed.enrich.pipeline import EnrichmentPipeline
from topicfeed.recency import is_recent
from topicfeed.run_logger import RunLogger
from topicfeed.scoring import matches_topic, score_candidates
from topicfeed.search.base import ArticleSearcher
from topicfeed.topics import resolve_topic

logger = logging.getLogger(__name__)

_COHORT_ORDER = {SourceLanguage.PRIMARY: 0, SourceLanguage.SECONDARY: 1}


def search_from_date(now: datetime, window_hours: float, lookback_days: int = 2) -> str:
    """Date lower bound for the provider query.

    The provider only filters by day, so the bound reaches back at least one
    full day beyond the window; the exact hour cut happens locally.
    """
    days = max(lookback_days, math.ceil(window_hours / 24) + 1)
    return (now - timedelta(days=days)).date().isoformat()


def build_query(topic: TopicConfig, extra_query: str | None = None) -> str:
    """Topic query, AND-ed with the caller's extra term when given."""
    extra = (extra_query or "").strip()
    if not extra:
        return topic.search_query
    return f"({topic.search_query}) AND ({extra})"


class FeedPipeline:
    """Topic in, curated list of enriched articles out.

    Flow:
    1. Resolve the topic string to a ``TopicConfig``
    2. Fetch the primary and secondary cohorts in parallel
    3. Keep articles inside the recency window that match the topic
    4. Score each cohort and allocate the language-balanced top N
    5. Enrich the selection in parallel

    A failed cohort fetch contributes no candidates and is reported in
    ``FeedResult.warning``; nothing here raises for upstream failures.

    Args:
        searcher: News search collaborator.
        enrichment: Enrichment pipeline.
        allocator: Quota allocator.
        primary_language: Provider language code of the primary cohort.
        secondary_language: Provider language code of the secondary cohort.
        window_hours: Default recency window.
        lookback_days: Minimum days requested from the provider.
        primary_first: Re-sort output so primary-language articles come first.
        log_dir: Directory for JSON run logs, or None to disable them.
    """

    def __init__(
        self,
        searcher: ArticleSearcher,
        enrichment: EnrichmentPipeline,
        allocator: QuotaAllocator | None = None,
        *,
        primary_language: str = "es",
        secondary_language: str = "en",
        window_hours: float = 24.0,
        lookback_days: int = 2,
        primary_first: bool = True,
        log_dir: Path | None = None,
    ) -> None:
        self._searcher = searcher
        self._enrichment = enrichment
        self._allocator = allocator or QuotaAllocator()
        self._languages = {
            SourceLanguage.PRIMARY: primary_language,
            SourceLanguage.SECONDARY: secondary_language,
        }
        self._window_hours = window_hours
        self._lookback_days = lookback_days
        self._primary_first = primary_first
        self._log_dir = log_dir

    @property
    def enrichment(self) -> EnrichmentPipeline:
        return self._enrichment

    @property
    def window_hours(self) -> float:
        return self._window_hours

    async def run(
        self,
        topic: TopicConfig | str | None,
        *,
        window_hours: float | None = None,
        extra_query: str | None = None,
        now: datetime | None = None,
    ) -> FeedResult:
        """Build the feed for one request.

        Args:
            topic: Raw topic string or an already resolved topic.
            window_hours: Recency window override.
            extra_query: Extra free-text term AND-ed with the topic query.
            now: Reference time (defaults to the current UTC time).

        Returns:
            The feed result, possibly empty with a warning.
        """
        if not isinstance(topic, TopicConfig):
            topic = resolve_topic(topic)
        window = self._window_hours if window_hours is None else window_hours
        now = now or datetime.now(tz=UTC)

        run_logger = RunLogger(self._log_dir) if self._log_dir is not None else None
        if run_logger:
            run_logger.start_run(topic, {"window_hours": window, "extra_query": extra_query})

        result = FeedResult(topic=topic)

        # Step 1: fetch both cohorts in parallel
        t0 = time.monotonic()
        query = build_query(topic, extra_query)
        from_date = search_from_date(now, window, self._lookback_days)
        cohorts = list(self._languages)
        fetched = await asyncio.gather(
            *(
                self._searcher.search(
                    query,
                    language=self._languages[cohort],
                    cohort=cohort,
                    from_date=from_date,
                )
                for cohort in cohorts
            ),
            return_exceptions=True,
        )

        raw: dict[SourceLanguage, list[CandidateArticle]] = {}
        errors: list[str] = []
        search_usage = Usage()
        for cohort, outcome in zip(cohorts, fetched, strict=True):
            language = self._languages[cohort]
            if isinstance(outcome, BaseException):
                logger.warning("Search failed for %s: %s", language, outcome)
                errors.append(f"NewsAPI error ({language}): {outcome}")
                raw[cohort] = []
                continue
            articles, usage = outcome
            raw[cohort] = articles
            search_usage += usage
        result.usage += search_usage
        result.stats.raw_counts = {self._languages[c]: len(v) for c, v in raw.items()}

        if run_logger:
            run_logger.log_stage(
                stage="search",
                component=type(self._searcher).__name__,
                input_data={"query": query, "from_date": from_date},
                output_data=result.stats.raw_counts,
                usage=search_usage,
                duration_seconds=time.monotonic() - t0,
            )

        if errors:
            result.warning = "; ".join(errors)
            result.stats.error = result.warning
        if len(errors) == len(cohorts):
            return self._finish(result, run_logger)

        # Step 2: recency window + topic match
        t0 = time.monotonic()
        filtered = {
            cohort: [
                a
                for a in articles
                if is_recent(a.published_at, window, now) and matches_topic(topic, a)
            ]
            for cohort, articles in raw.items()
        }
        result.stats.filtered_counts = {self._languages[c]: len(v) for c, v in filtered.items()}

        if run_logger:
            run_logger.log_stage(
                stage="filter",
                component="recency+topic",
                input_data=result.stats.raw_counts,
                output_data=result.stats.filtered_counts,
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )

        # Step 3: score and allocate
        t0 = time.monotonic()
        scored = {
            cohort: score_candidates(topic, articles, window_hours=window, now=now)
            for cohort, articles in filtered.items()
        }
        chosen = self._allocator.allocate(
            scored[SourceLanguage.PRIMARY], scored[SourceLanguage.SECONDARY]
        )
        selection = self._order(chosen)
        result.stats.chosen = len(selection)

        if run_logger:
            run_logger.log_stage(
                stage="selection",
                component=type(self._allocator).__name__,
                input_data=result.stats.filtered_counts,
                output_data=[{"url": c.article.url, "score": c.score} for c in selection],
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )

        # Step 4: enrich
        t0 = time.monotonic()
        batch = await self._enrichment.enrich([c.article for c in selection], topic.name)
        result.articles = batch.articles
        result.usage += batch.usage
        result.stats.fallbacks = batch.fallbacks

        if run_logger:
            run_logger.log_stage(
                stage="enrichment",
                component=type(self._enrichment).__name__,
                input_data={"article_count": len(selection)},
                output_data=batch.articles,
                usage=batch.usage,
                duration_seconds=time.monotonic() - t0,
            )

        return self._finish(result, run_logger)

    def _order(self, chosen: list[ScoredCandidate]) -> list[ScoredCandidate]:
        if not self._primary_first:
            return chosen
        return sorted(chosen, key=lambda c: _COHORT_ORDER[c.article.source_language])

    def _finish(self, result: FeedResult, run_logger: RunLogger | None) -> FeedResult:
        if run_logger:
            try:
                result.log_path = run_logger.finish_run(
                    result.articles, result.usage, result.warning
                )
            except OSError as e:
                logger.warning("Could not write run log: %s", e)
        return result
