"""Tests for FeedPipeline."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from topicfeed.allocator import QuotaAllocator
from topicfeed.data import CandidateArticle, FeedResult, SourceLanguage, Usage
from topicfeed.enrich.pipeline import EnrichmentPipeline
from topicfeed.errors import UpstreamUnavailableError
from topicfeed.pipeline.feed import FeedPipeline, build_query, search_from_date
from topicfeed.topics import TECHNOLOGY, resolve_topic

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

_STORIES = [
    "Google presenta su nuevo chip",
    "Microsoft actualiza Windows",
    "Android recibe parche de ciberseguridad",
    "Apple abre tienda de software",
    "Samsung smartphone plegable",
    "Intel semiconductor en Europa",
]


def _article(
    language: SourceLanguage,
    i: int,
    *,
    hours_old: int = 1,
    title: str | None = None,
) -> CandidateArticle:
    tag = "es" if language == SourceLanguage.PRIMARY else "en"
    return CandidateArticle(
        title=title or f"{_STORIES[i]} {tag}",
        url=f"https://{tag}.example.com/{i}",
        source_language=language,
        source_name=f"Fuente {tag}",
        description="Noticia de tecnología.",
        published_at=(NOW - timedelta(hours=hours_old)).isoformat(),
    )


def _searcher(
    primary: list[CandidateArticle] | Exception,
    secondary: list[CandidateArticle] | Exception,
) -> MagicMock:
    async def search(query, *, language, cohort, from_date=None):
        result = primary if cohort == SourceLanguage.PRIMARY else secondary
        if isinstance(result, Exception):
            raise result
        return (result, Usage(newsapi_requests=1))

    searcher = MagicMock()
    searcher.search = AsyncMock(side_effect=search)
    return searcher


def _pipeline(searcher: MagicMock, **kwargs) -> FeedPipeline:
    return FeedPipeline(searcher, EnrichmentPipeline(), QuotaAllocator(), **kwargs)


def test_search_from_date() -> None:
    assert search_from_date(NOW, 24) == "2026-02-27"
    assert search_from_date(NOW, 72) == "2026-02-25"


def test_build_query() -> None:
    assert build_query(TECHNOLOGY) == TECHNOLOGY.search_query
    assert build_query(TECHNOLOGY, "  ") == TECHNOLOGY.search_query
    assert build_query(resolve_topic("volcanes"), "Islandia") == "(volcanes) AND (Islandia)"


class TestFeedPipeline:
    """Tests for FeedPipeline.run."""

    async def test_three_primary_four_secondary(self) -> None:
        primary = [_article(SourceLanguage.PRIMARY, i) for i in range(3)]
        secondary = [_article(SourceLanguage.SECONDARY, i + 3) for i in range(3)]
        secondary.append(
            _article(SourceLanguage.SECONDARY, 0, title="Intel abre fábrica de chips")
        )
        result = await _pipeline(_searcher(primary, secondary)).run("tecnología", now=NOW)

        assert isinstance(result, FeedResult)
        assert result.warning is None
        assert len(result.articles) == 5
        english = [a for a in result.articles if a.title.endswith(" (ENG)")]
        spanish = [a for a in result.articles if not a.title.endswith(" (ENG)")]
        assert len(spanish) == 3
        assert len(english) == 2
        # Primary-language articles come first.
        assert result.articles[:3] == spanish

    async def test_only_secondary_available(self) -> None:
        secondary = [_article(SourceLanguage.SECONDARY, i) for i in range(6)]
        result = await _pipeline(_searcher([], secondary)).run("tecnología", now=NOW)

        assert len(result.articles) == 5
        assert all(a.title.endswith(" (ENG)") for a in result.articles)
        for article in result.articles:
            assert article.summary.split("\n")[-1] == "fuente original en inglés"

    async def test_filters_stale_and_off_topic(self) -> None:
        primary = [
            _article(SourceLanguage.PRIMARY, 0),
            _article(SourceLanguage.PRIMARY, 1, hours_old=30),
            CandidateArticle(
                title="Receta de cocina",
                url="https://es.example.com/cocina",
                source_language=SourceLanguage.PRIMARY,
                published_at="2026-03-01T11:00:00Z",
            ),
            CandidateArticle(
                title="Google sin fecha",
                url="https://es.example.com/nodate",
                source_language=SourceLanguage.PRIMARY,
            ),
        ]
        result = await _pipeline(_searcher(primary, [])).run("tecnología", now=NOW)

        assert [a.url for a in result.articles] == ["https://es.example.com/0"]
        assert result.stats.raw_counts == {"es": 4, "en": 0}
        assert result.stats.filtered_counts == {"es": 1, "en": 0}
        assert result.stats.chosen == 1

    async def test_window_override(self) -> None:
        primary = [_article(SourceLanguage.PRIMARY, 0, hours_old=10)]
        result = await _pipeline(_searcher(primary, [])).run(
            "tecnología", window_hours=6, now=NOW
        )
        assert result.articles == []

    async def test_partial_failure_keeps_other_cohort(self) -> None:
        secondary = [_article(SourceLanguage.SECONDARY, i) for i in range(2)]
        searcher = _searcher(UpstreamUnavailableError("429 rate limited"), secondary)
        result = await _pipeline(searcher).run("tecnología", now=NOW)

        assert len(result.articles) == 2
        assert result.warning is not None
        assert "NewsAPI error (es)" in result.warning
        assert "429 rate limited" in result.warning
        assert result.stats.error == result.warning

    async def test_total_failure_returns_empty_with_warning(self) -> None:
        error = UpstreamUnavailableError("NewsAPI key not configured")
        pipeline = FeedPipeline(_searcher(error, error), MagicMock(), QuotaAllocator())
        result = await pipeline.run("tecnología", now=NOW)

        assert result.articles == []
        assert "NewsAPI error (es)" in result.warning
        assert "NewsAPI error (en)" in result.warning

    async def test_nothing_matches(self) -> None:
        result = await _pipeline(_searcher([], [])).run("volcanes", now=NOW)
        assert result.articles == []
        assert result.warning is None
        assert result.topic.name == "volcanes"

    async def test_search_arguments(self) -> None:
        searcher = _searcher([], [])
        await _pipeline(searcher).run("volcanes", extra_query="Islandia", now=NOW)

        calls = searcher.search.call_args_list
        assert len(calls) == 2
        languages = sorted(c.kwargs["language"] for c in calls)
        assert languages == ["en", "es"]
        for call in calls:
            assert call.args[0] == "(volcanes) AND (Islandia)"
            assert call.kwargs["from_date"] == "2026-02-27"

    async def test_usage_counts_requests(self) -> None:
        result = await _pipeline(_searcher([], [])).run("tecnología", now=NOW)
        assert result.usage.newsapi_requests == 2

    async def test_enrichment_fallbacks_reported(self) -> None:
        primary = [_article(SourceLanguage.PRIMARY, 0)]
        result = await _pipeline(_searcher(primary, [])).run("tecnología", now=NOW)
        assert result.stats.fallbacks == {"summary": 1, "image": 1}

    async def test_accepts_resolved_topic(self) -> None:
        result = await _pipeline(_searcher([], [])).run(TECHNOLOGY, now=NOW)
        assert result.topic is TECHNOLOGY

    async def test_primary_first_ordering(self) -> None:
        primary = [_article(SourceLanguage.PRIMARY, i, hours_old=i + 1) for i in range(4)]
        secondary = [_article(SourceLanguage.SECONDARY, 5)]
        searcher = _searcher(primary, secondary)

        result = await _pipeline(searcher).run("tecnología", now=NOW)
        urls = [a.url for a in result.articles]
        assert urls[-1] == "https://en.example.com/5"

        # Without re-sorting the backfilled primary article follows the secondary pick.
        result = await _pipeline(searcher, primary_first=False).run("tecnología", now=NOW)
        urls = [a.url for a in result.articles]
        assert urls[3:] == ["https://en.example.com/5", "https://es.example.com/3"]


class TestRunLogging:
    """Tests for per-run JSON logs."""

    async def test_writes_run_log(self, tmp_path: Path) -> None:
        primary = [_article(SourceLanguage.PRIMARY, i) for i in range(2)]
        pipeline = _pipeline(_searcher(primary, []), log_dir=tmp_path)
        result = await pipeline.run("tecnología", now=NOW)

        assert result.log_path is not None
        assert result.log_path.parent == tmp_path
        data = json.loads(result.log_path.read_text())
        assert [s["stage"] for s in data["stages"]] == [
            "search",
            "filter",
            "selection",
            "enrichment",
        ]
        assert data["final_article_count"] == 2
        assert data["topic"]["name"] == "Tecnología"
        assert data["total_usage"]["newsapi_requests"] == 2

    async def test_log_written_on_total_failure(self, tmp_path: Path) -> None:
        error = UpstreamUnavailableError("down")
        pipeline = _pipeline(_searcher(error, error), log_dir=tmp_path)
        result = await pipeline.run("tecnología", now=NOW)

        data = json.loads(result.log_path.read_text())
        assert [s["stage"] for s in data["stages"]] == ["search"]
        assert data["warning"] == result.warning

    async def test_no_log_by_default(self) -> None:
        result = await _pipeline(_searcher([], [])).run("tecnología", now=NOW)
        assert result.log_path is None

    async def test_one_file_per_run(self, tmp_path: Path) -> None:
        pipeline = _pipeline(_searcher([], []), log_dir=tmp_path)
        first = await pipeline.run("tecnología", now=NOW)
        second = await pipeline.run("tecnología", now=NOW)
        assert first.log_path != second.log_path
        assert len(list(tmp_path.glob("run_*.json"))) == 2

    async def test_unwritable_log_dir_keeps_feed(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        primary = [_article(SourceLanguage.PRIMARY, i) for i in range(2)]
        pipeline = _pipeline(_searcher(primary, []), log_dir=blocker)
        result = await pipeline.run("tecnología", now=NOW)

        assert len(result.articles) == 2
        assert result.warning is None
        assert result.log_path is None
