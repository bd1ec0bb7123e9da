"""Tests for the framework-neutral feed request handler."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from topicfeed.allocator import QuotaAllocator
from topicfeed.config import Credentials, TopicFeedConfig
from topicfeed.data import CandidateArticle, SourceLanguage, Usage
from topicfeed.enrich.pipeline import EnrichmentPipeline
from topicfeed.errors import UpstreamUnavailableError
from topicfeed.handler import FeedHandler, FeedRequest, create_handler
from topicfeed.pipeline.feed import FeedPipeline


def _recent(hours: float = 1) -> str:
    return (datetime.now(tz=UTC) - timedelta(hours=hours)).isoformat()


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


def _handler(searcher: MagicMock, credentials: Credentials | None = None) -> FeedHandler:
    pipeline = FeedPipeline(searcher, EnrichmentPipeline(), QuotaAllocator())
    return FeedHandler(pipeline, TopicFeedConfig(), credentials or Credentials())


@pytest.fixture
def articles() -> tuple[list[CandidateArticle], list[CandidateArticle]]:
    primary = [
        CandidateArticle(
            title="Google presenta su nuevo Pixel",
            url="https://es.example.com/pixel",
            source_language=SourceLanguage.PRIMARY,
            source_name="El País",
            source_id="el-pais",
            description="El teléfono llega en octubre.",
            published_at=_recent(2),
        )
    ]
    secondary = [
        CandidateArticle(
            title="Microsoft ships Windows update",
            url="https://en.example.com/windows",
            source_language=SourceLanguage.SECONDARY,
            source_name="",
            description="A new update arrives.",
            published_at=_recent(1),
            image_url="https://cdn.example.com/w.jpg",
        )
    ]
    return primary, secondary


class TestFeedRequest:
    """Tests for FeedRequest parsing."""

    def test_defaults(self) -> None:
        request = FeedRequest.from_params({})
        assert request.topic == "tecnología"
        assert request.debug is False
        assert request.hours is None
        assert request.q is None

    def test_parses_values(self) -> None:
        request = FeedRequest.from_params(
            {"topic": "IA", "debug": "1", "hours": "12", "q": " openai ", "other": "x"}
        )
        assert request.topic == "IA"
        assert request.debug is True
        assert request.hours == 12
        assert request.q == "openai"

    @pytest.mark.parametrize("hours", ["abc", "nan", "inf", ""])
    def test_bad_hours_ignored(self, hours: str) -> None:
        assert FeedRequest.from_params({"hours": hours}).hours is None

    def test_debug_flag_values(self) -> None:
        assert FeedRequest.from_params({"debug": "true"}).debug is True
        assert FeedRequest.from_params({"debug": "0"}).debug is False


class TestFeedHandler:
    """Tests for FeedHandler.handle."""

    async def test_ping(self) -> None:
        handler = _handler(_searcher([], []))
        response = await handler.handle({"topic": "ping"})
        assert response.status == 200
        assert response.body == {"ok": True, "articles": []}

    async def test_diagnostics(self) -> None:
        creds = Credentials(newsapi_key="n", claude_api_key="c", deploy_env="preview")
        handler = _handler(_searcher([], []), creds)
        response = await handler.handle({"topic": "__diag"})
        assert response.body == {
            "ok": True,
            "hasClaude": True,
            "hasNewsAPI": True,
            "hasOpenAI": False,
            "aiImages": False,
            "env": "preview",
        }

    async def test_diagnostics_never_exposes_keys(self) -> None:
        creds = Credentials(newsapi_key="secret-news", claude_api_key="secret-claude")
        handler = _handler(_searcher([], []), creds)
        response = await handler.handle({"topic": "__diag"})
        assert "secret" not in str(response.body)

    async def test_make_image_placeholder(self) -> None:
        handler = _handler(_searcher([], []))
        response = await handler.handle({"topic": "__make_img", "title": "Hola mundo"})
        assert response.body["isAI"] is False
        assert response.body["url"].startswith("data:image/svg+xml;base64,")

    async def test_make_image_generated(self) -> None:
        generator = MagicMock()
        generator.generate = AsyncMock(return_value=("https://img/1.png", Usage()))
        pipeline = FeedPipeline(
            _searcher([], []), EnrichmentPipeline(image_generator=generator), QuotaAllocator()
        )
        handler = FeedHandler(pipeline, TopicFeedConfig(), Credentials())
        response = await handler.handle({"topic": "__make_img", "title": "x" * 300})

        assert response.body == {"url": "https://img/1.png", "isAI": True}
        title, topic_name = generator.generate.call_args.args
        assert len(title) == 140
        assert topic_name == "Noticias"

    async def test_make_image_default_title(self) -> None:
        generator = MagicMock()
        generator.generate = AsyncMock(return_value=("https://img/1.png", Usage()))
        pipeline = FeedPipeline(
            _searcher([], []), EnrichmentPipeline(image_generator=generator), QuotaAllocator()
        )
        handler = FeedHandler(pipeline, TopicFeedConfig(), Credentials())
        await handler.handle({"topic": "__make_img"})
        assert generator.generate.call_args.args[0] == "Noticia"

    async def test_feed_body(self, articles) -> None:
        handler = _handler(_searcher(*articles))
        response = await handler.handle({"topic": "tecnología"})

        assert response.status == 200
        assert response.headers == {}
        assert "warning" not in response.body
        assert "debug" not in response.body
        body = response.body["articles"]
        assert len(body) == 2
        first, second = body
        assert set(first) == {
            "id",
            "title",
            "publishedAt",
            "sourceName",
            "url",
            "summary",
            "imageUrl",
            "imageIsAI",
        }
        assert first["id"] == "el-pais-0"
        assert first["title"] == "Google presenta su nuevo Pixel"
        assert second["title"] == "Microsoft ships Windows update (ENG)"
        assert second["sourceName"] == "Desconocida"
        assert second["imageUrl"] == "https://cdn.example.com/w.jpg"
        assert second["summary"].split("\n")[-1] == "fuente original en inglés"

    async def test_debug_payload_and_headers(self, articles) -> None:
        handler = _handler(_searcher(*articles))
        response = await handler.handle({"topic": "tecnología", "debug": "1", "hours": "500"})

        debug = response.body["debug"]
        assert debug["windowHours"] == 72
        assert debug["raw"] == {"es": 1, "en": 1}
        assert debug["filtered"] == {"es": 1, "en": 1}
        assert debug["chosen"] == 2
        assert debug["usage"]["newsapiRequests"] == 2
        assert response.headers["X-Debug-Raw-ES"] == "1"
        assert response.headers["X-Debug-Filtered-EN"] == "1"
        assert response.headers["X-Debug-Chosen"] == "2"
        assert "X-Debug-Error" not in response.headers

    async def test_upstream_failure_is_warning(self) -> None:
        error = UpstreamUnavailableError("NewsAPI key not configured")
        handler = _handler(_searcher(error, error))
        response = await handler.handle({"topic": "tecnología", "debug": "1"})

        assert response.status == 200
        assert response.body["articles"] == []
        assert "NewsAPI key not configured" in response.body["warning"]
        assert "NewsAPI error (es)" in response.headers["X-Debug-Error"]

    async def test_error_header_is_ascii_and_short(self) -> None:
        error = UpstreamUnavailableError("fallo de conexión " * 30)
        handler = _handler(_searcher(error, error))
        response = await handler.handle({"topic": "tecnología", "debug": "true"})

        header = response.headers["X-Debug-Error"]
        assert len(header) <= 200
        header.encode("ascii")

    async def test_error_header_is_single_line(self) -> None:
        error = UpstreamUnavailableError(
            "NewsAPI returned 502: <html>\r\n<body>Bad gateway</body>\n</html>"
        )
        handler = _handler(_searcher(error, error))
        response = await handler.handle({"topic": "tecnología", "debug": "1"})

        assert response.status == 200
        header = response.headers["X-Debug-Error"]
        assert "\r" not in header
        assert "\n" not in header
        assert "<body>Bad gateway</body>" in header
        assert "\n" in response.body["warning"]

    async def test_unexpected_error_is_warning(self) -> None:
        pipeline = MagicMock()
        pipeline.run = AsyncMock(side_effect=RuntimeError("kaboom"))
        handler = FeedHandler(pipeline, TopicFeedConfig(), Credentials())
        response = await handler.handle({"topic": "tecnología"})

        assert response.status == 200
        assert response.body == {"articles": [], "warning": "Server error: kaboom"}

    async def test_hours_and_query_forwarded(self) -> None:
        pipeline = MagicMock()
        pipeline.run = AsyncMock(side_effect=RuntimeError("stop"))
        handler = FeedHandler(pipeline, TopicFeedConfig(), Credentials())
        await handler.handle({"topic": "volcanes", "hours": "0.2", "q": "Islandia"})

        kwargs = pipeline.run.call_args.kwargs
        assert pipeline.run.call_args.args[0] == "volcanes"
        assert kwargs["window_hours"] == 1
        assert kwargs["extra_query"] == "Islandia"


def test_create_handler_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ["NEWSAPI_KEY", "CLAUDE_API_KEY", "OPENAI_API_KEY", "ENABLE_AI_IMAGES"]:
        monkeypatch.delenv(name, raising=False)
    handler = create_handler()
    diagnostics = handler.diagnostics()
    assert diagnostics["hasNewsAPI"] is False
    assert diagnostics["aiImages"] is False
