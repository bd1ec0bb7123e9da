"""Request contract for the news feed endpoint.

Independent of any web framework: ``FeedHandler.handle`` takes the query
parameters as a mapping and returns a body, headers and a status code.
The status is always 200. Upstream failures and unexpected errors become
an empty article list with a ``warning`` so clients never switch to a
degraded local mode on transient failures.
"""

import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from topicfeed.config import (
    Credentials,
    TopicFeedConfig,
    ai_images_enabled,
    create_from_config,
    get_default_config_path,
    load_config,
)
from topicfeed.data import EnrichedArticle, FeedResult
from topicfeed.pipeline.feed import FeedPipeline
from topicfeed.topics import DEFAULT_TOPIC

logger = logging.getLogger(__name__)

PING_TOPIC = "ping"
DIAG_TOPIC = "__diag"
MAKE_IMAGE_TOPIC = "__make_img"

MAKE_IMAGE_TITLE_CHARS = 140
MAKE_IMAGE_DEFAULT_TITLE = "Noticia"
MAKE_IMAGE_TOPIC_NAME = "Noticias"

_TRUTHY = {"1", "true", "yes", "on"}
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")


class FeedRequest(BaseModel):
    """Query parameters of a feed request.

    Never fails validation: malformed values fall back to defaults.
    """

    topic: str = DEFAULT_TOPIC
    debug: bool = False
    hours: float | None = None
    q: str | None = None
    title: str | None = None

    @field_validator("topic", mode="before")
    @classmethod
    def topic_or_default(cls, v: Any) -> str:
        if v is None:
            return DEFAULT_TOPIC
        return str(v)

    @field_validator("debug", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in _TRUTHY

    @field_validator("hours", mode="before")
    @classmethod
    def parse_hours(cls, v: Any) -> float | None:
        if v is None or v == "":
            return None
        try:
            hours = float(v)
        except (TypeError, ValueError):
            return None
        return hours if math.isfinite(hours) else None

    @field_validator("q", "title", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FeedRequest":
        known = {k: params[k] for k in cls.model_fields if k in params}
        return cls.model_validate(known)


class ArticlePayload(BaseModel):
    """Wire shape of one enriched article."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    published_at: str | None = Field(default=None, serialization_alias="publishedAt")
    source_name: str = Field(serialization_alias="sourceName")
    url: str
    summary: str
    image_url: str = Field(serialization_alias="imageUrl")
    image_is_ai: bool = Field(default=False, serialization_alias="imageIsAI")

    @classmethod
    def from_article(cls, article: EnrichedArticle) -> "ArticlePayload":
        return cls(
            id=article.id,
            title=article.title,
            published_at=article.published_at,
            source_name=article.source_name,
            url=article.url,
            summary=article.summary,
            image_url=article.image_url,
            image_is_ai=article.image_is_ai,
        )


class FeedResponse(BaseModel):
    """Wire shape of a feed response."""

    articles: list[ArticlePayload] = Field(default_factory=list)
    warning: str | None = None
    debug: dict[str, Any] | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class HandlerResponse:
    """Framework-neutral HTTP response."""

    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    status: int = 200


def _header_value(value: object, limit: int = 200) -> str:
    # Header values must be single-line latin-1; keep them ASCII and short.
    text = _CONTROL_CHARS.sub(" ", str(value)).strip()
    return text.encode("ascii", "replace").decode("ascii")[:limit]


def debug_payload(result: FeedResult, window_hours: float) -> dict[str, Any]:
    """Internal counters for the debug body field."""
    return {
        "topic": result.topic.name,
        "windowHours": window_hours,
        "raw": dict(result.stats.raw_counts),
        "filtered": dict(result.stats.filtered_counts),
        "chosen": result.stats.chosen,
        "fallbacks": dict(result.stats.fallbacks),
        "error": result.stats.error,
        "usage": {
            "newsapiRequests": result.usage.newsapi_requests,
            "llmCalls": len(result.usage.api_calls),
            "inputTokens": result.usage.input_tokens,
            "outputTokens": result.usage.output_tokens,
            "imageGenerations": result.usage.image_generations,
        },
    }


def debug_headers(result: FeedResult) -> dict[str, str]:
    """The same counters as ``X-Debug-*`` response headers."""
    headers: dict[str, str] = {}
    for language, count in result.stats.raw_counts.items():
        headers[f"X-Debug-Raw-{language.upper()}"] = str(count)
    for language, count in result.stats.filtered_counts.items():
        headers[f"X-Debug-Filtered-{language.upper()}"] = str(count)
    headers["X-Debug-Chosen"] = str(result.stats.chosen)
    if result.stats.error:
        headers["X-Debug-Error"] = _header_value(result.stats.error)
    return headers


class FeedHandler:
    """Serve feed requests, including the reserved utility topics.

    Args:
        pipeline: Feed pipeline used for regular topics.
        config: Root configuration (window range for clamping).
        credentials: Credentials reported by the diagnostics topic.
    """

    def __init__(
        self,
        pipeline: FeedPipeline,
        config: TopicFeedConfig,
        credentials: Credentials,
    ) -> None:
        self._pipeline = pipeline
        self._config = config
        self._credentials = credentials

    async def handle(self, params: Mapping[str, Any]) -> HandlerResponse:
        """Handle one request. Never raises and always answers 200."""
        try:
            request = FeedRequest.from_params(params)
            if request.topic == PING_TOPIC:
                return HandlerResponse(body={"ok": True, "articles": []})
            if request.topic == DIAG_TOPIC:
                return HandlerResponse(body=self.diagnostics())
            if request.topic == MAKE_IMAGE_TOPIC:
                return HandlerResponse(body=await self.make_image(request.title))
            return await self._feed(request)
        except Exception as e:
            logger.exception("Unhandled error serving feed request")
            return HandlerResponse(body=FeedResponse(warning=f"Server error: {e}").to_body())

    def diagnostics(self) -> dict[str, Any]:
        """Which credentials and features are configured."""
        creds = self._credentials
        return {
            "ok": True,
            "hasClaude": bool(creds.claude_api_key),
            "hasNewsAPI": bool(creds.newsapi_key),
            "hasOpenAI": bool(creds.openai_api_key),
            "aiImages": ai_images_enabled(self._config.enrichment, creds),
            "env": creds.deploy_env,
        }

    async def make_image(self, title: str | None) -> dict[str, Any]:
        """Image reference for ``title`` (AI-generated or placeholder)."""
        text = (title or "")[:MAKE_IMAGE_TITLE_CHARS] or MAKE_IMAGE_DEFAULT_TITLE
        outcome = await self._pipeline.enrichment.make_image(text, MAKE_IMAGE_TOPIC_NAME)
        return {"url": outcome.value.url, "isAI": outcome.value.is_ai}

    async def _feed(self, request: FeedRequest) -> HandlerResponse:
        window = self._config.window.clamp(request.hours)
        result = await self._pipeline.run(
            request.topic,
            window_hours=window,
            extra_query=request.q,
        )
        response = FeedResponse(
            articles=[ArticlePayload.from_article(a) for a in result.articles],
            warning=result.warning,
        )
        headers: dict[str, str] = {}
        if request.debug:
            response.debug = debug_payload(result, window)
            headers = debug_headers(result)
        return HandlerResponse(body=response.to_body(), headers=headers)


def create_handler(
    config: TopicFeedConfig | None = None,
    credentials: Credentials | None = None,
    **factory_kwargs: Any,
) -> FeedHandler:
    """Build a handler from config (the default YAML when present) and the environment."""
    if config is None:
        default_path = get_default_config_path()
        config = load_config(default_path) if default_path.exists() else TopicFeedConfig()
    credentials = credentials or Credentials.from_env()
    pipeline = create_from_config(config, credentials, **factory_kwargs)
    return FeedHandler(pipeline, config, credentials)
