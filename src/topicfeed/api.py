"""FastAPI adapter exposing the feed handler at ``GET /api/news``.

Run with ``uvicorn --factory topicfeed.api:create_app`` or ``python main.py --serve``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from topicfeed.handler import FeedHandler, create_handler


def create_app(handler: FeedHandler | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        handler: Feed handler (built from the default config and environment if None).
    """
    feed_handler = handler or create_handler()
    app = FastAPI(title="TopicFeed", description="Curated, deduplicated topic news feed")

    @app.get("/api/news")
    async def get_news(request: Request) -> JSONResponse:
        """Curated articles for ``topic``, or a reserved utility response."""
        response = await feed_handler.handle(dict(request.query_params))
        return JSONResponse(
            content=response.body,
            status_code=response.status,
            headers=response.headers,
        )

    return app
