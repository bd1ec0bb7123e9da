"""Illustration generation with the OpenAI Images API."""

import logging
import os

import openai

from topicfeed.data import Usage
from topicfeed.errors import EnrichmentUnavailableError

logger = logging.getLogger(__name__)

IMAGE_PROMPT = (
    "Ilustración editorial clara y minimalista relacionada con {topic}. "
    "Tema/noticia: {title}. Sin texto, sin logos de marcas, formato panorámico."
)


class OpenAIImageGenerator:
    """Generate a news illustration for a headline.

    Args:
        model: OpenAI image model.
        api_key: API key (defaults to OPENAI_API_KEY env var).
        size: Target image size.
    """

    def __init__(
        self,
        model: str = "gpt-image-1",
        api_key: str | None = None,
        *,
        size: str = "1536x1024",
    ) -> None:
        resolved_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._client = openai.AsyncOpenAI(api_key=resolved_key)
        self._model = model
        self._size = size

    async def generate(self, title: str, topic_name: str) -> tuple[str, Usage]:
        """Generate an image and return its URL or a PNG data URI.

        Raises:
            EnrichmentUnavailableError: If the response carries no image.
        """
        response = await self._client.images.generate(
            model=self._model,
            prompt=IMAGE_PROMPT.format(topic=topic_name, title=title),
            size=self._size,
            n=1,
        )
        data = response.data or []
        if not data:
            raise EnrichmentUnavailableError("Image response contained no data")
        image = data[0]
        if getattr(image, "url", None):
            url = image.url
        elif getattr(image, "b64_json", None):
            url = f"data:image/png;base64,{image.b64_json}"
        else:
            raise EnrichmentUnavailableError("Image response contained neither url nor b64_json")
        return (url, Usage(image_generations=1))
