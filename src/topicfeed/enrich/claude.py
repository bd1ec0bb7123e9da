"""Claude-based headline translation and article summarization."""

import logging
import os

import anthropic

from topicfeed.data import APICallUsage, CandidateArticle, Usage
from topicfeed.errors import EnrichmentUnavailableError

logger = logging.getLogger(__name__)

TITLE_SYSTEM_PROMPT = """\
Traduce títulos del inglés al español de forma natural. \
Devuelve SOLO el título, sin comillas ni explicaciones.\
"""

SUMMARY_SYSTEM_PROMPT = """\
Eres un asistente que traduce y resume noticias al español con precisión y \
neutralidad. Devuelve de {min_lines} a {max_lines} LÍNEAS, cada línea una frase.\
"""

SUMMARY_INSTRUCTIONS = (
    "Resume en ESPAÑOL en {min_lines} a {max_lines} líneas. Cada línea debe ser UNA "
    "frase breve separada por SALTO DE LÍNEA. No inventes datos."
)

TRANSLATE_SUMMARY_INSTRUCTIONS = (
    "Traduce Y resume en ESPAÑOL en {min_lines} a {max_lines} líneas. Cada línea debe "
    "ser UNA frase breve separada por SALTO DE LÍNEA. No inventes datos. "
    'Al final añade exactamente: "{source_marker}".'
)


def _call_usage(model: str, response: object) -> Usage:
    usage = getattr(response, "usage", None)
    return Usage(
        api_calls=[
            APICallUsage(
                model=model,
                input_tokens=getattr(usage, "input_tokens", 0) or 0,
                output_tokens=getattr(usage, "output_tokens", 0) or 0,
            )
        ]
    )


def _response_text(response: object) -> str:
    text = ""
    for block in getattr(response, "content", []):
        if hasattr(block, "text"):
            text += block.text
    return text.strip()


class ClaudeTranslator:
    """Translate headlines and summarize articles with Claude.

    Implements both the ``TitleTranslator`` and ``Summarizer`` protocols.

    Args:
        model: Anthropic model to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        min_lines: Lower bound requested for summaries.
        max_lines: Upper bound requested for summaries.
        title_system_prompt: Override for the headline translation prompt.
        summary_system_prompt: Override for the summary prompt. May contain
            ``{min_lines}`` and ``{max_lines}`` placeholders.
    """

    def __init__(
        self,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        *,
        min_lines: int = 5,
        max_lines: int = 10,
        title_system_prompt: str | None = None,
        summary_system_prompt: str | None = None,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._min_lines = min_lines
        self._max_lines = max_lines
        self._title_prompt = title_system_prompt or TITLE_SYSTEM_PROMPT
        self._summary_prompt = summary_system_prompt or SUMMARY_SYSTEM_PROMPT

    async def translate_title(self, title: str) -> tuple[str, Usage]:
        """Translate a headline.

        Raises:
            EnrichmentUnavailableError: If the model returns no text.
        """
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=256,
            temperature=0.1,
            system=self._title_prompt,
            messages=[{"role": "user", "content": f"Traduce al español este titular:\n{title}"}],
        )
        usage = _call_usage(self._model, response)
        translated = _response_text(response).strip("\"'“”")
        if not translated:
            raise EnrichmentUnavailableError("Empty title translation")
        return (translated, usage)

    async def summarize(
        self,
        article: CandidateArticle,
        *,
        translate: bool,
        source_marker: str | None = None,
    ) -> tuple[str, Usage]:
        """Summarize (and optionally translate) an article.

        Raises:
            EnrichmentUnavailableError: If the model returns no text.
        """
        if translate:
            instructions = TRANSLATE_SUMMARY_INSTRUCTIONS.format(
                min_lines=self._min_lines,
                max_lines=self._max_lines,
                source_marker=source_marker or "",
            )
        else:
            instructions = SUMMARY_INSTRUCTIONS.format(
                min_lines=self._min_lines, max_lines=self._max_lines
            )
        user_prompt = (
            f"{instructions}\n"
            f"Título: {article.title}\n"
            f"Descripción: {article.description or '(sin descripción)'}\n"
            f"Enlace: {article.url}"
        )

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=1024,
            temperature=0.2,
            system=self._summary_prompt.format(
                min_lines=self._min_lines, max_lines=self._max_lines
            ),
            messages=[{"role": "user", "content": user_prompt}],
        )
        usage = _call_usage(self._model, response)
        text = _response_text(response)
        if not text:
            raise EnrichmentUnavailableError("Empty summary")
        return (text, usage)
