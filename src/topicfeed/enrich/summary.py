"""Line-range fitting for article summaries."""

import re

from topicfeed.data import CandidateArticle
from topicfeed.recency import parse_published_at
from topicfeed.text import format_to_lines, normalize_topic

# NewsAPI truncates ``content`` with a "[+1234 chars]" suffix.
_TRUNCATION_SUFFIX = re.compile(r"\s*\[\+\d+ chars\]\s*$")
_MARKER_NOISE = re.compile(r"[\s\"'“”«».:()\-–—]+")
_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")

GENERIC_PADDING = (
    "Consulta el enlace para leer la noticia completa.",
    "Más detalles disponibles en la fuente original.",
    "Noticia seleccionada por su relevancia para el tema.",
    "Resumen generado automáticamente a partir del extracto publicado.",
    "La información puede ampliarse en las próximas horas.",
)


def _sentence(text: str) -> str:
    text = text.strip()
    return text if text.endswith((".", "!", "?", "…")) else f"{text}."


def _is_marker(line: str, marker: str) -> bool:
    return _MARKER_NOISE.sub("", normalize_topic(line)) == _MARKER_NOISE.sub(
        "", normalize_topic(marker)
    )


def padding_lines(article: CandidateArticle) -> list[str]:
    """Filler lines derived from article metadata, then generic ones."""
    lines: list[str] = []
    if article.title:
        lines.append(_sentence(article.title))
    if article.source_name:
        lines.append(f"Fuente: {article.source_name}.")
    published = parse_published_at(article.published_at)
    if published is not None:
        lines.append(f"Publicado: {published.date().isoformat()}.")
    lines.extend(GENERIC_PADDING)
    return lines


def fit_lines(
    lines: list[str],
    article: CandidateArticle,
    *,
    min_lines: int = 5,
    max_lines: int = 10,
    marker: str | None = None,
) -> str:
    """Fit summary lines into ``[min_lines, max_lines]``.

    Any marker line already present is removed and, when ``marker`` is set,
    appended once as the final line (counted in the range). Short summaries
    are padded from ``padding_lines``.

    Returns:
        Newline-joined summary.
    """
    reserved = 1 if marker else 0
    body = [line.strip() for line in lines if line.strip()]
    if marker:
        body = [line for line in body if not _is_marker(line, marker)]
    body = body[: max(0, max_lines - reserved)]

    for filler in padding_lines(article):
        if len(body) >= min_lines - reserved:
            break
        if filler not in body:
            body.append(filler)

    if marker:
        body.append(marker)
    return "\n".join(body)


def local_summary(
    article: CandidateArticle,
    *,
    min_lines: int = 5,
    max_lines: int = 10,
    marker: str | None = None,
) -> str:
    """Summary built from the article's own description or body text."""
    text = article.description or _TRUNCATION_SUFFIX.sub("", article.raw_body or "")
    reserved = 1 if marker else 0
    lines = format_to_lines(text, max(1, min_lines - reserved), max(1, max_lines - reserved))
    return fit_lines(lines, article, min_lines=min_lines, max_lines=max_lines, marker=marker)


def model_lines(text: str, min_lines: int = 5, max_lines: int = 10) -> list[str]:
    """Split model output into lines, dropping bullets and numbering.

    Output that is not already broken into enough lines is re-segmented
    into sentences.
    """
    lines = [_BULLET.sub("", line).strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) < min_lines:
        resegmented = format_to_lines(" ".join(lines), min_lines, max_lines)
        if len(resegmented) > len(lines):
            lines = resegmented
    return lines
