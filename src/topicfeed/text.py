"""Text normalisation and sentence segmentation helpers."""

import re
import unicodedata

# Sentence end followed by whitespace and an (optionally quoted) capital letter.
_SENTENCE_BREAK = re.compile(r"(?<=[.!?…])\s+(?=[\"'“«¿¡(]?[A-ZÁÉÍÓÚÜÑÀÈÌÒÙÇ0-9])")
_CLAUSE_BREAK = re.compile(r"[,;]\s+")
_WHITESPACE = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Remove combining marks, e.g. ``"tecnología"`` -> ``"tecnologia"``."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_topic(text: str) -> str:
    """Lowercase, accent-free, trimmed form of a topic string."""
    return strip_diacritics(text).lower().strip()


def split_sentences(text: str) -> list[str]:
    """Split ``text`` into sentences.

    A break is a run of whitespace preceded by ``.``, ``!``, ``?`` or ``…`` and
    followed by a capital letter (or digit). Line breaks are treated as spaces.
    """
    flat = _WHITESPACE.sub(" ", text).strip()
    if not flat:
        return []
    return [part.strip() for part in _SENTENCE_BREAK.split(flat) if part.strip()]


def split_clauses(sentence: str) -> list[str]:
    """Split a sentence on commas and semicolons."""
    return [part.strip() for part in _CLAUSE_BREAK.split(sentence) if part.strip()]


def format_to_lines(text: str | None, min_lines: int = 5, max_lines: int = 10) -> list[str]:
    """Best-effort segmentation of ``text`` into one sentence per line.

    At most ``max_lines`` lines are returned. When there are fewer sentences
    than ``min_lines`` the sentences are broken further at commas and
    semicolons. The result can still be shorter than ``min_lines`` when the
    text simply does not contain enough material.

    Args:
        text: Source text (description, body, or model output).
        min_lines: Preferred minimum number of lines.
        max_lines: Hard maximum number of lines.

    Returns:
        List of non-empty lines.
    """
    if not text:
        return []

    lines = split_sentences(text)
    if len(lines) < min_lines:
        clauses = [clause for line in lines for clause in split_clauses(line)]
        if len(clauses) > len(lines):
            lines = clauses
    return lines[:max_lines]
