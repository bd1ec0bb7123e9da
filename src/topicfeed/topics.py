"""Map free-text topic strings to canonical topic configurations.

Known topics are declared once in ``TOPIC_RULES``. Each rule carries one or
more detectors tested against the normalised topic string (lowercase, no
accents); rules are tried in order and the first match wins. Anything that
matches no rule becomes a generic topic built from the raw string itself.
"""

import re
from dataclasses import dataclass

from topicfeed.data import TopicConfig
from topicfeed.text import normalize_topic

DEFAULT_TOPIC = "tecnología"


def _ci(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class TopicRule:
    """One entry of the topic table."""

    detectors: tuple[re.Pattern[str], ...]
    config: TopicConfig

    def matches(self, normalized: str) -> bool:
        return any(d.search(normalized) for d in self.detectors)


TECHNOLOGY = TopicConfig(
    key="technology",
    name="Tecnología",
    search_query=(
        '"tecnologia" OR tecnologia OR smartphone OR "telefono inteligente" OR Android '
        "OR iPhone OR Apple OR Google OR Microsoft OR software OR hardware OR gadget "
        "OR chip OR semiconductor OR ciberseguridad OR internet"
    ),
    include_patterns=(
        _ci(r"tecnolog"),
        _ci(r"smartphone"),
        _ci(r"m[óo]vil|tel[ée]fono inteligente"),
        _ci(r"android"),
        _ci(r"iphone|\bios\b|apple"),
        _ci(r"microsoft|windows"),
        _ci(r"google|pixel"),
        _ci(r"software|hardware|gadget|chip|semiconductor|ciberseguridad|internet|router|wifi"),
    ),
    exclude_patterns=(_ci(r"f[úu]tbol|tenis|baloncesto|moda|celebridad|cocina|viajes"),),
)

ASTROPHOTOGRAPHY = TopicConfig(
    key="astrophotography",
    name="Astrofotografía",
    search_query=(
        'astrofotografia OR astrophotography OR "fotografia astronomica" OR telescopio '
        'OR "via lactea" OR "cielo profundo" OR nebulosa OR cometa'
    ),
    include_patterns=(
        _ci(
            r"astrofotograf|astrophotograph|fotograf[íi]a astron[óo]m|v[íi]a l[áa]ctea"
            r"|nebulosa|cometa|telescopi|cielo profundo"
        ),
    ),
)

ARTIFICIAL_INTELLIGENCE = TopicConfig(
    key="ai",
    name="Inteligencia Artificial",
    search_query=(
        '"inteligencia artificial" OR IA OR "machine learning" OR "aprendizaje automatico" '
        'OR "deep learning" OR OpenAI OR ChatGPT OR LLM OR "modelo generativo" OR transformer'
    ),
    include_patterns=(
        _ci(
            r"inteligencia artificial|\bIA\b|machine learning|aprendizaje autom[áa]tico"
            r"|deep learning|openai|chatgpt|modelo generativo|\bLLM\b|transformer"
        ),
    ),
)

TOPIC_RULES: tuple[TopicRule, ...] = (
    TopicRule(
        detectors=(re.compile(r"\bastro"),),
        config=ASTROPHOTOGRAPHY,
    ),
    TopicRule(
        detectors=(
            re.compile(r"(^|\s)(ai|ia)(\s|$)"),
            re.compile(r"inteligencia artificial|aprendizaje|machine"),
        ),
        config=ARTIFICIAL_INTELLIGENCE,
    ),
    TopicRule(
        detectors=(re.compile(r"tecno|techno|tech\b"),),
        config=TECHNOLOGY,
    ),
)


def generic_topic(raw: str) -> TopicConfig:
    """Topic whose query and only include pattern are the raw string."""
    text = raw.strip()
    return TopicConfig(
        key="generic",
        name=text,
        search_query=text,
        include_patterns=(_ci(re.escape(text)),),
    )


def resolve_topic(raw: str | None, rules: tuple[TopicRule, ...] = TOPIC_RULES) -> TopicConfig:
    """Resolve a raw topic string to a ``TopicConfig``.

    Never fails: an empty string resolves to the default topic and an unknown
    string to ``generic_topic``.

    Args:
        raw: Topic as typed by the caller.
        rules: Ordered topic table.

    Returns:
        The resolved topic configuration.
    """
    if raw is None or not raw.strip():
        raw = DEFAULT_TOPIC

    normalized = normalize_topic(raw)
    for rule in rules:
        if rule.matches(normalized):
            return rule.config
    return generic_topic(raw)
