"""Per-article enrichment: display title, summary and image."""

from topicfeed.enrich.base import ImageGenerator, Summarizer, TitleTranslator
from topicfeed.enrich.claude import ClaudeTranslator
from topicfeed.enrich.openai_images import OpenAIImageGenerator
from topicfeed.enrich.pipeline import EnrichmentBatch, EnrichmentPipeline
from topicfeed.enrich.placeholder import placeholder_svg
from topicfeed.enrich.summary import fit_lines, local_summary, model_lines

__all__ = [
    "ClaudeTranslator",
    "EnrichmentBatch",
    "EnrichmentPipeline",
    "ImageGenerator",
    "OpenAIImageGenerator",
    "Summarizer",
    "TitleTranslator",
    "fit_lines",
    "local_summary",
    "model_lines",
    "placeholder_svg",
]
