"""Pipeline module for building curated topic feeds."""

from topicfeed.pipeline.feed import FeedPipeline, build_query, search_from_date

__all__ = [
    "FeedPipeline",
    "build_query",
    "search_from_date",
]
