#!/usr/bin/env python
"""CLI for the TopicFeed curated news pipeline."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator

from topicfeed.config import Credentials, create_from_config, get_default_config_path, load_config

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    topic: str
    config: Path
    hours: float | None = None
    query: str | None = None
    debug: bool = False
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def run(args: CLIArgs) -> None:
    """Build and print the feed for one topic.

    Args:
        args: Validated CLI arguments.
    """
    config = load_config(args.config)
    pipeline = create_from_config(
        config,
        Credentials.from_env(),
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )

    logger.info(f"Building feed for: {args.topic}")
    logger.info(f"Config: {args.config}")

    result = await pipeline.run(
        args.topic,
        window_hours=config.window.clamp(args.hours),
        extra_query=args.query,
    )

    if result.warning:
        logger.warning(f"Warning: {result.warning}")

    print(f"\n{result.topic.name}: {len(result.articles)} articles\n")
    for i, article in enumerate(result.articles, 1):
        logger.info(f"{i}. {article.title}")
        logger.info(f"   Source: {article.source_name}")
        logger.info(f"   URL: {article.url}")
        if article.published_at:
            logger.info(f"   Published: {article.published_at}")
        for line in article.summary.splitlines():
            logger.info(f"     {line}")
        logger.info(f"   Image: {'AI' if article.image_is_ai else article.image_url[:60]}")

    if args.debug:
        stats = result.stats
        logger.info("\n--- Debug ---")
        logger.info(f"Raw: {stats.raw_counts}")
        logger.info(f"Filtered: {stats.filtered_counts}")
        logger.info(f"Chosen: {stats.chosen}")
        logger.info(f"Fallbacks: {stats.fallbacks}")
        logger.info(f"NewsAPI requests: {result.usage.newsapi_requests}")
        logger.info(f"LLM calls: {len(result.usage.api_calls)}")
        logger.info(f"Input tokens: {result.usage.input_tokens:,}")
        logger.info(f"Output tokens: {result.usage.output_tokens:,}")
        if result.usage.image_generations:
            logger.info(f"Images generated: {result.usage.image_generations}")

    if result.log_path:
        logger.info(f"\nRun log written to: {result.log_path}")


def serve(config_path: Path, host: str, port: int) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from topicfeed.api import create_app
    from topicfeed.handler import create_handler

    handler = create_handler(load_config(config_path))
    uvicorn.run(create_app(handler), host=host, port=port)


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Curated, language-balanced topic news feed.")
    parser.add_argument(
        "topic",
        nargs="?",
        default="tecnología",
        help="Topic to build the feed for (default: tecnología)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument("--hours", type=float, default=None, help="Recency window in hours")
    parser.add_argument("--query", "-q", default=None, help="Extra search term")
    parser.add_argument("--debug", action="store_true", help="Print internal counters")
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable intermediate pipeline logging to JSON file",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host for --serve")
    parser.add_argument("--port", type=int, default=8000, help="Bind port for --serve")

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            topic=ns.topic,
            config=config_path,
            hours=ns.hours,
            query=ns.query,
            debug=ns.debug,
            log=ns.log,
            log_dir=ns.log_dir,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    if ns.serve:
        serve(args.config, ns.host, ns.port)
        return

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
