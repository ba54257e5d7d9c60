"""Command line interface for feedscore."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from feedscore.config import (
    FeedscoreConfig,
    create_feed_reader,
    create_from_config,
    get_default_config_path,
    load_config,
)
from feedscore.criteria import load_rubric
from feedscore.csv_io import read_article_links, read_feed_sources, read_scraped_articles
from feedscore.export import ExportFormat, file_timestamp
from feedscore.feeds import process_feeds
from feedscore.ledger import CostLedger
from feedscore.pipeline import PipelineResult
from feedscore.server import serve

logger = logging.getLogger(__name__)

RUBRIC_HELP = "Rubric file (defaults to CRITERIA_FILE_PATH, then promptCriteria.txt)"


class CLIArgs(BaseModel):
    """Validated CLI arguments shared by the pipeline commands."""

    input_csv: Path
    criteria: Path | None = None
    config: Path | None = None
    output_dir: Path | None = None
    skip_scraping: bool = False
    scraped_data: Path | None = None
    export_format: ExportFormat | None = None
    min_score: int | None = None
    include_content: bool | None = None
    log: bool = False
    log_dir: str | None = None

    @field_validator("input_csv")
    @classmethod
    def input_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Input file not found: {v}")
        return v

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path | None) -> Path | None:
        if v is not None and not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("min_score")
    @classmethod
    def score_in_range(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= 100:
            raise ValueError(f"Minimum score must be between 0 and 100, got {v}")
        return v


def log_cost_summary(ledger: CostLedger) -> None:
    state = ledger.state
    logger.info("\n--- Claude API usage this month ---")
    logger.info(f"Total cost: ${state.total_cost_usd:.4f}")
    logger.info(f"Input tokens: {state.input_tokens:,}")
    logger.info(f"Output tokens: {state.output_tokens:,}")
    logger.info(f"Requests: {state.request_count}")


async def run_pipeline(args: CLIArgs, config: FeedscoreConfig, *, from_feeds: bool) -> None:
    """Run the pipeline for the ``run`` and ``analyze`` commands.

    Args:
        args: Validated CLI arguments.
        config: Loaded configuration.
        from_feeds: Whether ``input_csv`` is a feed list (otherwise a link list).
    """
    pipeline, run_logger, ledger = create_from_config(
        config,
        output_dir_override=args.output_dir,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir,
    )
    rubric = load_rubric(args.criteria, configured_path=config.rubric_path)
    overrides = {
        "export_format": args.export_format,
        "include_full_content": args.include_content,
        "min_relevance_score": args.min_score,
    }

    result: PipelineResult
    if from_feeds:
        sources = read_feed_sources(args.input_csv)
        result = await pipeline.run(rubric, sources=sources, **overrides)
    elif args.skip_scraping and args.scraped_data and args.scraped_data.exists():
        logger.info(f"Using existing scraped data from {args.scraped_data}")
        scraped = read_scraped_articles(args.scraped_data)
        result = await pipeline.run(rubric, scraped=scraped, **overrides)
    else:
        if args.skip_scraping:
            logger.warning(f"Could not access scraped data {args.scraped_data}, scraping instead")
        links = read_article_links(args.input_csv)
        result = await pipeline.run(rubric, links=links, **overrides)

    logger.info(f"\nAnalyzed {len(result.articles)} articles")
    for i, article in enumerate(result.articles[:10], 1):
        logger.info(f"{i}. [{article.relevance_score}] {article.title}")
    logger.info(f"\nAnalysis complete! Results saved to: {result.report_path}")

    log_cost_summary(ledger)
    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Score RSS feed articles against a relevance rubric with Claude."
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (environment variables override it)",
    )
    common.add_argument(
        "--output-dir", type=Path, default=None, help="Directory for output files"
    )

    pipeline_opts = argparse.ArgumentParser(add_help=False)
    pipeline_opts.add_argument(
        "--format",
        dest="export_format",
        choices=[f.value for f in ExportFormat],
        default=None,
        help="Report format (default from config: html)",
    )
    pipeline_opts.add_argument(
        "--min-score",
        type=int,
        default=None,
        help="Minimum relevance score (0-100) for including articles in the report",
    )
    pipeline_opts.add_argument(
        "--include-content",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include full article content in the report",
    )
    pipeline_opts.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable intermediate pipeline logging to JSON file",
    )
    pipeline_opts.add_argument(
        "--log-dir", type=str, default=None, help="Directory for log files (default: logs/)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser(
        "run",
        parents=[common, pipeline_opts],
        help="Ingest feeds, then fetch, analyze and export their articles",
    )
    run_cmd.add_argument("input_csv", type=Path, help="CSV of feeds (Feed URL, Alert Name)")
    run_cmd.add_argument("criteria", nargs="?", type=Path, default=None, help=RUBRIC_HELP)

    analyze_cmd = sub.add_parser(
        "analyze",
        parents=[common, pipeline_opts],
        help="Fetch, analyze and export articles from a link CSV",
    )
    analyze_cmd.add_argument("input_csv", type=Path, help="CSV of links (Alert Name, Title, Link)")
    analyze_cmd.add_argument("criteria", nargs="?", type=Path, default=None, help=RUBRIC_HELP)
    analyze_cmd.add_argument(
        "--skip-scraping",
        action="store_true",
        default=False,
        help="Reuse previously scraped data instead of fetching",
    )
    analyze_cmd.add_argument(
        "--scraped-data", type=Path, default=None, help="Scraped-articles CSV to reuse"
    )

    serve_cmd = sub.add_parser("serve", parents=[common], help="Serve reports over HTTP")
    serve_cmd.add_argument("--port", type=int, default=None, help="Port (default: 3000)")
    serve_cmd.add_argument("--host", type=str, default=None, help="Bind address")

    feeds_cmd = sub.add_parser(
        "process-feeds", parents=[common], help="Ingest feeds into a link CSV"
    )
    feeds_cmd.add_argument("input_csv", type=Path, help="CSV of feeds (Feed URL, Alert Name)")
    feeds_cmd.add_argument(
        "--output", type=Path, default=None, help="Link CSV to write (default: input dir)"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    load_dotenv()

    try:
        config_path = ns.config
        if config_path is None and get_default_config_path().exists():
            config_path = get_default_config_path()
        config = load_config(config_path)
    except (ValidationError, ValueError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    logging.getLogger().setLevel(config.logging.level.upper())
    output_dir: Path = ns.output_dir or config.output_dir

    try:
        if ns.command == "serve":
            serve(
                output_dir,
                host=ns.host or config.server.host,
                port=ns.port or config.server.port,
            )
        elif ns.command == "process-feeds":
            if not ns.input_csv.exists():
                raise ValueError(f"Input file not found: {ns.input_csv}")
            output = ns.output or (
                config.input_dir / f"processed-feeds-{file_timestamp()}.csv"
            )
            path = asyncio.run(
                process_feeds(ns.input_csv, output, create_feed_reader(config.feeds))
            )
            logger.info(f"Article links written to {path}")
        else:
            args = CLIArgs(
                input_csv=ns.input_csv,
                criteria=ns.criteria,
                config=ns.config,
                output_dir=ns.output_dir,
                skip_scraping=getattr(ns, "skip_scraping", False),
                scraped_data=getattr(ns, "scraped_data", None),
                export_format=ns.export_format,
                min_score=ns.min_score,
                include_content=ns.include_content,
                log=ns.log,
                log_dir=ns.log_dir,
            )
            asyncio.run(run_pipeline(args, config, from_feeds=ns.command == "run"))
    except KeyboardInterrupt:
        sys.exit(130)
    except (ValidationError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
