# =============================================================================
# enricher/cli/enrich.py - Enrichment CLI
# =============================================================================
#
# Typical usage:
#   python -m enricher.cli run                 # enrich up to batch_limit articles
#   python -m enricher.cli run --limit 5       # enrich at most 5
#   python -m enricher.cli run --json          # machine-readable run report
#   python -m enricher.cli stats               # enrichment progress
#   python -m enricher.cli check               # live credential check
#   python -m enricher.cli seed URL [URL ...]  # store source pages as new articles
#
# Log lines always go to stderr so stdout carries only the report.
#
# Exit codes:
#   0  the command completed (individual articles may still be skipped)
#   1  a provider check failed, a store could not be read, or no seed URL
#      produced an article
#   2  configuration error (missing credential, bad config file)
# =============================================================================

"""Command-line entry point for running and inspecting the enrichment pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import TextIO

from enricher.utils.errors import ConfigurationError, EnricherError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _configure_cli_logging(level: str, stream: TextIO | None = None) -> None:
    """Send all structured and stdlib logging to stderr."""
    import logging

    from enricher.utils.logging import configure_logging

    configure_logging(log_level=level, stream=stream or sys.stderr)
    # One line per request from the HTTP client is noise at the CLI.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _cmd_run(args: argparse.Namespace, out: TextIO) -> int:
    from enricher.config.loader import load_config
    from enricher.main import build_pipeline, close_components, settings
    from enricher.pipeline.report import format_run_report, run_report_json

    try:
        config = load_config(args.config or settings.config_path)
        components = build_pipeline(settings, config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        stats = await components["pipeline"].run(limit=args.limit)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        if exc.partial_stats is not None and exc.partial_stats.total:
            partial = exc.partial_stats
            print(run_report_json(partial) if args.json_output else format_run_report(partial), file=out)
        return EXIT_CONFIG_ERROR
    except EnricherError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        await close_components(components)

    print(run_report_json(stats) if args.json_output else format_run_report(stats), file=out)
    return EXIT_OK


async def _cmd_stats(args: argparse.Namespace, out: TextIO) -> int:
    from enricher.main import build_stores, settings
    from enricher.services.persistence import PersistenceAdapter

    adapter = PersistenceAdapter(*build_stores(settings))
    try:
        stats = await adapter.stats()
    except EnricherError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        await adapter.close()

    if args.json_output:
        print(json.dumps(stats.model_dump(by_alias=True), indent=2), file=out)
    else:
        print(f"Total articles: {stats.total}", file=out)
        print(f"Updated:        {stats.updated}", file=out)
        print(f"Not updated:    {stats.not_updated}", file=out)
        print(f"Progress:       {stats.update_percentage:.2f}%", file=out)
    return EXIT_OK


async def _cmd_check(args: argparse.Namespace, out: TextIO) -> int:
    from enricher.config.loader import load_config
    from enricher.main import build_llm_provider, build_search_provider, settings

    try:
        config = load_config(args.config or settings.config_path)
        search = build_search_provider(settings, config)
        llm = build_llm_provider(settings, config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    ok = True
    search_ok = search.is_available()
    print(f"search  {search.get_provider_name():<18} {'configured' if search_ok else 'MISSING KEY'}", file=out)
    ok &= search_ok

    if llm.is_available():
        llm_ok = await llm.validate_credentials()
        status = "ok" if llm_ok else "REJECTED"
    else:
        llm_ok, status = False, "MISSING KEY"
    print(f"llm     {llm.get_provider_name():<18} {status}", file=out)
    ok &= llm_ok

    for provider in (search, llm):
        close = getattr(provider, "close", None)
        if close is not None:
            await close()
    return EXIT_OK if ok else EXIT_FAILURE


async def _cmd_seed(args: argparse.Namespace, out: TextIO) -> int:
    from enricher.config.loader import load_config
    from enricher.main import build_seeder, close_components, settings
    from enricher.models.pipeline import SeedStatus

    try:
        config = load_config(args.config or settings.config_path)
        components = build_seeder(settings, config)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        outcomes = await components["seeder"].seed(args.urls)
    except EnricherError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        await close_components(components)

    if args.json_output:
        print(json.dumps([o.model_dump(mode="json") for o in outcomes], indent=2), file=out)
    else:
        for outcome in outcomes:
            detail = outcome.title or outcome.reason
            print(f"{outcome.status.value.lower():<9} {outcome.url}  {detail}", file=out)

    if all(o.status is SeedStatus.REJECTED for o in outcomes):
        return EXIT_FAILURE
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m enricher.cli",
        description="Enrich stored articles with web references and a generative rewrite.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING...)")
    parser.add_argument("--config", default=None, help="Path to the pipeline YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Enrich unprocessed articles")
    run.add_argument("--limit", type=int, default=None, help="Maximum number of articles to process")
    run.add_argument("--json", dest="json_output", action="store_true", help="Print the report as JSON")

    stats = sub.add_parser("stats", help="Show enrichment progress")
    stats.add_argument("--json", dest="json_output", action="store_true", help="Print as JSON")

    sub.add_parser("check", help="Verify provider credentials")

    seed = sub.add_parser("seed", help="Store source pages as new unprocessed articles")
    seed.add_argument("urls", nargs="+", metavar="URL", help="Article page to scrape")
    seed.add_argument("--json", dest="json_output", action="store_true", help="Print the outcomes as JSON")
    return parser


_COMMANDS = {
    "run": _cmd_run,
    "stats": _cmd_stats,
    "check": _cmd_check,
    "seed": _cmd_seed,
}


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    """Parse *argv*, run the command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    if getattr(args, "limit", None) is not None and args.limit < 1:
        print("Error: --limit must be a positive integer", file=sys.stderr)
        return EXIT_FAILURE

    from enricher.main import settings

    _configure_cli_logging(args.log_level or settings.log_level)
    return asyncio.run(_COMMANDS[args.command](args, out or sys.stdout))


if __name__ == "__main__":
    sys.exit(main())
