# src/main.py — v2
"""CLI entry point: agents, analyze, gaps, column, read commands.

Usage:
    papermind agents
    papermind analyze <papers.json> [--type TYPE] [--collection NAME]
    papermind gaps <papers.json> [--domain DOMAIN]
    papermind column <papers.json> --column COLUMN
    papermind read <papers.json> [--cards CARD ...]

``papers.json`` holds a JSON array of papers (camelCase or snake_case keys).
Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from papermind.version import __version__

logger = logging.getLogger(__name__)

_ANALYSIS_TYPES = ["comprehensive", "methodology", "limitations", "findings", "future_work"]
_COLUMN_TYPES = ["methodology", "limitations", "findings", "future_work", "significance"]
_CARD_IDS = ["overview", "methodology", "findings", "assessment", "impact", "personal"]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from pydantic import ValidationError

    from papermind.config.settings import ConfigurationError, Settings

    try:
        settings = Settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="papermind",
        description=f"papermind v{__version__}: AI agents for research paper collections",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- agents ---
    p_agents = subparsers.add_parser("agents", help="List registered agents")
    p_agents.set_defaults(func=_cmd_agents)

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze every paper of a file")
    p_analyze.add_argument("papers", type=Path, help="JSON file with an array of papers")
    p_analyze.add_argument(
        "-t", "--type", dest="analysis_type", default="comprehensive",
        choices=_ANALYSIS_TYPES,
        help="Analysis type (default: comprehensive)",
    )
    p_analyze.add_argument(
        "--collection", default=None,
        help="Collection the papers belong to, used to judge relevance",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- gaps ---
    p_gaps = subparsers.add_parser("gaps", help="Identify research gaps across papers")
    p_gaps.add_argument("papers", type=Path, help="JSON file with an array of papers")
    p_gaps.add_argument(
        "--domain", default="",
        help="Research domain (inferred from tags and journals if omitted)",
    )
    p_gaps.set_defaults(func=_cmd_gaps)

    # --- column ---
    p_column = subparsers.add_parser("column", help="Fill one AI column for every paper")
    p_column.add_argument("papers", type=Path, help="JSON file with an array of papers")
    p_column.add_argument(
        "--column", required=True, choices=_COLUMN_TYPES,
        help="Column to generate",
    )
    p_column.set_defaults(func=_cmd_column)

    # --- read ---
    p_read = subparsers.add_parser(
        "read", help="Answer analysis cards from each paper's full text"
    )
    p_read.add_argument("papers", type=Path, help="JSON file with an array of papers")
    p_read.add_argument(
        "--cards", nargs="+", default=None, choices=_CARD_IDS,
        help="Cards to answer (default: all)",
    )
    p_read.set_defaults(func=_cmd_read)

    return parser


async def _cmd_agents(args: argparse.Namespace, settings: Any) -> int:
    """Print registered agents."""
    from papermind.api.facade import AgentService

    service = AgentService(settings=settings)
    for entry in service.list_agents():
        print(f"{entry['name']}:{entry['version']}  {entry['description']}")
    return 0


async def _cmd_analyze(args: argparse.Namespace, settings: Any) -> int:
    """Batch paper analysis."""
    from papermind.api.facade import AgentService
    from papermind.papers.collection import ALL_PAPERS, analyze_collection_context

    papers = _load_papers(args.papers)
    if papers is None:
        return 1

    service = AgentService(settings=settings)
    collection = analyze_collection_context(args.collection or ALL_PAPERS, papers)
    results = await service.run_batch(
        "paper-analysis",
        papers,
        key=lambda p: p.id,
        build_input=lambda p: {
            "paper": p,
            "analysis_type": args.analysis_type,
            "focus_areas": p.tags[:3],
            "collection_context": collection,
        },
        on_progress=_log_progress,
    )
    _print_results(results)
    return 0 if all(r.success for r in results.values()) else 2


async def _cmd_gaps(args: argparse.Namespace, settings: Any) -> int:
    """Research gap analysis over the whole file."""
    from papermind.api.facade import AgentService, describe_failure

    papers = _load_papers(args.papers)
    if papers is None:
        return 1

    service = AgentService(settings=settings)
    result = await service.run("research-gap", {"papers": papers, "domain": args.domain})
    _print_results({"collection": result})
    if not result.success:
        logger.error("%s", describe_failure(result))
        return 2
    return 0


async def _cmd_column(args: argparse.Namespace, settings: Any) -> int:
    """One smart column value per paper."""
    from papermind.api.facade import AgentService

    papers = _load_papers(args.papers)
    if papers is None:
        return 1

    service = AgentService(settings=settings)
    results = await service.run_batch(
        "smart-column",
        papers,
        key=lambda p: p.id,
        build_input=lambda p: {"paper": p, "column_type": args.column},
        on_progress=_log_progress,
    )
    _print_results(results)
    return 0 if all(r.success for r in results.values()) else 2


async def _cmd_read(args: argparse.Namespace, settings: Any) -> int:
    """Full-text card analysis per paper."""
    from papermind.api.facade import AgentService

    papers = _load_papers(args.papers)
    if papers is None:
        return 1

    service = AgentService(settings=settings)
    results = await service.run_batch(
        "paper-analyzer",
        papers,
        key=lambda p: p.id,
        build_input=lambda p: {"paper": p, "card_ids": args.cards},
        on_progress=_log_progress,
    )
    _print_results(results)
    return 0 if all(r.success for r in results.values()) else 2


def _load_papers(path: Path) -> list[Any] | None:
    """Read and validate a JSON array of papers; None (logged) on failure."""
    from pydantic import TypeAdapter, ValidationError

    from papermind.papers.models import Paper

    if not path.is_file():
        logger.error("File not found: %s", path)
        return None
    try:
        return TypeAdapter(list[Paper]).validate_json(path.read_bytes())
    except ValidationError as exc:
        logger.error("Invalid papers file %s: %s", path, exc)
        return None


def _log_progress(completed: int, total: int) -> None:
    logger.info("Progress: %d/%d", completed, total)


def _print_results(results: dict[Any, Any]) -> None:
    """Print results as JSON, then a one-line summary on stderr."""
    from papermind.papers.content import format_processing_time
    from papermind.tracking.agent_tracker import summarize_results

    payload = {str(k): r.model_dump(mode="json") for k, r in results.items()}
    print(json.dumps(payload, indent=2, ensure_ascii=False))

    stats = summarize_results(results.values())
    print(
        f"{stats.successful_executions}/{stats.total_executions} succeeded, "
        f"avg {format_processing_time(round(stats.average_processing_time_ms))}, "
        f"{stats.total_tokens_used} tokens, {stats.total_retries} retries",
        file=sys.stderr,
    )


def _setup_logging(settings: Any, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from papermind.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
