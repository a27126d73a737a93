"""Command-line entry point for inbox-threads."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from inbox_threads.core import AppSettings, configure_logging, load_app_settings
from inbox_threads.core.datetime_utils import serialize_datetime
from inbox_threads.ingestion import parse_results_payload, record_results, register_query
from inbox_threads.intelligence import (
    ThreadSummaryService,
    build_thread_report,
    list_threads,
)
from inbox_threads.storage import InMemoryThreadStore


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Group email search results into threads and measure replies"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "replay"],
        help="Operation to execute.",
    )
    parser.add_argument(
        "batch",
        nargs="?",
        type=Path,
        default=None,
        help="Results payload JSON file for the replay command.",
    )
    parser.add_argument(
        "--keyword",
        default="replay",
        help="Keyword recorded on the replayed query (default: replay).",
    )
    parser.add_argument(
        "--summarize",
        action="store_true",
        help="Print a local summary under each thread.",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return an exit code."""
    command = args.command
    if command == "info":
        print("inbox-threads is ready. Replay a results payload to inspect threads.")
        print(f"Staff domain: {settings.staff.domain}")
        print(f"Snippet limit: {settings.ingestion.snippet_max_chars}")
        return 0
    if command == "replay":
        if args.batch is None:
            print("replay requires a results payload file.", file=sys.stderr)
            return 2
        return _run_replay(
            settings, args.batch, keyword=args.keyword, summarize=args.summarize
        )
    return 2


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    return execute(args, settings)


def _run_replay(
    settings: AppSettings, batch_path: Path, *, keyword: str, summarize: bool
) -> int:
    """Apply a stored results payload to a fresh store and print its threads."""
    try:
        batch = parse_results_payload(batch_path.read_text(encoding="utf-8"))
    except (OSError, ValueError, ValidationError) as exc:
        print(f"Replay failed: {exc}", file=sys.stderr)
        return 1

    store = InMemoryThreadStore()
    try:
        register_query(store, keyword, query_id=batch.query_id)
    except ValueError as exc:
        print(f"Replay failed: {exc}", file=sys.stderr)
        return 1
    outcome = record_results(store, batch, settings=settings)
    if not outcome.ok:
        print(f"Replay failed: {outcome.error}", file=sys.stderr)
        return 1

    threads = list_threads(store, batch.query_id)
    print(
        f"Received {len(batch.emails)} message(s); "
        f"stored {len(outcome.created_email_ids)} in {len(threads)} thread(s)."
    )
    summaries = ThreadSummaryService(settings=settings.summary)
    for thread in threads:
        report = build_thread_report(store, thread.id)
        if report is None:
            continue
        average = report.metrics.average_seconds
        average_text = "-" if average is None else f"{average}s"
        print(
            f"{thread.id}  {len(report.emails):>3} msg  avg reply {average_text:>8}  "
            f"last {serialize_datetime(thread.last_at)}  {thread.subject}"
        )
        if summarize:
            summary = summaries.summarize_thread(store, thread.id)
            if summary is not None:
                for line in summary.summary.splitlines():
                    print(f"    {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
