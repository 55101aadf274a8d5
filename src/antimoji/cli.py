"""CLI interface for antimoji.

Usage:
    # Report emojis (JSON on stdout); exit 1 above the threshold or on errors
    antimoji scan -r src/ --threshold 0

    # Remove them, keeping a timestamped backup of each changed file
    antimoji clean -r src/ --backup

    # See what clean would do
    antimoji clean -r docs/ --dry-run

Scan and clean resolve the allowlist the same way; pass the same
--config/--profile/--ignore-allowlist to both.
"""

from __future__ import annotations
import argparse
import json
import os
import signal
import sys
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from .allowlist import AllowlistOptions, consistency_warnings
from .config import (
    build_allowlist,
    build_filter_engine,
    build_modify_config,
    build_patterns,
    build_processing_config,
    load_config,
    load_from_yaml,
)
from .detector import describe_match
from .diagnostics import configure_logging
from .errors import ConfigurationError
from .filtering import discover_files
from .modifier import ModifyResult, Modifier
from .processor import ProcessResult, Processor, sort_by_input, summarize


def _load_profile(args: argparse.Namespace) -> dict[str, Any]:
    if args.config:
        return load_from_yaml(args.config, args.profile)
    return load_config({}, args.profile)


@contextmanager
def _cancel_on_sigint() -> Iterator[threading.Event]:
    """First Ctrl-C stops dispatching new files; in-flight files finish."""
    cancel = threading.Event()
    previous = signal.getsignal(signal.SIGINT)

    def handler(signum: int, frame: Any) -> None:
        cancel.set()
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, handler)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def _error_text(error: Exception | None) -> str | None:
    return None if error is None else str(error)


def _scan_record(r: ProcessResult, verbose: bool, patterns) -> dict[str, Any]:
    record: dict[str, Any] = {
        "file": r.file_path,
        "total": r.detection.total_count,
        "unique": r.detection.unique_count,
        "error": _error_text(r.error),
    }
    if r.detection.skipped_reason:
        record["skipped"] = r.detection.skipped_reason
    if r.detection.matches:
        record["matches"] = []
        for m in r.detection.matches:
            entry: dict[str, Any] = {
                "text": m.raw,
                "category": m.category,
                "line": m.line,
                "column": m.column,
            }
            if verbose:
                entry.update(describe_match(m, patterns))
            record["matches"].append(entry)
    return record


def _clean_record(r: ModifyResult) -> dict[str, Any]:
    record: dict[str, Any] = {
        "file": r.file_path,
        "modified": r.modified,
        "removed": r.emojis_removed,
        "error": _error_text(r.error),
    }
    if r.backup_path:
        record["backup"] = r.backup_path
    if r.skipped_reason:
        record["skipped"] = r.skipped_reason
    return record


def cmd_scan(args: argparse.Namespace) -> int:
    """Scan files and report matches."""
    diag = configure_logging(args.log_level)
    cfg = _load_profile(args)
    engine = build_filter_engine(cfg, include=args.include, exclude=args.exclude)
    paths = discover_files(args.paths, engine, recursive=args.recursive or cfg["recursive"])

    patterns = build_patterns(cfg)
    allowlist = build_allowlist(
        cfg, AllowlistOptions(ignore=args.ignore_allowlist, operation="scan"), diag,
    )
    processor = Processor(patterns, build_processing_config(cfg),
                          allowlist=allowlist, diagnostics=diag)
    workers = args.workers if args.workers is not None else cfg["max_workers"]
    with _cancel_on_sigint() as cancel:
        results = processor.process_files_concurrently(paths, workers, cancel)
    results = sort_by_input(results, paths)

    summary = summarize(results)
    threshold = args.threshold if args.threshold is not None else cfg["max_emoji_threshold"]
    output = {
        "files": [_scan_record(r, args.verbose, patterns) for r in results],
        "summary": {
            "files": summary.files,
            "with_matches": summary.files_with_matches,
            "total": summary.total_matches,
            "skipped": summary.skipped,
            "errors": summary.errors,
            "not_processed": summary.not_processed,
            "threshold": threshold,
        },
    }
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")

    if summary.errors or summary.not_processed:
        return 1
    if summary.total_matches > threshold:
        diag.error("emoji threshold exceeded", total=summary.total_matches, threshold=threshold)
        return 1
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Remove matches from files."""
    diag = configure_logging(args.log_level)
    cfg = _load_profile(args)
    engine = build_filter_engine(cfg, include=args.include, exclude=args.exclude)
    paths = discover_files(args.paths, engine, recursive=args.recursive or cfg["recursive"])

    modify_config = build_modify_config(
        cfg,
        replacement=args.replacement,
        create_backup=True if args.backup else None,
        dry_run=args.dry_run,
        respect_allowlist=not args.ignore_allowlist,
    )
    clean_options = AllowlistOptions(ignore=args.ignore_allowlist, operation="clean")
    # Compare with a plain `antimoji scan` over the same profile
    consistency_warnings(
        clean_options, AllowlistOptions(operation="scan"),
        cfg["emoji_allowlist"], cfg["emoji_allowlist"], diag,
    )
    allowlist = build_allowlist(cfg, clean_options, diag)
    modifier = Modifier(build_patterns(cfg), modify_config, allowlist, diagnostics=diag)
    workers = args.workers if args.workers is not None else cfg["max_workers"]
    with _cancel_on_sigint() as cancel:
        results = modifier.modify_files(paths, workers, cancel)
    results = sort_by_input(results, paths)

    output = {
        "files": [_clean_record(r) for r in results],
        "summary": {
            "files": len(results),
            "modified": sum(1 for r in results if r.modified),
            "removed": sum(r.emojis_removed for r in results),
            "errors": sum(1 for r in results if r.error is not None),
            "dry_run": modify_config.dry_run,
        },
    }
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 1 if output["summary"]["errors"] else 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("paths", nargs="+", help="Files or directories")
    p.add_argument("-r", "--recursive", action="store_true", help="Walk directories")
    p.add_argument("--include", default=None, help="Only process files matching this glob")
    p.add_argument("--exclude", default=None, help="Never process files matching this glob")
    p.add_argument("--config", default=os.environ.get("ANTIMOJI_CONFIG"), help="YAML config file")
    p.add_argument("--profile", default="default", help="Config profile name")
    p.add_argument("--workers", type=int, default=None, help="Worker threads (0 = per CPU)")
    p.add_argument("--ignore-allowlist", action="store_true", help="Treat every match as disallowed")
    p.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ERROR")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="antimoji",
        description="Find and remove emojis, emoticons and custom markers in text files",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Report matches (read-only)")
    _add_common(scan)
    scan.add_argument("--threshold", type=int, default=None, help="Maximum allowed matches")
    scan.add_argument("-v", "--verbose", action="store_true", help="Include code point details")

    clean = sub.add_parser("clean", help="Remove matches from files")
    _add_common(clean)
    clean.add_argument("--backup", action="store_true", help="Keep <file>.backup.<timestamp>")
    clean.add_argument("--dry-run", action="store_true", help="Report without writing")
    clean.add_argument("--replacement", default=None, help="Text to put in place of each match")

    args = parser.parse_args(argv)

    cmds = {
        "scan": cmd_scan,
        "clean": cmd_clean,
    }
    try:
        return cmds[args.command](args)
    except ConfigurationError as e:
        sys.stderr.write(f"antimoji: {e}\n")
        return 2


if __name__ == "__main__":
    sys.exit(main())
