"""
treehash command line.

Usage:
    treehash --path DIR                       # aggregate digest only
    treehash --path DIR --print-tree          # every file digest
    treehash --path DIR --duplicates --count  # duplicate groups
    treehash --path DIR --expect <hex>        # verify a recorded digest
    treehash --path DIR --format json --csv report.csv

Exit codes: 0 success, 1 error, 2 aggregate does not match --expect.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import ValidationError

from treehash.config.exceptions import TreeHashError
from treehash.config.logging import configure_from_env, configure_logging
from treehash.config.settings import load_config, merge_overrides
from treehash.models import HashConfig
from treehash.pipeline import TreeHashPipeline
from treehash.report import (
    ReportGenerator,
    display_path,
    format_duplicates,
    format_tree,
    to_json,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISMATCH = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treehash",
        description="Deterministic content digest of a file or directory tree, with duplicate detection.",
    )
    parser.add_argument("-p", "--path", type=Path, required=True, help="File or directory to hash")
    parser.add_argument("--print-tree", action="store_true", help="Print every file digest")
    parser.add_argument("-d", "--duplicates", action="store_true", help="Print duplicate groups")
    parser.add_argument("-c", "--count", action="store_true", help="Print number of duplicate groups")
    parser.add_argument("-w", "--workers", type=int, default=None, help="Worker pool size")
    parser.add_argument("--algorithm", default=None, help="hashlib algorithm (default blake2b)")
    parser.add_argument("--chunk-size", type=int, default=None, help="Read size in bytes")
    parser.add_argument(
        "--best-effort",
        action="store_true",
        help="Skip unreadable files instead of failing (aggregate covers hashed files only)",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    parser.add_argument("--csv", type=Path, default=None, help="Write duplicate report to CSV")
    parser.add_argument("--expect", default=None, help="Expected aggregate digest (hex)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    return parser


def _resolve_config(args: argparse.Namespace) -> HashConfig:
    config = load_config(args.config) if args.config else HashConfig()
    return merge_overrides(
        config,
        algorithm=args.algorithm,
        chunk_size=args.chunk_size,
        max_workers=args.workers,
        strict=False if args.best_effort else None,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.log_level:
            configure_logging(level=args.log_level, json_format=False)
        else:
            configure_from_env()
        config = _resolve_config(args)
    except (ValidationError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"treehash: invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        result = TreeHashPipeline(config=config).run(args.path)
    except TreeHashError as e:
        print(f"treehash: {e}", file=sys.stderr)
        return EXIT_ERROR

    groups = result.duplicate_groups() if (args.duplicates or args.count or args.csv) else None

    if args.csv:
        try:
            ReportGenerator().generate_csv(result, groups, args.csv)
        except (OSError, UnicodeError) as e:
            reason = getattr(e, "strerror", None) or e
            print(f"treehash: cannot write report {args.csv}: {reason}", file=sys.stderr)
            return EXIT_ERROR

    if args.format == "json":
        print(to_json(result, include_files=args.print_tree, groups=groups))
    else:
        if args.print_tree and result.file_count:
            print(format_tree(result))
        if args.duplicates and groups:
            print(format_duplicates(groups))
        if args.count:
            print(len(groups))
        for path, error in sorted({**result.skipped, **result.failures}.items()):
            print(f"treehash: skipped {display_path(path)}: {error}", file=sys.stderr)
        print(result.aggregate_hex)

    if args.expect is not None and not result.verify(args.expect):
        print(f"treehash: aggregate mismatch (expected {args.expect.strip().lower()})", file=sys.stderr)
        return EXIT_MISMATCH

    return EXIT_OK
