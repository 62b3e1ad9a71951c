"""
Output formatting for pipeline results.

- format_tree / format_duplicates: plain text for the console
- to_json: one JSON document
- ReportGenerator: CSV duplicate report with header statistics
"""

from __future__ import annotations

import csv
import io
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

import structlog

from treehash.grouper import duplicate_count
from treehash.models import DuplicateGroup, PipelineResult

logger = structlog.get_logger(__name__)


def display_path(path: str) -> str:
    """
    Printable form of a file system path.

    Names that are not valid UTF-8 come back from os.walk with surrogate
    escapes; their raw bytes are shown as ``\\xNN`` instead.
    """
    return os.fsencode(path).decode("utf-8", "backslashreplace")


def format_tree(result: PipelineResult) -> str:
    """One ``<path>  <hex>`` line per file, path order."""
    return "\n".join(
        f"{display_path(path)}  {digest}" for path, digest in result.hex_map().items()
    )


def format_duplicates(groups: list[DuplicateGroup]) -> str:
    """Digest line followed by indented members, per group."""
    lines = []
    for group in groups:
        lines.append(f"{group.hex} ({group.count} files)")
        lines.extend(f"  {display_path(path)}" for path in group.paths)
    return "\n".join(lines)


def to_json(
    result: PipelineResult,
    include_files: bool = False,
    groups: Optional[list[DuplicateGroup]] = None,
) -> str:
    """Serialise the result; digests rendered as lowercase hex."""
    document: dict = {
        "root": display_path(str(result.root)),
        "algorithm": result.algorithm,
        "aggregate": result.aggregate_hex,
        "file_count": result.file_count,
        "complete": result.complete,
    }
    if include_files:
        document["files"] = {display_path(p): d for p, d in result.hex_map().items()}
    if groups is not None:
        document["duplicates"] = {g.hex: [display_path(p) for p in g.paths] for g in groups}
        document["duplicate_count"] = len(groups)
    if result.failures:
        document["failures"] = {display_path(p): e for p, e in sorted(result.failures.items())}
    if result.skipped:
        document["skipped"] = {display_path(p): e for p, e in sorted(result.skipped.items())}
    return json.dumps(document, indent=2, ensure_ascii=False)


class ReportGenerator:
    """
    CSV duplicate report.

    Header statistics are written as ``#`` comment lines, then one row
    per file of each duplicate group. The first member of a group is
    the one kept when computing reclaimable space.
    """

    CSV_COLUMNS = [
        "group_id",
        "digest",
        "file_path",
        "size_bytes",
        "role",
    ]

    def generate_csv(
        self,
        result: PipelineResult,
        groups: list[DuplicateGroup],
        output_path: Path,
    ) -> Path:
        """
        Write the CSV report to ``output_path``.

        Returns:
            Path to generated CSV file
        """
        # Content is rendered before the file is opened.
        content = self.generate_csv_string(result, groups)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            f.write(content)

        logger.info(
            "treehash_report_generated",
            output_path=str(output_path),
            groups=len(groups),
        )
        return output_path

    def generate_csv_string(self, result: PipelineResult, groups: list[DuplicateGroup]) -> str:
        """CSV report content as a string."""
        output = io.StringIO()
        self._write(output, result, groups)
        return output.getvalue()

    def _write(self, f: TextIO, result: PipelineResult, groups: list[DuplicateGroup]) -> None:
        sizes = {path: _file_size(path) for g in groups for path in g.paths}
        reclaimable = sum(sizes[path] or 0 for g in groups for path in g.paths[1:])

        f.write(f"# Report Date: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write(f"# Root: {display_path(str(result.root))}\n")
        f.write(f"# Algorithm: {result.algorithm}\n")
        f.write(f"# Aggregate: {result.aggregate_hex}\n")
        f.write(f"# Total Files Hashed: {result.file_count:,}\n")
        f.write(f"# Duplicate Groups: {len(groups):,}\n")
        f.write(f"# Total Duplicates: {duplicate_count(groups):,}\n")
        f.write(f"# Space Reclaimable: {reclaimable:,} bytes\n")

        writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
        writer.writeheader()

        for group_id, group in enumerate(groups, start=1):
            for index, path in enumerate(group.paths):
                size = sizes[path]
                writer.writerow(
                    {
                        "group_id": group_id,
                        "digest": group.hex,
                        "file_path": display_path(path),
                        "size_bytes": size if size is not None else "-",
                        "role": "keep" if index == 0 else "duplicate",
                    }
                )


def _file_size(path: str) -> Optional[int]:
    # Size is informational; the file may have changed since hashing.
    try:
        return os.stat(path).st_size
    except OSError:
        return None
