"""
Duplicate grouping by digest.

Builds the digest -> paths inverse index and keeps groups of two or
more. Members are in path order; groups are ordered by first member.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Mapping

from treehash.models import DuplicateGroup


def group(digest_map: Mapping[str, bytes]) -> list[DuplicateGroup]:
    """
    Group paths sharing a digest.

    Args:
        digest_map: path -> digest

    Returns:
        Duplicate groups (2+ members each); unique files are dropped
    """
    index: dict[bytes, list[str]] = defaultdict(list)
    for path in sorted(digest_map):
        index[digest_map[path]].append(path)

    groups = [
        DuplicateGroup(digest=digest, paths=paths)
        for digest, paths in index.items()
        if len(paths) > 1
    ]
    return sorted(groups, key=lambda g: g.paths[0])


def duplicate_count(groups: list[DuplicateGroup]) -> int:
    """Files that could be removed while keeping one copy per group."""
    return sum(g.count - 1 for g in groups)
