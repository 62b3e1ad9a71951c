"""
Deterministic aggregation of per-file digests.

The fold always walks the digest map in path order, never in arrival
order, so the aggregate does not depend on how the parallel phase was
scheduled. An empty map yields the primitive's digest of empty input.
"""

from __future__ import annotations

from typing import Mapping

from treehash.hasher import new_hash
from treehash.models import DEFAULT_ALGORITHM


def aggregate(digest_map: Mapping[str, bytes], algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """
    Fold every digest, in path order, into one digest.

    Args:
        digest_map: path -> digest
        algorithm: hashlib algorithm name for the fold

    Returns:
        Aggregate digest bytes
    """
    folded = new_hash(algorithm)
    for path in sorted(digest_map):
        folded.update(digest_map[path])
    return folded.digest()
