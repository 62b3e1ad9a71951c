"""
Parallel per-file hashing.

Runs StreamingHasher over a path set on an explicitly sized thread pool
and merges the results into one path -> digest mapping. Each task owns
its file handle and hash instance; results are only combined on the
calling thread after a task finishes, with a key-disjoint merge.

Two failure policies:
- compute(): strict, raises on the first per-file error, no partial map
- compute_partial(): best-effort, returns successes plus failed paths
"""

from __future__ import annotations

import os
from concurrent.futures import Executor, Future, ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

import structlog

from treehash.config.exceptions import HashIOError
from treehash.hasher import StreamingHasher
from treehash.models import PartialDigestMap

logger = structlog.get_logger(__name__)


def default_worker_count() -> int:
    """CPUs usable by this process (at least 1)."""
    if hasattr(os, "sched_getaffinity"):
        return max(1, len(os.sched_getaffinity(0)))
    return os.cpu_count() or 1


def create_worker_pool(max_workers: Optional[int] = None) -> ThreadPoolExecutor:
    """
    Build the hashing pool.

    Args:
        max_workers: Pool size (None = CPUs available)

    Returns:
        ThreadPoolExecutor owned by the caller (shut it down when done)
    """
    workers = max_workers or default_worker_count()
    if workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {workers}")
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="treehash")


class ParallelDigestMap:
    """Hash a set of files concurrently."""

    def __init__(self, hasher: StreamingHasher, executor: Executor):
        """
        Initialize digest map builder.

        Args:
            hasher: Per-file hasher (stateless, shared by all tasks)
            executor: Worker pool, not shut down here
        """
        self.hasher = hasher
        self.executor = executor

    def _submit(self, paths: Iterable[str]) -> dict[Future, str]:
        # Submission order does not matter for the result.
        return {self.executor.submit(self.hasher.hash, path): path for path in sorted(paths)}

    def compute(self, paths: Iterable[str]) -> dict[str, bytes]:
        """
        Hash every path; all or nothing.

        Args:
            paths: Regular-file paths

        Returns:
            path -> digest for every input path

        Raises:
            HashIOError: First per-file failure observed
        """
        futures = self._submit(paths)
        digests: dict[str, bytes] = {}
        first_error: Optional[HashIOError] = None

        for future in as_completed(futures):
            path = futures[future]
            if future.cancelled():
                continue
            try:
                digest = future.result()
            except HashIOError as e:
                if first_error is None:
                    first_error = e
                    cancelled = sum(1 for pending in futures if pending.cancel())
                    logger.warning(
                        "treehash_hash_failed",
                        path=path,
                        error=e.message,
                        cancelled_tasks=cancelled,
                    )
                continue

            if first_error is None:
                digests[path] = digest
                logger.debug("treehash_file_hashed", path=path)

        if first_error is not None:
            raise first_error

        return digests

    def compute_partial(self, paths: Iterable[str]) -> PartialDigestMap:
        """
        Hash every path; keep going past failures.

        Args:
            paths: Regular-file paths

        Returns:
            PartialDigestMap with successful digests and failed paths
        """
        futures = self._submit(paths)
        digests: dict[str, bytes] = {}
        failures: dict[str, str] = {}

        for future in as_completed(futures):
            path = futures[future]
            try:
                digests[path] = future.result()
            except HashIOError as e:
                failures[path] = e.message
                logger.warning("treehash_hash_failed", path=path, error=e.message)

        return PartialDigestMap(digests=digests, failures=failures)
