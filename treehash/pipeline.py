"""
Tree hashing pipeline.

root -> PathEnumerator -> ParallelDigestMap (StreamingHasher per file)
     -> digest map -> aggregate digest (+ duplicate groups on demand)

The worker pool is passed in by the caller. When none is given, a pool
sized from HashConfig.max_workers is created for the run and shut down
before returning.
"""

from __future__ import annotations

import asyncio
import os
import time
from concurrent.futures import Executor
from pathlib import Path
from typing import Optional, Union

import structlog

from treehash.aggregator import aggregate
from treehash.digest_map import ParallelDigestMap, create_worker_pool
from treehash.enumerator import PathEnumerator
from treehash.hasher import StreamingHasher
from treehash.models import Enumeration, HashConfig, PipelineResult

logger = structlog.get_logger(__name__)

PathArg = Union[str, "os.PathLike[str]"]


class TreeHashPipeline:
    """
    Hash every file under a root and fold the digests.

    Features:
    - Best-effort enumeration (unreadable sub-entries skipped)
    - Parallel streaming hashing on a caller-owned pool
    - Aggregate folded in path order
    - Strict (default) or best-effort failure policy
    """

    def __init__(
        self,
        config: Optional[HashConfig] = None,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Hashing configuration (defaults apply when None)
            executor: Worker pool; created per run when None
        """
        self.config = config or HashConfig()
        self.executor = executor
        self.enumerator = PathEnumerator()
        self.hasher = StreamingHasher(
            algorithm=self.config.algorithm,
            chunk_size=self.config.chunk_size,
        )

    def run(self, root: PathArg) -> PipelineResult:
        """
        Hash ``root`` (file or directory).

        Returns:
            PipelineResult with aggregate digest and digest map

        Raises:
            NotFoundError: root does not exist
            PermissionDeniedError: root cannot be read
            HashIOError: a file failed to hash (strict mode only)
        """
        start = time.monotonic()
        listing = self.enumerator.scan(root)

        if self.executor is not None:
            result = self._hash(root, listing, self.executor)
        else:
            with create_worker_pool(self.config.max_workers) as executor:
                result = self._hash(root, listing, executor)

        logger.info(
            "treehash_pipeline_completed",
            root=os.fspath(root),
            files=result.file_count,
            failures=len(result.failures),
            skipped=len(result.skipped),
            aggregate=result.aggregate_hex,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        return result

    def _hash(self, root: PathArg, listing: Enumeration, executor: Executor) -> PipelineResult:
        digest_map = ParallelDigestMap(self.hasher, executor)

        if self.config.strict:
            digests = digest_map.compute(listing.paths)
            failures: dict[str, str] = {}
        else:
            partial = digest_map.compute_partial(listing.paths)
            digests, failures = partial.digests, partial.failures

        return PipelineResult(
            root=Path(root),
            algorithm=self.config.algorithm,
            aggregate_digest=aggregate(digests, self.config.algorithm),
            digest_map=digests,
            failures=failures,
            skipped=listing.skipped,
        )


def run_pipeline(
    root: PathArg,
    executor: Optional[Executor] = None,
    config: Optional[HashConfig] = None,
) -> PipelineResult:
    """Hash ``root`` with a one-off TreeHashPipeline."""
    return TreeHashPipeline(config=config, executor=executor).run(root)


async def run_pipeline_async(
    root: PathArg,
    executor: Optional[Executor] = None,
    config: Optional[HashConfig] = None,
) -> PipelineResult:
    """Run the pipeline in a thread so the event loop is not blocked."""
    return await asyncio.to_thread(run_pipeline, root, executor, config)
