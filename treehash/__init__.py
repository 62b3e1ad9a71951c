"""
treehash - deterministic tree digests and duplicate detection.

Modules:
- enumerator: regular files under a root (best-effort descent)
- hasher: bounded-memory streaming file digest
- digest_map: parallel per-file hashing on a caller-owned pool
- aggregator: path-ordered fold into one aggregate digest
- grouper: duplicate groups by equal digest
- pipeline: end-to-end run (sync and async)
- report: text, JSON and CSV output
- models: Pydantic data models
"""

from treehash.aggregator import aggregate
from treehash.config.exceptions import (
    EnumerationError,
    HashIOError,
    NotFoundError,
    PermissionDeniedError,
    TreeHashError,
)
from treehash.digest_map import ParallelDigestMap, create_worker_pool
from treehash.enumerator import PathEnumerator
from treehash.grouper import group
from treehash.hasher import StreamingHasher
from treehash.models import (
    DuplicateGroup,
    Enumeration,
    HashConfig,
    PartialDigestMap,
    PipelineResult,
)
from treehash.pipeline import TreeHashPipeline, run_pipeline, run_pipeline_async

__version__ = "0.1.0"

__all__ = [
    "DuplicateGroup",
    "Enumeration",
    "EnumerationError",
    "HashConfig",
    "HashIOError",
    "NotFoundError",
    "ParallelDigestMap",
    "PartialDigestMap",
    "PathEnumerator",
    "PermissionDeniedError",
    "PipelineResult",
    "StreamingHasher",
    "TreeHashError",
    "TreeHashPipeline",
    "aggregate",
    "create_worker_pool",
    "group",
    "run_pipeline",
    "run_pipeline_async",
]
