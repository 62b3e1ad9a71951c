"""
Pydantic models for treehash.

Models:
- HashConfig: Pipeline configuration (algorithm, chunk size, workers, policy)
- DuplicateGroup: Files sharing the same content digest
- Enumeration: Regular-file paths under a root plus skipped entries
- PartialDigestMap: Best-effort digest map plus failed paths
- PipelineResult: Aggregate digest and per-file digests for one root
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ALGORITHM = "blake2b"
DEFAULT_CHUNK_SIZE = 4096
MAX_CHUNK_SIZE = 16 * 1024 * 1024


class HashConfig(BaseModel):
    """Configuration for a hashing run."""

    algorithm: str = Field(
        default=DEFAULT_ALGORITHM,
        description="hashlib algorithm name (fixed-size output only)",
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        le=MAX_CHUNK_SIZE,
        description="Read size in bytes for streaming hashing",
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker pool size (None = CPUs available)",
    )
    strict: bool = Field(
        default=True,
        description="Fail the whole run on the first unreadable file",
    )

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Algorithm must exist in hashlib and have a fixed digest size."""
        name = v.strip().lower()
        try:
            primitive = hashlib.new(name)
        except ValueError:
            raise ValueError(f"Unknown hash algorithm '{v}'") from None
        if name.startswith("shake_") or primitive.digest_size == 0:
            raise ValueError(f"Hash algorithm '{v}' has no fixed digest size")
        return name


class DuplicateGroup(BaseModel):
    """Two or more files sharing the same digest. Paths are kept sorted."""

    model_config = ConfigDict(frozen=True)

    digest: bytes
    paths: list[str] = Field(min_length=2)

    @field_validator("paths")
    @classmethod
    def sort_paths(cls, v: list[str]) -> list[str]:
        return sorted(v)

    @property
    def count(self) -> int:
        return len(self.paths)

    @property
    def hex(self) -> str:
        return self.digest.hex()


class Enumeration(BaseModel):
    """Paths found under a root, and sub-entries that could not be read."""

    model_config = ConfigDict(frozen=True)

    paths: set[str] = Field(default_factory=set)
    skipped: dict[str, str] = Field(default_factory=dict)


class PartialDigestMap(BaseModel):
    """Best-effort hashing result: successful digests plus failed paths."""

    model_config = ConfigDict(frozen=True)

    digests: dict[str, bytes] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    """Result of hashing one root path."""

    model_config = ConfigDict(frozen=True)

    root: Path
    algorithm: str
    aggregate_digest: bytes
    digest_map: dict[str, bytes] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)
    skipped: dict[str, str] = Field(default_factory=dict)

    @property
    def aggregate_hex(self) -> str:
        return self.aggregate_digest.hex()

    @property
    def file_count(self) -> int:
        return len(self.digest_map)

    @property
    def complete(self) -> bool:
        """False when files were left out (hash failures or skipped entries)."""
        return not self.failures and not self.skipped

    def hex_map(self) -> dict[str, str]:
        """Path -> lowercase hex digest, in path order."""
        return {path: self.digest_map[path].hex() for path in sorted(self.digest_map)}

    def duplicate_groups(self) -> list[DuplicateGroup]:
        """Group files by digest (computed on demand)."""
        from treehash.grouper import group

        return group(self.digest_map)

    def verify(self, expected_hex: str) -> bool:
        """Compare the aggregate against a previously recorded hex digest."""
        return self.aggregate_hex == expected_hex.strip().lower()
