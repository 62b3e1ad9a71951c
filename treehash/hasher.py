"""
Streaming content hasher.

Reads a file in fixed-size chunks and feeds each one to the hash
primitive, so memory use stays bounded whatever the file size.
Reading stops only when a read returns zero bytes; a short read is not
end-of-file on every file system.
"""

from __future__ import annotations

import hashlib
import os
from typing import Union

import structlog

from treehash.config.exceptions import HashIOError
from treehash.models import DEFAULT_ALGORITHM, DEFAULT_CHUNK_SIZE

logger = structlog.get_logger(__name__)


def new_hash(algorithm: str = DEFAULT_ALGORITHM):
    """Fresh hash primitive instance for ``algorithm``."""
    return hashlib.new(algorithm)


def empty_digest(algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """Digest of the empty byte sequence."""
    return new_hash(algorithm).digest()


class StreamingHasher:
    """Chunked, bounded-memory file hasher."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize hasher.

        Args:
            algorithm: hashlib algorithm name
            chunk_size: Bytes read per call
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def hash(self, path: Union[str, "os.PathLike[str]"]) -> bytes:
        """
        Compute the content digest of one file.

        Args:
            path: File to hash

        Returns:
            Raw digest bytes

        Raises:
            HashIOError: File cannot be opened or a read fails
        """
        digest = new_hash(self.algorithm)

        try:
            with open(path, "rb") as f:
                while chunk := f.read(self.chunk_size):
                    digest.update(chunk)
        except OSError as e:
            raise HashIOError(path, e.strerror or str(e)) from e

        return digest.digest()
