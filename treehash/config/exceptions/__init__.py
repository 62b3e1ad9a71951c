"""
treehash - Canonical exception hierarchy.

Source of truth for all treehash exceptions. Every error carries the
path that caused it; the underlying ``OSError`` is chained as
``__cause__``.
"""

from __future__ import annotations

import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


class TreeHashError(Exception):
    """Base exception treehash."""

    def __init__(self, path: PathLike, message: str = ""):
        self.path = os.fspath(path)
        self.message = message
        super().__init__(f"{self.path}: {message}" if message else self.path)


class EnumerationError(TreeHashError):
    """Errors raised while resolving the root path."""


class NotFoundError(EnumerationError):
    """Root path does not exist."""


class PermissionDeniedError(EnumerationError):
    """Root metadata cannot be read."""


class HashIOError(TreeHashError):
    """A file could not be opened or a read failed mid-stream."""
