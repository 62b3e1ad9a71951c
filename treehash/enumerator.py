"""
Path enumeration.

Produces the set of regular-file paths under a root:
- a regular file root yields itself
- a directory root yields every regular file found by recursive descent
- symlinks are neither followed nor returned
- unreadable sub-entries are logged and skipped

A PathEnumerator holds no per-call state, so one instance can serve
concurrent runs.
"""

from __future__ import annotations

import os
import stat
from typing import Union

import structlog

from treehash.config.exceptions import (
    EnumerationError,
    NotFoundError,
    PermissionDeniedError,
)
from treehash.models import Enumeration

logger = structlog.get_logger(__name__)


class PathEnumerator:
    """Best-effort recursive listing of regular files."""

    def enumerate(self, root: Union[str, "os.PathLike[str]"]) -> set[str]:
        """
        List regular files under ``root``.

        Args:
            root: File or directory

        Returns:
            Set of file paths (root joined with relative entry names)

        Raises:
            NotFoundError: root does not exist
            PermissionDeniedError: root metadata cannot be read
        """
        return set(self.scan(root).paths)

    def scan(self, root: Union[str, "os.PathLike[str]"]) -> Enumeration:
        """
        Like enumerate(), also reporting the sub-entries that were skipped.

        Returns:
            Enumeration with ``paths`` and ``skipped`` (path -> reason)
        """
        root_str = os.fspath(root)
        skipped: dict[str, str] = {}

        def skip(path: str, error: OSError) -> None:
            reason = error.strerror or str(error)
            skipped[path] = reason
            logger.warning("treehash_entry_skipped", path=path, reason=reason)

        def on_walk_error(error: OSError) -> None:
            # Listing the root itself is not best-effort.
            if error.filename == root_str:
                if isinstance(error, FileNotFoundError):
                    raise NotFoundError(root_str, "no such file or directory") from error
                raise PermissionDeniedError(root_str, error.strerror or str(error)) from error
            skip(error.filename or "", error)

        try:
            root_stat = os.stat(root_str)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(root_str, "no such file or directory") from e
        except PermissionError as e:
            raise PermissionDeniedError(root_str, "permission denied") from e
        except OSError as e:
            raise EnumerationError(root_str, e.strerror or str(e)) from e

        if stat.S_ISREG(root_stat.st_mode):
            return Enumeration(paths={root_str})

        if not stat.S_ISDIR(root_stat.st_mode):
            logger.warning("treehash_root_not_regular", root=root_str)
            return Enumeration()

        paths: set[str] = set()
        for dirpath, _dirnames, filenames in os.walk(root_str, onerror=on_walk_error):
            for name in filenames:
                full_path = os.path.join(dirpath, name)
                try:
                    mode = os.lstat(full_path).st_mode
                except OSError as e:
                    skip(full_path, e)
                    continue
                if stat.S_ISREG(mode):
                    paths.add(full_path)

        logger.info(
            "treehash_enumeration_completed",
            root=root_str,
            files=len(paths),
            skipped=len(skipped),
        )
        return Enumeration(paths=paths, skipped=skipped)
