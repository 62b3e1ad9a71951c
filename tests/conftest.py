"""
Shared pytest fixtures for treehash.

This file contains:
- PYTHONPATH setup (repo root importable without install)
- Integration test guard (INTEGRATION_TESTS=1)
- File tree builders and worker pool fixtures
"""

import logging
import os
import sys
from pathlib import Path

import pytest
import structlog

# ==========================================
# PYTHONPATH Setup
# ==========================================

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from treehash.digest_map import create_worker_pool  # noqa: E402

HELLO = b"Hello, world!"

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0

requires_permissions = pytest.mark.skipif(
    running_as_root or sys.platform == "win32",
    reason="mode bits are not enforced for root or on Windows",
)


# ==========================================
# Integration Tests Guard
# ==========================================


def pytest_collection_modifyitems(config, items):
    """
    Skip tests marked "integration" unless INTEGRATION_TESTS is set.

    Usage:
        export INTEGRATION_TESTS=1
        pytest tests/integration -m integration
    """
    if not os.getenv("INTEGRATION_TESTS"):
        skip_integration = pytest.mark.skip(
            reason="INTEGRATION_TESTS=1 not set - skipping integration tests"
        )
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ==========================================
# File tree fixtures
# ==========================================


@pytest.fixture
def hello_tree(tmp_path: Path) -> Path:
    """
    Three identical "Hello, world!" files and one different file.

    Structure:
        tree/
            hello.txt          (dup)
            a/hello_copy.txt   (dup)
            a/b/hello_again    (dup)
            other.txt          (unique)
    """
    root = tmp_path / "tree"
    (root / "a" / "b").mkdir(parents=True)
    (root / "hello.txt").write_bytes(HELLO)
    (root / "a" / "hello_copy.txt").write_bytes(HELLO)
    (root / "a" / "b" / "hello_again").write_bytes(HELLO)
    (root / "other.txt").write_bytes(b"Goodbye, world!")
    return root


@pytest.fixture
def undecodable_tree(tmp_path: Path) -> Path:
    r"""
    Two identical files whose names are not valid UTF-8.

    Structure:
        latin1/
            caf\xe9_a   (dup)
            caf\xe9_b   (dup)
    """
    if sys.platform == "win32":
        pytest.skip("byte file names not supported on Windows")
    root = tmp_path / "latin1"
    root.mkdir()
    for name in (b"caf\xe9_a", b"caf\xe9_b"):
        try:
            with open(os.path.join(os.fsencode(root), name), "wb") as f:
                f.write(HELLO)
        except OSError:
            pytest.skip("file system rejects non UTF-8 names")
    return root


@pytest.fixture
def worker_pool():
    """Two-worker pool, shut down after the test."""
    pool = create_worker_pool(2)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() (root handlers bound to captured streams)."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()
