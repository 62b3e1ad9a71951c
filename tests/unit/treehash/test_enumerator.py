"""
Unit tests for PathEnumerator.

Tests:
- File root -> singleton, directory root -> every regular file
- Symlinks and directories excluded
- Root errors are fatal (NotFoundError / PermissionDeniedError)
- Sub-entry errors are skipped, not fatal
"""

import os
from unittest.mock import patch

import pytest
from tests.conftest import requires_permissions
from treehash.config.exceptions import EnumerationError, NotFoundError, PermissionDeniedError
from treehash.enumerator import PathEnumerator


@pytest.fixture
def enumerator():
    return PathEnumerator()


class TestRoots:
    """Root path handling."""

    def test_file_root_is_singleton(self, enumerator, tmp_path):
        f = tmp_path / "only.txt"
        f.write_bytes(b"content")

        assert enumerator.enumerate(f) == {str(f)}

    def test_file_root_keeps_given_form(self, enumerator, tmp_path, monkeypatch):
        (tmp_path / "rel.txt").write_bytes(b"x")
        monkeypatch.chdir(tmp_path)

        assert enumerator.enumerate("rel.txt") == {"rel.txt"}

    def test_directory_root(self, enumerator, hello_tree):
        result = enumerator.enumerate(hello_tree)

        assert result == {
            os.path.join(str(hello_tree), "hello.txt"),
            os.path.join(str(hello_tree), "other.txt"),
            os.path.join(str(hello_tree), "a", "hello_copy.txt"),
            os.path.join(str(hello_tree), "a", "b", "hello_again"),
        }

    def test_empty_directory(self, enumerator, tmp_path):
        assert enumerator.enumerate(tmp_path) == set()

    def test_directories_not_listed(self, enumerator, tmp_path):
        (tmp_path / "sub" / "deeper").mkdir(parents=True)

        assert enumerator.enumerate(tmp_path) == set()

    def test_missing_root(self, enumerator, tmp_path):
        missing = tmp_path / "nope"

        with pytest.raises(NotFoundError) as exc_info:
            enumerator.enumerate(missing)

        assert exc_info.value.path == str(missing)

    def test_missing_root_under_file(self, enumerator, tmp_path):
        f = tmp_path / "file"
        f.write_bytes(b"x")

        with pytest.raises(NotFoundError):
            enumerator.enumerate(f / "child")

    def test_root_stat_permission_error(self, enumerator, tmp_path):
        with patch("treehash.enumerator.os.stat", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(PermissionDeniedError) as exc_info:
                enumerator.enumerate(tmp_path)

        assert isinstance(exc_info.value, EnumerationError)

    def test_root_listing_error_is_fatal(self, enumerator, tmp_path):
        """Unlistable root is not silently empty."""
        root = str(tmp_path)

        def fake_walk(top, onerror=None, **kwargs):
            onerror(PermissionError(13, "Permission denied", top))
            return iter(())

        with patch("treehash.enumerator.os.walk", side_effect=fake_walk):
            with pytest.raises(PermissionDeniedError):
                enumerator.enumerate(root)

    @requires_permissions
    def test_unreadable_root_directory(self, enumerator, tmp_path):
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "f").write_bytes(b"x")
        locked.chmod(0)
        try:
            with pytest.raises(PermissionDeniedError):
                enumerator.enumerate(locked)
        finally:
            locked.chmod(0o755)


class TestFiltering:
    """Symlinks and non-regular entries."""

    def test_symlink_to_file_excluded(self, enumerator, tmp_path):
        target = tmp_path / "target.txt"
        target.write_bytes(b"x" * 200)
        link = tmp_path / "link.txt"
        try:
            link.symlink_to(target)
        except OSError:
            pytest.skip("Symlinks not supported on this platform")

        assert enumerator.enumerate(tmp_path) == {str(target)}

    def test_symlinked_directory_not_followed(self, enumerator, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        (real / "f.txt").write_bytes(b"x")
        try:
            (tmp_path / "loop").symlink_to(tmp_path, target_is_directory=True)
        except OSError:
            pytest.skip("Symlinks not supported on this platform")

        assert enumerator.enumerate(tmp_path) == {str(real / "f.txt")}

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
    def test_fifo_excluded(self, enumerator, tmp_path):
        os.mkfifo(tmp_path / "pipe")
        (tmp_path / "f").write_bytes(b"x")

        assert enumerator.enumerate(tmp_path) == {str(tmp_path / "f")}

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="mkfifo not available")
    def test_fifo_root_yields_nothing(self, enumerator, tmp_path):
        pipe = tmp_path / "pipe"
        os.mkfifo(pipe)

        assert enumerator.enumerate(pipe) == set()


class TestBestEffort:
    """Sub-entry errors are skipped."""

    def test_entry_stat_error_skipped(self, enumerator, hello_tree):
        bad = os.path.join(str(hello_tree), "other.txt")
        real_lstat = os.lstat

        def flaky_lstat(path, *args, **kwargs):
            if os.fspath(path) == bad:
                raise PermissionError(13, "Permission denied", path)
            return real_lstat(path, *args, **kwargs)

        with patch("treehash.enumerator.os.lstat", side_effect=flaky_lstat):
            listing = enumerator.scan(hello_tree)

        assert bad not in listing.paths
        assert len(listing.paths) == 3
        assert listing.skipped == {bad: "Permission denied"}

    def test_subdirectory_walk_error_skipped(self, enumerator, hello_tree):
        sub = os.path.join(str(hello_tree), "a")
        real_walk = os.walk

        def walk_with_error(top, onerror=None, **kwargs):
            onerror(PermissionError(13, "Permission denied", sub))
            for dirpath, dirnames, filenames in real_walk(top, **kwargs):
                if dirpath.startswith(sub):
                    continue
                yield dirpath, dirnames, filenames

        with patch("treehash.enumerator.os.walk", side_effect=walk_with_error):
            listing = enumerator.scan(hello_tree)

        assert listing.paths == {
            os.path.join(str(hello_tree), "hello.txt"),
            os.path.join(str(hello_tree), "other.txt"),
        }
        assert list(listing.skipped) == [sub]

    @requires_permissions
    def test_unreadable_subdirectory_skipped(self, enumerator, hello_tree):
        locked = hello_tree / "a" / "b"
        locked.chmod(0)
        try:
            listing = enumerator.scan(hello_tree)
        finally:
            locked.chmod(0o755)

        assert str(locked / "hello_again") not in listing.paths
        assert len(listing.paths) == 3
        assert str(locked) in listing.skipped

    def test_enumerate_matches_scan_paths(self, enumerator, hello_tree):
        assert enumerator.enumerate(hello_tree) == enumerator.scan(hello_tree).paths


class TestSharedInstance:
    """One enumerator serving overlapping runs."""

    def test_root_error_not_masked_by_other_run(self, enumerator, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (second / "f").write_bytes(b"x")
        real_walk = os.walk
        nested = []

        def walk(top, onerror=None, **kwargs):
            if top == str(first):
                # Another run starts before this root's listing fails.
                nested.append(enumerator.scan(second))
                onerror(PermissionError(13, "Permission denied", top))
                return iter(())
            return real_walk(top, onerror=onerror, **kwargs)

        with patch("treehash.enumerator.os.walk", side_effect=walk):
            with pytest.raises(PermissionDeniedError) as exc_info:
                enumerator.scan(first)

        assert exc_info.value.path == str(first)
        assert nested[0].paths == {str(second / "f")}

    def test_skipped_entries_kept_per_run(self, enumerator, hello_tree, tmp_path):
        bad = os.path.join(str(hello_tree), "other.txt")
        clean = tmp_path / "clean"
        clean.mkdir()
        real_lstat = os.lstat
        nested = []

        def flaky_lstat(path, *args, **kwargs):
            if os.fspath(path) == bad:
                nested.append(enumerator.scan(clean))
                raise PermissionError(13, "Permission denied", path)
            return real_lstat(path, *args, **kwargs)

        with patch("treehash.enumerator.os.lstat", side_effect=flaky_lstat):
            listing = enumerator.scan(hello_tree)

        assert listing.skipped == {bad: "Permission denied"}
        assert nested[0].skipped == {}
