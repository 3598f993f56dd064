"""Tests for the directory scanner."""

import os
from datetime import datetime
from types import SimpleNamespace

from photouploader.sync.scanner import DirectoryScanner, LocalFile, get_creation_time


class TestGetCreationTime:
    """Tests for the creation time fallback."""

    def test_uses_birthtime(self):
        """Test that st_birthtime wins when present."""
        stat = SimpleNamespace(st_birthtime=1000.0, st_mtime=2000.0)

        assert get_creation_time(stat) == 1000.0

    def test_falls_back_to_mtime_without_birthtime(self):
        """Test the fallback on platforms without birth time."""
        stat = SimpleNamespace(st_mtime=2000.0)

        assert get_creation_time(stat) == 2000.0

    def test_falls_back_to_mtime_for_epoch(self):
        """Test that a zero birth time is treated as unavailable."""
        stat = SimpleNamespace(st_birthtime=0, st_mtime=2000.0)

        assert get_creation_time(stat) == 2000.0


class TestLocalFile:
    """Tests for LocalFile."""

    def test_from_path(self, tmp_path, monkeypatch):
        """Test metadata and derived fields."""
        march_first = datetime(2024, 3, 1, 12, 0).timestamp()
        monkeypatch.setattr(
            "photouploader.sync.scanner.get_creation_time", lambda stat: march_first
        )
        (tmp_path / "sub").mkdir()
        path = tmp_path / "sub" / "IMG_0001.JPG"
        path.write_bytes(b"12345")

        local_file = LocalFile.from_path(path, tmp_path)

        assert local_file.relative_path == "sub/IMG_0001.JPG"
        assert local_file.size == 5
        assert local_file.name == "IMG_0001.JPG"
        assert local_file.extension == ".jpg"
        assert local_file.date_folder == "2024-03-01"

    def test_date_folder_from_mtime(self, tmp_path):
        """Test that the real fallback yields a date folder from mtime."""
        path = tmp_path / "a.jpg"
        path.write_bytes(b"x")
        ts = datetime(2023, 12, 24, 18, 30).timestamp()
        os.utime(path, (ts, ts))

        local_file = LocalFile.from_path(path, tmp_path)

        if not hasattr(os.stat(path), "st_birthtime"):
            assert local_file.date_folder == "2023-12-24"
        assert len(local_file.date_folder) == 10


class TestDirectoryScanner:
    """Tests for DirectoryScanner."""

    def test_recursive_scan(self, tmp_path):
        """Test that nested files are found with POSIX relative paths."""
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "b").mkdir()
        (tmp_path / "top.jpg").write_text("1")
        (tmp_path / "a" / "mid.jpg").write_text("2")
        (tmp_path / "a" / "b" / "deep.jpg").write_text("3")

        files = list(DirectoryScanner().iter_local(tmp_path))

        assert sorted(f.relative_path for f in files) == [
            "a/b/deep.jpg",
            "a/mid.jpg",
            "top.jpg",
        ]

    def test_directories_are_not_yielded(self, tmp_path):
        """Test that only files are returned."""
        (tmp_path / "empty").mkdir()

        assert list(DirectoryScanner().iter_local(tmp_path)) == []

    def test_dot_files_excluded_by_default(self, tmp_path):
        """Test that hidden files and folders are skipped."""
        (tmp_path / ".thumbnails").mkdir()
        (tmp_path / ".thumbnails" / "t.jpg").write_text("x")
        (tmp_path / ".DS_Store").write_text("x")
        (tmp_path / "a.jpg").write_text("x")

        files = list(DirectoryScanner().iter_local(tmp_path))

        assert [f.relative_path for f in files] == ["a.jpg"]

    def test_dot_files_included_when_requested(self, tmp_path):
        """Test exclude_dot_files=False."""
        (tmp_path / ".hidden.jpg").write_text("x")

        files = list(DirectoryScanner(exclude_dot_files=False).iter_local(tmp_path))

        assert [f.relative_path for f in files] == [".hidden.jpg"]

    def test_iter_local_is_lazy(self, tmp_path):
        """Test that iter_local returns an iterator."""
        (tmp_path / "a.jpg").write_text("x")

        iterator = DirectoryScanner().iter_local(tmp_path)

        assert next(iterator).relative_path == "a.jpg"

    def test_symlink_loop_is_not_followed(self, tmp_path):
        """Test that a link back to an ancestor does not repeat files."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.txt").write_text("x")
        (tmp_path / "sub" / "loop").symlink_to(tmp_path, target_is_directory=True)

        files = list(DirectoryScanner().iter_local(tmp_path))

        assert [f.relative_path for f in files] == ["sub/a.txt"]

    def test_symlinked_directory_alias_is_skipped(self, tmp_path):
        """Test that a second name for a directory yields no duplicates."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.txt").write_text("x")
        (tmp_path / "alias").symlink_to(tmp_path / "sub", target_is_directory=True)

        files = list(DirectoryScanner().iter_local(tmp_path))

        assert [f.relative_path for f in files] == ["sub/a.txt"]

    def test_symlinked_file_is_included(self, tmp_path):
        """Test that links to files are still scanned."""
        (tmp_path / "real.jpg").write_text("x")
        (tmp_path / "link.jpg").symlink_to(tmp_path / "real.jpg")

        files = list(DirectoryScanner().iter_local(tmp_path))

        assert sorted(f.relative_path for f in files) == ["link.jpg", "real.jpg"]
