"""Unit tests for directory mappings."""

from pathlib import Path

from photouploader.sync.pair import DirectoryMapping


class TestDirectoryMapping:
    """Tests for DirectoryMapping class."""

    def test_create_mapping(self):
        """Test creating a basic mapping."""
        mapping = DirectoryMapping(
            source=Path("/media/card"),
            target=Path("/backup/photos"),
            remote_dir="/Photos/",
        )

        assert mapping.source == Path("/media/card")
        assert mapping.remote_dir == "Photos"  # Normalized without outer slashes
        assert mapping.primary is False

    def test_normalization(self):
        """Test that strings become paths and separators are unified."""
        mapping = DirectoryMapping(
            source="/media/card",  # String converted to Path
            target="/backup",
            remote_dir="Photos\\Camera",
            primary=True,
        )

        assert isinstance(mapping.source, Path)
        assert isinstance(mapping.target, Path)
        assert mapping.remote_dir == "Photos/Camera"

    def test_remote_root(self):
        """Test that "/" means the remote root."""
        assert DirectoryMapping(source="a", target="b", remote_dir="/").remote_dir == ""

    def test_from_dict(self):
        """Test creating a mapping from the on-disk layout."""
        mapping = DirectoryMapping.from_dict(
            {"source": "/docs", "target": "/backup/docs", "gDriveDir": "Docs"}
        )

        assert mapping.source == Path("/docs")
        assert mapping.target == Path("/backup/docs")
        assert mapping.remote_dir == "Docs"
        assert mapping.primary is False

    def test_from_dict_expands_user(self):
        """Test that ~ is expanded in local paths."""
        mapping = DirectoryMapping.from_dict(
            {"source": "~/docs", "target": "/t", "gDriveDir": "Docs"}
        )

        assert mapping.source == Path.home() / "docs"

    def test_from_dict_missing_remote_dir(self):
        """Test that a missing gDriveDir maps to the remote root."""
        mapping = DirectoryMapping.from_dict({"source": "/a", "target": "/b"})

        assert mapping.remote_dir == ""

    def test_to_dict(self):
        """Test converting back to the on-disk layout."""
        mapping = DirectoryMapping(source="/docs", target="/backup", remote_dir="Docs")

        assert mapping.to_dict() == {
            "source": "/docs",
            "target": "/backup",
            "gDriveDir": "Docs",
        }

    def test_str(self):
        """Test string representation."""
        mapping = DirectoryMapping(source="/docs", target="/backup", remote_dir="")

        assert str(mapping) == "/docs -> /backup | remote:/"
