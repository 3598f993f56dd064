"""Directory scanning utilities for reconciliation."""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..utils import format_date_folder

logger = logging.getLogger(__name__)


def get_creation_time(stat: os.stat_result) -> float:
    """Return the best available creation timestamp for a file.

    Uses the birth time where the platform reports one. Falls back to the
    modification time when birth time is missing or sits at the epoch.
    """
    # st_birthtime on macOS/BSD/Windows, usually absent on Linux
    stat_any: Any = stat
    birthtime = getattr(stat_any, "st_birthtime", None)
    if birthtime:
        return birthtime
    return stat.st_mtime


@dataclass
class LocalFile:
    """Represents a local file with metadata."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes"""

    creation_time: float
    """Creation time (Unix timestamp), see get_creation_time"""

    @property
    def name(self) -> str:
        """File name including extension."""
        return self.path.name

    @property
    def extension(self) -> str:
        """Lowercase extension including the leading dot."""
        return self.path.suffix.lower()

    @property
    def date_folder(self) -> str:
        """``YYYY-MM-DD`` folder derived from the creation time."""
        return format_date_folder(self.creation_time)

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        stat = file_path.stat()
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()

        return cls(
            path=file_path,
            relative_path=relative_path,
            size=stat.st_size,
            creation_time=get_creation_time(stat),
        )


class DirectoryScanner:
    """Walks a directory tree lazily and yields its files.

    Entries whose name starts with a dot are skipped unless
    ``exclude_dot_files`` is False. Symlinked directories are not entered.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for f in scanner.iter_local(Path("/media/card/DCIM")):
        ...     print(f.relative_path)
    """

    def __init__(self, exclude_dot_files: bool = True):
        """Initialize directory scanner.

        Args:
            exclude_dot_files: Whether to exclude files/folders starting with dot
        """
        self.exclude_dot_files = exclude_dot_files

    def should_ignore(self, path: Path) -> bool:
        """Check if a path should be skipped."""
        return self.exclude_dot_files and path.name.startswith(".")

    def iter_local(
        self, directory: Path, base_path: Optional[Path] = None
    ) -> Iterator[LocalFile]:
        """Recursively yield files below a local directory.

        Order follows the filesystem and is not guaranteed.

        Args:
            directory: Directory to scan
            base_path: Base path for calculating relative paths (defaults to directory)

        Yields:
            LocalFile objects
        """
        if base_path is None:
            base_path = directory

        try:
            items = list(directory.iterdir())
        except PermissionError:
            logger.warning("Permission denied, skipping directory: %s", directory)
            return

        for item in items:
            if self.should_ignore(item):
                continue

            if item.is_file():
                try:
                    yield LocalFile.from_path(item, base_path)
                except OSError as e:
                    logger.debug("Skipping unreadable file %s: %s", item, e)
                    continue
            elif item.is_symlink():
                logger.debug("Not following symlink: %s", item)
            elif item.is_dir():
                yield from self.iter_local(item, base_path)
