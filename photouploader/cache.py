"""Local cache of the remote file listing.

Querying the remote for every reconciliation is slow, so the output of
``rclone ls`` is stored in a JSON file and only refreshed on request. Files
uploaded during a run are appended with an unknown size so that later
reconciliation passes see them as present.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .rclone import RcloneClient
from .utils import CACHE_FILE_NAME, get_app_dir

logger = logging.getLogger(__name__)

# Size recorded for entries appended after an upload in this session
UNKNOWN_SIZE = -1


@dataclass
class RemoteCacheEntry:
    """One file known to exist on the remote."""

    name: str
    """Path of the file on the remote"""

    size: int
    """Size in bytes, or UNKNOWN_SIZE for entries added after upload"""

    def to_dict(self) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {"name": self.name, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteCacheEntry":
        """Create RemoteCacheEntry from dictionary."""
        return cls(name=data["name"], size=int(data.get("size", UNKNOWN_SIZE)))


def parse_listing(text: str) -> list[RemoteCacheEntry]:
    """Parse ``rclone ls`` output.

    Each line is ``<size><whitespace><name>``. Blank lines are ignored and
    lines without a name or with a non-numeric size are skipped.

    Examples:
        >>> parse_listing("     1024 Photos/a.jpg\\n   12 b c.png\\n")
        [RemoteCacheEntry(name='Photos/a.jpg', size=1024), \
RemoteCacheEntry(name='b c.png', size=12)]
    """
    entries: list[RemoteCacheEntry] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            logger.warning("Skipping listing line %d without name: %r", line_no, line)
            continue
        size_str, name = parts
        try:
            size = int(size_str)
        except ValueError:
            logger.warning("Skipping listing line %d with bad size: %r", line_no, line)
            continue
        entries.append(RemoteCacheEntry(name=name, size=size))
    return entries


class RemoteListingCache:
    """Persisted snapshot of the files on the remote.

    The snapshot is always written wholesale; there is no append-only log.
    """

    def __init__(self, client: RcloneClient, cache_file: Optional[Path] = None):
        """Initialize the cache.

        Args:
            client: rclone client used to refresh the listing
            cache_file: JSON file holding the snapshot. Defaults to
                ``<app dir>/cache.json``
        """
        self.client = client
        self._cache_file = cache_file

    @property
    def cache_file(self) -> Path:
        """Path of the JSON snapshot."""
        if self._cache_file is not None:
            return self._cache_file
        return get_app_dir() / CACHE_FILE_NAME

    def is_present(self) -> bool:
        """Check whether a snapshot has been saved."""
        return self.cache_file.exists()

    def refresh(self) -> list[RemoteCacheEntry]:
        """Replace the snapshot with a fresh remote listing.

        Returns:
            The new list of entries

        Raises:
            RemoteToolError: If listing fails. The stored snapshot is left
                untouched in that case.
        """
        output = self.client.list_files()
        entries = parse_listing(output)
        self._write(entries)
        logger.debug("Refreshed remote cache with %d entries", len(entries))
        return entries

    def load(self) -> Optional[list[RemoteCacheEntry]]:
        """Load the snapshot.

        Returns:
            List of entries, or None if no snapshot exists. None means the
            remote state is unknown and must not be read as "empty".
        """
        if not self.cache_file.exists():
            logger.debug("No remote cache found at %s", self.cache_file)
            return None
        with open(self.cache_file, encoding="utf-8") as f:
            data = json.load(f)
        return [RemoteCacheEntry.from_dict(item) for item in data]

    def append(self, entry: RemoteCacheEntry) -> None:
        """Add one entry and rewrite the snapshot.

        Without an existing snapshot nothing is written, since a snapshot
        holding only this entry would hide every other remote file.
        """
        entries = self.load()
        if entries is None:
            logger.warning("No remote cache to update, not recording %s", entry.name)
            return
        entries.append(entry)
        self._write(entries)

    def _write(self, entries: list[RemoteCacheEntry]) -> None:
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.cache_file, "w", encoding="utf-8") as f:
            json.dump([e.to_dict() for e in entries], f, indent=2)
