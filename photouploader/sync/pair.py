"""Directory mappings between a source tree and its two destinations."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..utils import normalize_remote_dir


@dataclass
class DirectoryMapping:
    """One source directory mirrored to a local target and a remote directory.

    The primary mapping sorts files into date folders and is filtered by file
    type. Secondary mappings ("copy dirs") mirror the source by relative path
    and take every file.

    Examples:
        >>> mapping = DirectoryMapping(
        ...     source=Path("/media/card/DCIM"),
        ...     target=Path("/backup/photos"),
        ...     remote_dir="/Photos/",
        ...     primary=True,
        ... )
        >>> mapping.remote_dir
        'Photos'
    """

    source: Path
    """Directory scanned for files"""

    target: Path
    """Local destination root"""

    remote_dir: str
    """Remote destination root (POSIX, no leading/trailing slash)"""

    primary: bool = False
    """True for the date-folder mapping, False for copy dirs"""

    def __post_init__(self) -> None:
        if isinstance(self.source, str):
            self.source = Path(self.source)
        if isinstance(self.target, str):
            self.target = Path(self.target)
        self.remote_dir = normalize_remote_dir(self.remote_dir or "")

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], primary: bool = False
    ) -> "DirectoryMapping":
        """Create a mapping from a ``{source, target, gDriveDir}`` dictionary."""
        return cls(
            source=Path(data.get("source") or "").expanduser(),
            target=Path(data.get("target") or "").expanduser(),
            remote_dir=data.get("gDriveDir") or "",
            primary=primary,
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to the on-disk dictionary layout."""
        return {
            "source": str(self.source),
            "target": str(self.target),
            "gDriveDir": self.remote_dir,
        }

    def __str__(self) -> str:
        return f"{self.source} -> {self.target} | remote:{self.remote_dir or '/'}"
