"""Configuration storage for photo-uploader.

The configuration lives in a single JSON file (``config.json`` in the
application directory). Keys keep the camelCase names used on disk so
existing files remain readable.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError
from .sync.pair import DirectoryMapping
from .utils import (
    CONFIG_FILE_NAME,
    DEFAULT_REMOTE_NAME,
    get_app_dir,
    parse_file_types,
)

logger = logging.getLogger(__name__)


@dataclass
class UploaderConfig:
    """Settings for one primary mapping plus optional copy dirs."""

    source: str = ""
    """Source directory scanned for new photos"""

    target: str = ""
    """Local target root, files go into date folders below it"""

    remote_dir: str = ""
    """Directory on the rclone remote mirroring the target"""

    file_types: str = ""
    """Comma separated extensions, e.g. ``.jpg,.png``"""

    copy_dirs: list[DirectoryMapping] = field(default_factory=list)
    """Secondary mappings mirrored by relative path"""

    remote_name: str = DEFAULT_REMOTE_NAME
    """Name of the rclone remote (without trailing colon)"""

    @property
    def file_type_filter(self) -> set[str]:
        """Lowercase extensions accepted for the primary mapping."""
        return parse_file_types(self.file_types)

    def primary_mapping(self) -> DirectoryMapping:
        """Build the primary (date folder) mapping."""
        return DirectoryMapping(
            source=Path(self.source).expanduser(),
            target=Path(self.target).expanduser(),
            remote_dir=self.remote_dir,
            primary=True,
        )

    def copy_dir_mappings(self) -> list[DirectoryMapping]:
        """Return the secondary (relative path) mappings."""
        return list(self.copy_dirs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk dictionary layout."""
        data: dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "gDriveDir": self.remote_dir,
            "fileTypes": self.file_types,
            "remoteName": self.remote_name,
        }
        if self.copy_dirs:
            data["copyDirs"] = [d.to_dict() for d in self.copy_dirs]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploaderConfig":
        """Create config from the on-disk dictionary layout."""
        return cls(
            source=data.get("source") or "",
            target=data.get("target") or "",
            remote_dir=data.get("gDriveDir") or "",
            file_types=data.get("fileTypes") or "",
            copy_dirs=[
                DirectoryMapping.from_dict(d) for d in data.get("copyDirs") or []
            ],
            remote_name=data.get("remoteName") or DEFAULT_REMOTE_NAME,
        )


class ConfigStore:
    """Reads and writes the JSON configuration file.

    No validation happens here; see :mod:`photouploader.validation`.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize config store.

        Args:
            config_file: Path of the JSON file. Defaults to
                ``<app dir>/config.json``
        """
        self._config_file = config_file

    def get_config_path(self) -> Path:
        """Return the path of the configuration file."""
        if self._config_file is not None:
            return self._config_file
        return get_app_dir() / CONFIG_FILE_NAME

    def is_present(self) -> bool:
        """Check whether a configuration file exists."""
        return self.get_config_path().exists()

    def _read_raw(self) -> Optional[dict[str, Any]]:
        config_path = self.get_config_path()
        if not config_path.exists():
            return None
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                [f"Config file {config_path} is not valid JSON: {e}"]
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError([f"Config file {config_path} is not an object"])
        return data

    def load(self) -> Optional[UploaderConfig]:
        """Load the configuration.

        Returns:
            UploaderConfig, or None if no configuration has been saved yet
        """
        data = self._read_raw()
        if data is None:
            logger.debug("No config found at %s", self.get_config_path())
            return None
        return UploaderConfig.from_dict(data)

    def save(self, partial: dict[str, Any]) -> None:
        """Shallow-merge ``partial`` over the stored configuration.

        Keys missing from ``partial`` keep their previously saved values.

        Args:
            partial: On-disk keys to update (``source``, ``target``,
                ``gDriveDir``, ``fileTypes``, ``copyDirs``, ``remoteName``)
        """
        merged = {**(self._read_raw() or {}), **partial}
        config_path = self.get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(merged, f, indent=2)
        logger.debug("Saved config to %s", config_path)


# Global store instance
config = ConfigStore()
