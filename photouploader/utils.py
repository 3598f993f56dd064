"""Utility functions and constants for photo-uploader."""

import os
from datetime import datetime
from pathlib import Path, PurePosixPath

# =============================================================================
# Constants
# =============================================================================

# Directory holding config.json and cache.json
DEFAULT_APP_DIR_NAME: str = ".photo-uploader"

# Environment variable overriding the application directory
APP_DIR_ENV_VAR: str = "PHOTO_UPLOADER_HOME"

CONFIG_FILE_NAME: str = "config.json"
CACHE_FILE_NAME: str = "cache.json"

# rclone remote used when the config does not name one
DEFAULT_REMOTE_NAME: str = "gdrive"

# Date folder format for primary-mapping uploads
DATE_FOLDER_FORMAT: str = "%Y-%m-%d"


def get_app_dir() -> Path:
    """Return the directory where config and cache files are stored.

    Returns:
        ``$PHOTO_UPLOADER_HOME`` if set, otherwise ``~/.photo-uploader``
    """
    env_dir = os.environ.get(APP_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / DEFAULT_APP_DIR_NAME


# =============================================================================
# Path helpers
# =============================================================================


def normalize_remote_dir(remote_dir: str) -> str:
    """Normalize a remote directory to a POSIX path without outer slashes.

    Examples:
        >>> normalize_remote_dir("/Photos/2024/")
        'Photos/2024'
        >>> normalize_remote_dir("Photos\\\\Camera")
        'Photos/Camera'
    """
    return remote_dir.replace("\\", "/").strip("/")


def join_remote_path(remote_dir: str, *parts: str) -> str:
    """Join path segments onto a remote directory.

    An empty remote directory means the remote root.

    Examples:
        >>> join_remote_path("Photos", "2024-03-01", "photo.jpg")
        'Photos/2024-03-01/photo.jpg'
        >>> join_remote_path("", "a/b.jpg")
        'a/b.jpg'
    """
    base = PurePosixPath(remote_dir) if remote_dir else PurePosixPath()
    return base.joinpath(*parts).as_posix()


def format_date_folder(timestamp: float) -> str:
    """Format a Unix timestamp as a ``YYYY-MM-DD`` folder name in local time."""
    return datetime.fromtimestamp(timestamp).strftime(DATE_FOLDER_FORMAT)


def parse_file_types(file_types: str) -> set[str]:
    """Parse a comma separated extension list into a lowercase set.

    Examples:
        >>> sorted(parse_file_types(".JPG, .png,"))
        ['.jpg', '.png']
    """
    return {ft.strip().lower() for ft in file_types.split(",") if ft.strip()}
