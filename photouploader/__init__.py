"""Photo Uploader - back up new photos to a local folder and an rclone remote."""

from .cache import UNKNOWN_SIZE, RemoteCacheEntry, RemoteListingCache, parse_listing
from .config import ConfigStore, UploaderConfig
from .exceptions import ConfigurationError, PhotoUploaderError, RemoteToolError
from .rclone import CopyResult, RcloneClient
from .sync import (
    CancellationToken,
    DirectoryMapping,
    PendingTransfer,
    Reconciler,
    TransferExecutor,
)
from .uploader import UploadEngine

__all__ = [
    "UploadEngine",
    "Reconciler",
    "TransferExecutor",
    "CancellationToken",
    "PendingTransfer",
    "DirectoryMapping",
    "RemoteListingCache",
    "RemoteCacheEntry",
    "UNKNOWN_SIZE",
    "parse_listing",
    "RcloneClient",
    "CopyResult",
    "ConfigStore",
    "UploaderConfig",
    "PhotoUploaderError",
    "ConfigurationError",
    "RemoteToolError",
]
