"""Upload engine tying configuration, cache, reconciliation and transfers together."""

import logging
from typing import Callable, Optional

from .cache import RemoteCacheEntry, RemoteListingCache
from .config import ConfigStore, UploaderConfig
from .exceptions import ConfigurationError
from .rclone import RcloneClient
from .sync.comparator import PendingTransfer, Reconciler
from .sync.engine import TransferExecutor
from .utils import DEFAULT_REMOTE_NAME
from .validation import validate_copy_dirs, validate_targets

logger = logging.getLogger(__name__)


class UploadEngine:
    """High level operations used by the command interface.

    The engine computes the full list of pending transfers before any
    transfer starts; the two phases never interleave.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        client: Optional[RcloneClient] = None,
        cache: Optional[RemoteListingCache] = None,
        record_failed_uploads: bool = True,
    ):
        """Initialize upload engine.

        Args:
            config_store: Store holding the user's configuration
            client: rclone client (built from the configured remote if omitted)
            cache: Remote listing cache (default location if omitted)
            record_failed_uploads: Passed on to the TransferExecutor
        """
        self.config_store = config_store
        if client is None:
            loaded = config_store.load()
            remote_name = loaded.remote_name if loaded else DEFAULT_REMOTE_NAME
            client = RcloneClient(remote_name)
        self.client = client
        self.cache = cache or RemoteListingCache(client)
        self.reconciler = Reconciler(self.cache)
        self.executor = TransferExecutor(
            client, self.cache, record_failed_uploads=record_failed_uploads
        )

    def validate(self) -> list[str]:
        """Return every failed precondition for the primary mapping."""
        return validate_targets(self.config_store.load())

    def _require_valid_config(self) -> UploaderConfig:
        cfg = self.config_store.load()
        errors = validate_targets(cfg)
        if errors:
            raise ConfigurationError(errors)
        assert cfg is not None
        return cfg

    def ensure_cache(self) -> Optional[list[RemoteCacheEntry]]:
        """Refresh the remote cache if none exists yet.

        Returns:
            The fresh entries, or None if a cache was already present
        """
        if self.cache.is_present():
            return None
        return self.update_cache()

    def update_cache(self) -> list[RemoteCacheEntry]:
        """Refresh the remote cache from a fresh remote listing."""
        return self.cache.refresh()

    def get_files_to_upload(self) -> Optional[list[PendingTransfer]]:
        """Pending transfers for the primary mapping.

        Returns:
            Pending transfers, or None if the remote cache is absent

        Raises:
            ConfigurationError: If validation fails (all errors included)
        """
        cfg = self._require_valid_config()
        return self.reconciler.compute_pending_transfers(
            cfg.primary_mapping(), cfg.file_type_filter
        )

    def get_files_to_upload_from_copy_dirs(self) -> Optional[list[PendingTransfer]]:
        """Pending transfers for all copy dirs, in configuration order.

        Returns:
            Pending transfers, or None if the remote cache is absent

        Raises:
            ConfigurationError: If the config or a copy dir source is missing
        """
        cfg = self.config_store.load()
        errors = validate_copy_dirs(cfg)
        if errors:
            raise ConfigurationError(errors)
        assert cfg is not None

        pending: list[PendingTransfer] = []
        for mapping in cfg.copy_dir_mappings():
            items = self.reconciler.compute_pending_transfers(mapping)
            if items is None:
                return None
            pending.extend(items)
        return pending

    def get_all_files_to_upload(self) -> Optional[list[PendingTransfer]]:
        """Pending transfers for the primary mapping followed by copy dirs."""
        to_upload = self.get_files_to_upload()
        to_copy = self.get_files_to_upload_from_copy_dirs()
        if to_upload is None or to_copy is None:
            return None
        return to_upload + to_copy

    def upload(
        self,
        items: list[PendingTransfer],
        on_progress: Callable[[str], None],
        should_continue: Callable[[], bool],
        on_warning: Optional[Callable[[str], None]] = None,
    ) -> dict:
        """Apply pending transfers, see TransferExecutor.execute."""
        logger.debug("Starting transfer of %d item(s)", len(items))
        return self.executor.execute(items, on_progress, should_continue, on_warning)
