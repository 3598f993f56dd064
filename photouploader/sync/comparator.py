"""Reconciliation of a source tree against its destinations.

Presence is decided purely by path: a remote file is present when the
constructed remote path matches a cached remote name exactly, a target file
is present when the constructed target path exists. Sizes, times and
contents are never compared, which keeps reconciliation idempotent.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..cache import RemoteListingCache
from ..utils import join_remote_path
from .pair import DirectoryMapping
from .scanner import DirectoryScanner, LocalFile

logger = logging.getLogger(__name__)


@dataclass
class PendingTransfer:
    """A source file and the destinations it has not reached yet."""

    source: Path
    """Local file to transfer"""

    remote_destination: Optional[str] = None
    """Remote path to upload to, None if already on the remote"""

    target_destination: Optional[Path] = None
    """Local target path to copy to, None if already in the target"""

    @property
    def is_empty(self) -> bool:
        """True when neither destination is missing."""
        return self.remote_destination is None and self.target_destination is None


class Reconciler:
    """Computes pending transfers for directory mappings."""

    def __init__(
        self,
        cache: RemoteListingCache,
        scanner: Optional[DirectoryScanner] = None,
    ):
        """Initialize reconciler.

        Args:
            cache: Remote listing cache, only read here
            scanner: Directory scanner (defaults to one skipping dot files)
        """
        self.cache = cache
        self.scanner = scanner or DirectoryScanner()

    def compute_pending_transfers(
        self,
        mapping: DirectoryMapping,
        file_types: Optional[Iterable[str]] = None,
    ) -> Optional[list[PendingTransfer]]:
        """Compute the transfers still needed for one mapping.

        Args:
            mapping: Mapping to reconcile
            file_types: Lowercase extensions (with dot) accepted for the
                primary mapping. Ignored for copy dirs.

        Returns:
            List of pending transfers, or None if no remote cache exists
        """
        cache_entries = self.cache.load()
        if cache_entries is None:
            logger.debug("Remote cache absent, refusing to reconcile %s", mapping)
            return None
        remote_names = {entry.name for entry in cache_entries}

        type_filter = None
        if mapping.primary and file_types:
            type_filter = {ft.lower() for ft in file_types}

        pending: list[PendingTransfer] = []
        scanned = 0
        for local_file in self.scanner.iter_local(mapping.source):
            scanned += 1
            if type_filter is not None and local_file.extension not in type_filter:
                continue
            item = self._reconcile_file(mapping, local_file, remote_names)
            if not item.is_empty:
                pending.append(item)

        logger.debug(
            "Reconciled %s: %d file(s) scanned, %d pending",
            mapping,
            scanned,
            len(pending),
        )
        return pending

    def _reconcile_file(
        self,
        mapping: DirectoryMapping,
        local_file: LocalFile,
        remote_names: set[str],
    ) -> PendingTransfer:
        """Decide which destinations a single file is missing from."""
        if mapping.primary:
            date_folder = local_file.date_folder
            remote_path = join_remote_path(
                mapping.remote_dir, date_folder, local_file.name
            )
            target_path = mapping.target / date_folder / local_file.name
        else:
            remote_path = join_remote_path(mapping.remote_dir, local_file.relative_path)
            target_path = mapping.target.joinpath(*local_file.relative_path.split("/"))

        item = PendingTransfer(source=local_file.path)
        if remote_path not in remote_names:
            item.remote_destination = remote_path
        if not target_path.exists():
            item.target_destination = target_path
        return item
