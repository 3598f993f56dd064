"""Transfer executor applying pending transfers one at a time."""

import logging
import os
import shutil
import time
from typing import Callable, Optional

from ..cache import UNKNOWN_SIZE, RemoteCacheEntry, RemoteListingCache
from ..exceptions import RemoteToolError
from ..rclone import RcloneClient
from .comparator import PendingTransfer

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative stop signal checked between transfers.

    A front end sets it (from a key press, a signal handler, ...) and the
    executor stops before the next item. An in-flight copy always finishes.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        """Request that no further items are started."""
        self._cancelled = True

    def reset(self) -> None:
        """Clear a previous cancellation before a new batch."""
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def should_continue(self) -> bool:
        """Return True while no cancellation was requested."""
        return not self._cancelled


class TransferExecutor:
    """Uploads to the remote and copies into the local target.

    Remote failures are reported and the batch goes on. Local copy
    failures (``OSError``) propagate and halt the batch; completed items
    are not rolled back.

    An upload for which rclone reported an error is still appended to the
    cache unless ``record_failed_uploads`` is False. An upload that never
    ran because rclone could not be launched (``RemoteToolError``) is not
    appended.
    """

    def __init__(
        self,
        client: RcloneClient,
        cache: RemoteListingCache,
        record_failed_uploads: bool = True,
    ):
        """Initialize transfer executor.

        Args:
            client: rclone client used for uploads
            cache: Remote listing cache, appended to after each upload
            record_failed_uploads: Append cache entries even when rclone
                reported an error (compatible default). When False, only
                clean uploads are recorded.
        """
        self.client = client
        self.cache = cache
        self.record_failed_uploads = record_failed_uploads

    def execute(
        self,
        items: list[PendingTransfer],
        on_progress: Callable[[str], None],
        should_continue: Callable[[], bool],
        on_warning: Optional[Callable[[str], None]] = None,
    ) -> dict:
        """Apply pending transfers sequentially in list order.

        Args:
            items: Transfers to apply
            on_progress: Receives a progress message per step
            should_continue: Checked before each item; False stops the batch
            on_warning: Receives non-fatal remote errors (defaults to logging)

        Returns:
            Dictionary with execution statistics

        Raises:
            OSError: If copying into the local target fails
        """
        warn = on_warning or logger.warning
        stats = {
            "processed": 0,
            "uploads": 0,
            "copies": 0,
            "warnings": 0,
            "cancelled": False,
        }
        total = len(items)
        pad = len(str(total))

        for index, item in enumerate(items):
            if not should_continue():
                logger.debug("Cancelled after %d of %d item(s)", index, total)
                stats["cancelled"] = True
                break

            on_progress(f"({index:0{pad}d}/{total}) Processing: {item.source}")

            if item.remote_destination is not None:
                on_progress(f"Uploading to remote ({item.remote_destination})")
                if self._upload(item, warn):
                    stats["uploads"] += 1
                else:
                    stats["warnings"] += 1

            if item.target_destination is not None:
                on_progress(f"Copying to target ({item.target_destination})")
                self._copy_to_target(item)
                stats["copies"] += 1

            stats["processed"] += 1

        return stats

    def _upload(self, item: PendingTransfer, warn: Callable[[str], None]) -> bool:
        """Upload one item and record it in the cache.

        Returns:
            True if rclone reported no error
        """
        remote_path = item.remote_destination
        assert remote_path is not None

        action_start = time.time()
        try:
            result = self.client.copy_to(item.source, remote_path)
        except RemoteToolError as e:
            warn(f"Upload of {item.source} failed: {e}")
            return False

        logger.debug(
            "Upload of %s took %.2fs", item.source, time.time() - action_start
        )
        if not result.ok:
            warn(f"Upload of {item.source} reported: {result.error_output}")
            if self.record_failed_uploads:
                self.cache.append(RemoteCacheEntry(name=remote_path, size=UNKNOWN_SIZE))
            return False

        self.cache.append(RemoteCacheEntry(name=remote_path, size=UNKNOWN_SIZE))
        return True

    def _copy_to_target(self, item: PendingTransfer) -> None:
        """Copy one item into the local target, keeping its timestamps."""
        target = item.target_destination
        assert target is not None

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(item.source, target)
        stat = os.stat(item.source)
        os.utime(target, (stat.st_atime, stat.st_mtime))
        logger.debug("Copied %s to %s", item.source, target)
