"""Wrapper around the external rclone binary.

photo-uploader never talks to the cloud itself; listing and copying go
through ``rclone ls`` and ``rclone copyto`` run as subprocesses.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import RemoteToolError
from .utils import DEFAULT_REMOTE_NAME

logger = logging.getLogger(__name__)

RCLONE_BINARY_ENV_VAR = "RCLONE_BINARY"


@dataclass
class CopyResult:
    """Outcome of a single ``rclone copyto`` call."""

    returncode: int
    """Process exit code"""

    error_output: str
    """Whatever rclone wrote to stderr, stripped"""

    @property
    def ok(self) -> bool:
        """True when rclone exited cleanly without error output."""
        return self.returncode == 0 and not self.error_output


class RcloneClient:
    """Runs rclone commands against a single configured remote."""

    def __init__(
        self,
        remote_name: str = DEFAULT_REMOTE_NAME,
        binary: Optional[str] = None,
    ):
        """Initialize rclone client.

        Args:
            remote_name: Name of the rclone remote (e.g. ``gdrive``)
            binary: rclone executable, defaults to ``$RCLONE_BINARY`` or
                ``rclone``
        """
        self.remote_name = remote_name.rstrip(":")
        self.binary = binary or os.environ.get(RCLONE_BINARY_ENV_VAR, "rclone")

    def remote_spec(self, remote_path: str = "") -> str:
        """Build an rclone ``remote:path`` argument."""
        return f"{self.remote_name}:{remote_path}"

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        logger.debug("Running command: %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise RemoteToolError(f"Failed to run {self.binary}: {e}") from e

    def list_files(self) -> str:
        """List every file on the remote.

        Returns:
            Raw stdout of ``rclone ls <remote>:``

        Raises:
            RemoteToolError: If rclone cannot be started or exits non-zero
        """
        result = self._run(["ls", self.remote_spec()])
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise RemoteToolError(
                f"rclone ls failed with exit code {result.returncode}: {stderr}",
                returncode=result.returncode,
                stderr=stderr,
            )
        return result.stdout or ""

    def copy_to(self, source: Path, remote_path: str) -> CopyResult:
        """Copy a local file to an exact remote path.

        A non-zero exit does not raise; the caller decides how to treat
        the reported error output.

        Args:
            source: Local file to upload
            remote_path: Destination path on the remote

        Returns:
            CopyResult with exit code and error output

        Raises:
            RemoteToolError: If rclone cannot be started at all
        """
        result = self._run(["copyto", str(source), self.remote_spec(remote_path)])
        error_output = (result.stderr or "").strip()
        if result.returncode != 0 and not error_output:
            error_output = f"rclone copyto exited with code {result.returncode}"
        return CopyResult(returncode=result.returncode, error_output=error_output)
