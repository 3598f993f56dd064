"""Exceptions raised by photo-uploader."""

from typing import Optional


class PhotoUploaderError(Exception):
    """Base exception for all photo-uploader errors."""


class ConfigurationError(PhotoUploaderError):
    """Configuration is missing or points at directories that do not exist.

    Carries every failed check so callers can show them together.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid configuration")


class RemoteToolError(PhotoUploaderError):
    """The external rclone process could not be run or failed."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
