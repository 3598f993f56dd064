"""Precondition checks run before reconciling or transferring files."""

from pathlib import Path
from typing import Optional

from .config import UploaderConfig


def validate_targets(config: Optional[UploaderConfig]) -> list[str]:
    """Check that the configuration can be used for an upload run.

    Every failed check is reported, not just the first one.

    Args:
        config: Loaded configuration, or None if none exists

    Returns:
        List of human-readable error messages (empty when valid)
    """
    errors: list[str] = []
    if config is None:
        errors.append("No config found!")
        return errors

    if not config.source or not Path(config.source).expanduser().is_dir():
        errors.append("Source dir not found")
    if not config.target or not Path(config.target).expanduser().exists():
        errors.append("Target dir not found")
    return errors


def validate_copy_dirs(config: Optional[UploaderConfig]) -> list[str]:
    """Check that every configured copy dir source is a directory.

    Args:
        config: Loaded configuration, or None if none exists

    Returns:
        List of human-readable error messages (empty when valid)
    """
    if config is None:
        return ["No config found!"]
    return [
        f"Copy dir source not found: {mapping.source}"
        for mapping in config.copy_dir_mappings()
        if not mapping.source.is_dir()
    ]
