"""Reconciliation and transfer engine for photo-uploader."""

from .comparator import PendingTransfer, Reconciler
from .engine import CancellationToken, TransferExecutor
from .pair import DirectoryMapping
from .scanner import DirectoryScanner, LocalFile, get_creation_time

__all__ = [
    "Reconciler",
    "PendingTransfer",
    "TransferExecutor",
    "CancellationToken",
    "DirectoryMapping",
    "DirectoryScanner",
    "LocalFile",
    "get_creation_time",
]
