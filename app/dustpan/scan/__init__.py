"""Directory scanning for build-artifact folders.

This module provides the scan configuration and event models, the
cancellable scan engine, and the background worker that streams
engine events to the foreground.
"""

from dustpan.scan.engine import ScanEngine, validate_root
from dustpan.scan.models import (
    Completed,
    FolderEntry,
    FolderFound,
    Progress,
    ScanConfig,
    ScanEvent,
    ScanFailed,
    ScanProgress,
    Stopped,
)
from dustpan.scan.patterns import DEFAULT_IGNORE_GLOBS, DEFAULT_TARGET_NAMES
from dustpan.scan.worker import ScanWorker

__all__ = [
    "DEFAULT_IGNORE_GLOBS",
    "DEFAULT_TARGET_NAMES",
    "Completed",
    "FolderEntry",
    "FolderFound",
    "Progress",
    "ScanConfig",
    "ScanEngine",
    "ScanEvent",
    "ScanFailed",
    "ScanProgress",
    "ScanWorker",
    "Stopped",
    "validate_root",
]
