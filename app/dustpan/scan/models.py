"""Scan domain models.

This module defines the scan configuration, the entries recorded for
matched directories, the running progress counters, and the events a
scan streams to the foreground loop.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dustpan.scan.patterns import (
    DEFAULT_IGNORE_GLOBS,
    DEFAULT_TARGET_NAMES,
    matches_ignore_glob,
)


class ScanConfig(BaseModel):
    """Immutable target names and ignore globs for one scan run.

    Attributes:
        target_names: Directory basenames the scan searches for.
        ignore_globs: Glob patterns (case-sensitive) matched against a
            directory's basename and its path relative to the scan root.
            Matching directories are pruned with their whole subtree.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    target_names: Annotated[
        frozenset[str],
        Field(min_length=1, description="Directory basenames to match"),
    ] = frozenset(DEFAULT_TARGET_NAMES)
    ignore_globs: Annotated[
        tuple[str, ...],
        Field(description="Glob patterns for pruned directories"),
    ] = DEFAULT_IGNORE_GLOBS

    @field_validator("target_names")
    @classmethod
    def validate_target_names(cls, v: frozenset[str]) -> frozenset[str]:
        """Target names must be plain, non-empty basenames."""
        for name in v:
            if not name or not name.strip():
                msg = "Target names cannot be empty"
                raise ValueError(msg)
            if "/" in name or name in (".", ".."):
                msg = f"Target name must be a directory basename, got '{name}'"
                raise ValueError(msg)
        return v

    @field_validator("ignore_globs")
    @classmethod
    def validate_ignore_globs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ignore globs must be non-empty patterns."""
        for pattern in v:
            if not pattern:
                msg = "Ignore patterns cannot be empty"
                raise ValueError(msg)
        return v

    def is_target(self, name: str) -> bool:
        """Check whether a directory basename is a target name."""
        return name in self.target_names

    def is_ignored(self, name: str, relative_path: str | None = None) -> bool:
        """Check whether a directory is pruned by an ignore glob.

        Args:
            name: Directory basename.
            relative_path: POSIX path of the directory relative to the scan root.

        Returns:
            True if any ignore glob matches the name or the relative path.
        """
        return matches_ignore_glob(name, relative_path, self.ignore_globs)


@dataclass(slots=True)
class FolderEntry:
    """A matched directory recorded in the registry.

    Attributes:
        path: Absolute path of the matched directory (unique key).
        size_bytes: Sum of all file sizes beneath the directory.
        last_modified: Modification time of the directory itself (timezone-aware).
        selected: Whether the entry is marked for moving to the trash.
    """

    path: str
    size_bytes: int
    last_modified: datetime
    selected: bool = False

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size must be non-negative, got {self.size_bytes}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Snapshot of the running scan counters.

    Attributes:
        scanned_count: Directories visited so far.
        found_count: Matches reported so far.
        current_path: Most recently visited directory.
        error_count: Per-entry I/O faults skipped so far.
    """

    scanned_count: int = 0
    found_count: int = 0
    current_path: str | None = None
    error_count: int = 0


@dataclass(frozen=True, slots=True)
class Progress:
    """Emitted at least once per visited directory."""

    progress: ScanProgress


@dataclass(frozen=True, slots=True)
class FolderFound:
    """Emitted once per matched directory."""

    entry: FolderEntry


@dataclass(frozen=True, slots=True)
class Completed:
    """Emitted when the traversal is exhausted."""

    progress: ScanProgress


@dataclass(frozen=True, slots=True)
class Stopped:
    """Emitted when the scan observed the cancellation signal."""

    progress: ScanProgress


@dataclass(frozen=True, slots=True)
class ScanFailed:
    """Emitted by the worker when the scan died on an unexpected fault."""

    message: str


ScanEvent = Progress | FolderFound | Completed | Stopped | ScanFailed
