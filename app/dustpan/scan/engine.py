"""Cancellable directory walker for build-artifact directories.

Walks a directory tree from a root path and streams scan events:
a Progress for every visited directory, a FolderFound for every
directory whose basename is a target name, and a final Completed or
Stopped. Matched directories are measured but never descended into,
so nested matches are folded into the outermost one. Directories
matched by an ignore glob are pruned together with their subtree.
Symbolic links are never followed.
"""

import logging
import os
import threading
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from dustpan.errors import ScanRootError
from dustpan.scan.models import (
    Completed,
    FolderEntry,
    FolderFound,
    Progress,
    ScanConfig,
    ScanEvent,
    ScanProgress,
    Stopped,
)

logger = logging.getLogger(__name__)


def validate_root(root: Path) -> Path:
    """Resolve the scan root and check that it can be listed.

    Args:
        root: Directory to scan.

    Returns:
        The resolved absolute root path.

    Raises:
        ScanRootError: If the root is missing, not a directory, or unreadable.
    """
    try:
        resolved = root.expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        msg = f"Cannot access scan root {root}: {e}"
        raise ScanRootError(msg) from e

    if not resolved.is_dir():
        msg = f"Scan root is not a directory: {resolved}"
        raise ScanRootError(msg)

    try:
        with os.scandir(resolved) as it:
            next(it, None)
    except PermissionError as e:
        msg = f"Cannot read scan root {resolved}: Permission denied"
        raise ScanRootError(msg) from e
    except OSError as e:
        msg = f"Cannot read scan root {resolved}: {e}"
        raise ScanRootError(msg) from e

    return resolved


class ScanEngine:
    """Recursive, cancellable walker producing scan events.

    The root is validated on construction, so an engine that exists is an
    engine that can start. The cancellation signal is only ever read here;
    it is polled before every directory visit and while a match is being
    measured.

    Args:
        root: Directory to scan.
        config: Target names and ignore globs for this run.
        cancel: Shared cancellation signal, set by the foreground.

    Raises:
        ScanRootError: If the root cannot be scanned.
    """

    def __init__(
        self,
        root: Path,
        config: ScanConfig,
        cancel: threading.Event | None = None,
    ) -> None:
        self._root = validate_root(root)
        self._config = config
        self._cancel = cancel if cancel is not None else threading.Event()

        self._scanned = 0
        self._found = 0
        self._errors = 0
        self._current: str | None = None

    @property
    def root(self) -> Path:
        """The resolved scan root."""
        return self._root

    @property
    def cancel(self) -> threading.Event:
        """The cancellation signal observed by this engine."""
        return self._cancel

    def progress(self) -> ScanProgress:
        """Snapshot of the current counters."""
        return ScanProgress(
            scanned_count=self._scanned,
            found_count=self._found,
            current_path=self._current,
            error_count=self._errors,
        )

    def scan(self) -> Iterator[ScanEvent]:
        """Walk the tree and yield scan events in real time.

        The traversal is depth-first with siblings visited in name order.
        Every non-pruned, non-matched directory is listed exactly once.
        The stream always ends with exactly one Completed or Stopped, and
        nothing follows a Stopped.

        Yields:
            Progress, FolderFound, and finally Completed or Stopped.
        """
        self._scanned = 0
        self._found = 0
        self._errors = 0
        self._current = None

        logger.info("Scanning %s for %s", self._root, sorted(self._config.target_names))
        stack: list[Path] = [self._root]

        while stack:
            if self._cancel.is_set():
                yield self._stopped()
                return

            directory = stack.pop()
            self._visit(directory)
            yield Progress(self.progress())

            children = self._list_subdirectories(directory)
            pending: list[Path] = []
            for child in children:
                relative = child.relative_to(self._root).as_posix()
                if self._config.is_ignored(child.name, relative):
                    logger.debug("Pruned ignored directory: %s", child)
                    continue

                if not self._config.is_target(child.name):
                    pending.append(child)
                    continue

                if self._cancel.is_set():
                    yield self._stopped()
                    return

                self._visit(child)
                yield Progress(self.progress())

                entry = self._measure(child)
                if entry is None:
                    if self._cancel.is_set():
                        yield self._stopped()
                        return
                    continue

                self._found += 1
                yield FolderFound(entry)

            # Reversed so that pop() visits siblings in name order
            stack.extend(reversed(pending))

        logger.info(
            "Scan complete: %d directories, %d found, %d errors",
            self._scanned,
            self._found,
            self._errors,
        )
        yield Completed(self.progress())

    def _visit(self, directory: Path) -> None:
        self._scanned += 1
        self._current = str(directory)

    def _stopped(self) -> Stopped:
        logger.info("Scan stopped after %d directories", self._scanned)
        return Stopped(self.progress())

    def _list_subdirectories(self, directory: Path) -> list[Path]:
        """List the real (non-symlink) subdirectories of a directory.

        Faults reading the directory or stat-ing an entry are counted and
        skipped; they never abort the scan.

        Args:
            directory: Directory to list.

        Returns:
            Subdirectory paths sorted by name.
        """
        subdirs: list[Path] = []
        try:
            with os.scandir(directory) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            subdirs.append(Path(entry.path))
                    except OSError as e:
                        self._errors += 1
                        logger.warning("Cannot stat %s: %s", entry.path, e)
        except OSError as e:
            self._errors += 1
            logger.warning("Cannot read directory %s: %s", directory, e)
            return []

        subdirs.sort(key=lambda p: p.name)
        return subdirs

    def _measure(self, directory: Path) -> FolderEntry | None:
        """Build the entry for a matched directory.

        Args:
            directory: The matched directory.

        Returns:
            FolderEntry, or None if the directory could not be stat-ed or
            the scan was cancelled while its size was being computed.
        """
        try:
            stat = directory.lstat()
        except OSError as e:
            self._errors += 1
            logger.warning("Cannot stat matched directory %s: %s", directory, e)
            return None

        size = self._directory_size(directory)
        if size is None:
            return None

        return FolderEntry(
            path=str(directory),
            size_bytes=size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        )

    def _directory_size(self, directory: Path) -> int | None:
        """Sum the sizes of all non-directory entries beneath a directory.

        Symbolic links count with their own size and are not followed.
        Unreadable subdirectories and entries are counted as errors and
        contribute nothing.

        Args:
            directory: Directory to measure.

        Returns:
            Total size in bytes, or None if the scan was cancelled meanwhile.
        """
        total = 0
        stack: list[str] = [str(directory)]

        while stack:
            if self._cancel.is_set():
                return None

            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    for entry in it:
                        try:
                            if entry.is_dir(follow_symlinks=False):
                                stack.append(entry.path)
                            else:
                                total += entry.stat(follow_symlinks=False).st_size
                        except OSError as e:
                            self._errors += 1
                            logger.warning("Cannot stat %s: %s", entry.path, e)
            except OSError as e:
                self._errors += 1
                logger.warning("Cannot read directory %s: %s", current, e)

        return total
