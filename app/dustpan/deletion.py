"""Batch mover of selected folders to the trash.

Each path is handed to the platform trash facility on its own; a
failure is recorded and the batch moves on. Once the batch is done the
registry is updated: moved entries are removed, failed entries stay
behind unselected.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from send2trash import send2trash

from dustpan.registry import FolderRegistry

logger = logging.getLogger(__name__)

# One call per path; raises OSError (or a subclass) on failure.
TrashFunc = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class TrashResult:
    """Result of moving a single path to the trash.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the move completed successfully.
        size_bytes: Size of the registry entry for this path.
        error: Error message if the move failed, None otherwise.
        dry_run: Whether this was a dry-run (nothing was moved).
    """

    path: str
    success: bool
    size_bytes: int = 0
    error: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class DeletionSummary:
    """Outcome of a deletion batch.

    Attributes:
        folders_moved: Number of paths moved to the trash.
        bytes_freed: Sum of the sizes of the moved entries only.
        failures: (path, reason) for every path that could not be moved.
        dry_run: Whether the batch was a dry run.
    """

    folders_moved: int = 0
    bytes_freed: int = 0
    failures: tuple[tuple[str, str], ...] = ()
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        """Check if any path could not be moved."""
        return bool(self.failures)

    @classmethod
    def from_results(
        cls, results: Sequence[TrashResult], dry_run: bool = False
    ) -> "DeletionSummary":
        """Aggregate per-path results into a summary."""
        moved = [r for r in results if r.success]
        return cls(
            folders_moved=len(moved),
            bytes_freed=sum(r.size_bytes for r in moved),
            failures=tuple((r.path, r.error or "Unknown error") for r in results if not r.success),
            dry_run=dry_run,
        )


class DeletionExecutor:
    """Moves registry entries to the trash with per-item accounting.

    Args:
        registry: Registry the paths come from; updated after each batch.
        trash: Trash primitive, one call per path. Defaults to send2trash.
        dry_run: If True, report every move as done without touching the disk.
    """

    def __init__(
        self,
        registry: FolderRegistry,
        trash: TrashFunc | None = None,
        dry_run: bool = False,
    ) -> None:
        self._registry = registry
        self._trash = trash if trash is not None else send2trash
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Whether moves are simulated."""
        return self._dry_run

    def execute(self, paths: Sequence[str]) -> DeletionSummary:
        """Move each path to the trash and update the registry.

        Args:
            paths: Paths of the selected entries, in registry order.

        Returns:
            DeletionSummary for the batch.
        """
        results = [self._move_single(path) for path in paths]

        for result in results:
            if result.success:
                self._registry.remove(result.path)
            else:
                self._registry.deselect(result.path)

        summary = DeletionSummary.from_results(results, dry_run=self._dry_run)
        logger.info(
            "Moved %d of %d folder(s) to trash (%d bytes)",
            summary.folders_moved,
            len(results),
            summary.bytes_freed,
        )
        return summary

    def _move_single(self, path: str) -> TrashResult:
        """Move a single path to the trash.

        Args:
            path: Absolute path to move.

        Returns:
            TrashResult indicating success or failure.
        """
        entry = self._registry.get(path)
        size = entry.size_bytes if entry is not None else 0

        if self._dry_run:
            logger.info("Dry-run: would move %s to trash", path)
            return TrashResult(path=path, success=True, size_bytes=size, dry_run=True)

        try:
            self._trash(path)
        except OSError as e:
            logger.warning("Could not move %s to trash: %s", path, e)
            return TrashResult(
                path=path,
                success=False,
                size_bytes=size,
                error=str(e) or type(e).__name__,
            )
        except Exception as e:
            logger.exception("Unexpected error moving %s to trash", path)
            return TrashResult(
                path=path,
                success=False,
                size_bytes=size,
                error=str(e) or type(e).__name__,
            )

        logger.debug("Moved %s to trash", path)
        return TrashResult(path=path, success=True, size_bytes=size)
