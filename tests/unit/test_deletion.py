"""Unit tests for DeletionExecutor.

Tests for batch moves to the trash, partial failures, and dry runs.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, call, patch

import pytest
from dustpan.deletion import DeletionExecutor, DeletionSummary, TrashResult
from dustpan.registry import FolderRegistry
from dustpan.scan.models import FolderEntry


@pytest.fixture
def registry(fixed_clock, now: datetime) -> FolderRegistry:
    """Registry with three selected entries of known sizes."""
    reg = FolderRegistry(auto_select_after=None, clock=fixed_clock)
    for index, (name, size) in enumerate([("a", 100), ("b", 200), ("c", 400)]):
        reg.insert(
            FolderEntry(
                path=f"/work/{name}/node_modules",
                size_bytes=size,
                last_modified=now - timedelta(days=10 - index),
            )
        )
    reg.select_all()
    return reg


class TestDeletionSummary:
    """Tests for result aggregation."""

    def test_from_results_counts_only_successes(self) -> None:
        """Failed paths contribute nothing to the freed bytes."""
        results = [
            TrashResult(path="/a", success=True, size_bytes=10),
            TrashResult(path="/b", success=False, size_bytes=99, error="denied"),
            TrashResult(path="/c", success=True, size_bytes=5),
        ]

        summary = DeletionSummary.from_results(results)

        assert summary.folders_moved == 2
        assert summary.bytes_freed == 15
        assert summary.failures == (("/b", "denied"),)
        assert summary.failed is True

    def test_empty_summary(self) -> None:
        """A summary without failures is not failed."""
        assert DeletionSummary().failed is False


class TestDeletionExecutor:
    """Tests for executing a deletion batch."""

    def test_all_succeed(self, registry: FolderRegistry) -> None:
        """Every path is trashed once and removed from the registry."""
        trash = MagicMock()
        executor = DeletionExecutor(registry, trash=trash)
        paths = registry.selected_paths()

        summary = executor.execute(paths)

        assert trash.call_args_list == [call(p) for p in paths]
        assert summary.folders_moved == 3
        assert summary.bytes_freed == 700
        assert summary.failures == ()
        assert len(registry) == 0

    def test_partial_failure_continues(self, registry: FolderRegistry) -> None:
        """One failure is recorded and the rest of the batch still runs."""
        failing = "/work/b/node_modules"

        def trash(path: str) -> None:
            if path == failing:
                raise PermissionError("Permission denied")

        executor = DeletionExecutor(registry, trash=trash)

        summary = executor.execute(registry.selected_paths())

        assert summary.folders_moved == 2
        assert summary.bytes_freed == 500
        assert summary.failures == ((failing, "Permission denied"),)
        assert [e.path for e in registry] == [failing]
        assert registry[0].selected is False

    def test_unexpected_exception_does_not_abort_batch(self, registry: FolderRegistry) -> None:
        """A non-OS error on one path is recorded; earlier and later paths still move."""
        failing = "/work/b/node_modules"
        trashed: list[str] = []

        def trash(path: str) -> None:
            if path == failing:
                raise ValueError("bad path")
            trashed.append(path)

        executor = DeletionExecutor(registry, trash=trash)

        summary = executor.execute(registry.selected_paths())

        assert trashed == ["/work/a/node_modules", "/work/c/node_modules"]
        assert summary.folders_moved == 2
        assert summary.bytes_freed == 500
        assert summary.failures == ((failing, "bad path"),)
        assert [e.path for e in registry] == [failing]
        assert registry.selected_count() == 0

    def test_error_without_message_uses_type_name(self, registry: FolderRegistry) -> None:
        """An exception with no text still produces a reason."""
        trash = MagicMock(side_effect=OSError())
        executor = DeletionExecutor(registry, trash=trash)

        summary = executor.execute(["/work/a/node_modules"])

        assert summary.failures == (("/work/a/node_modules", "OSError"),)

    def test_only_given_paths_are_moved(self, registry: FolderRegistry) -> None:
        """Unlisted entries are left alone."""
        trash = MagicMock()
        executor = DeletionExecutor(registry, trash=trash)

        executor.execute(["/work/c/node_modules"])

        trash.assert_called_once_with("/work/c/node_modules")
        assert [e.path for e in registry] == ["/work/a/node_modules", "/work/b/node_modules"]

    def test_dry_run_never_calls_trash(self, registry: FolderRegistry) -> None:
        """A dry run reports what would be moved without touching the disk."""
        trash = MagicMock()
        executor = DeletionExecutor(registry, trash=trash, dry_run=True)

        summary = executor.execute(registry.selected_paths())

        trash.assert_not_called()
        assert executor.dry_run is True
        assert summary.dry_run is True
        assert summary.folders_moved == 3
        assert summary.bytes_freed == 700

    def test_defaults_to_send2trash(self, registry: FolderRegistry) -> None:
        """Without an injected primitive the platform trash is used."""
        with patch("dustpan.deletion.send2trash") as mock_trash:
            executor = DeletionExecutor(registry)
            executor.execute(["/work/a/node_modules"])

        mock_trash.assert_called_once_with("/work/a/node_modules")

    def test_real_trash_failure_is_recorded(self, registry: FolderRegistry) -> None:
        """Errors raised by send2trash end up in the summary."""
        with patch("dustpan.deletion.send2trash", side_effect=FileNotFoundError("gone")):
            executor = DeletionExecutor(registry)
            summary = executor.execute(["/work/a/node_modules"])

        assert summary.folders_moved == 0
        assert summary.failures == (("/work/a/node_modules", "gone"),)
