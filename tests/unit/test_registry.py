"""Unit tests for FolderRegistry.

Tests for ordering, auto-selection, selection state, and aggregates.
"""

import itertools
from datetime import datetime, timedelta

import pytest
from dustpan.registry import DEFAULT_AUTO_SELECT_AFTER, FolderRegistry
from dustpan.scan.models import FolderEntry


def _entry(path: str, modified: datetime, size: int = 100) -> FolderEntry:
    return FolderEntry(path=path, size_bytes=size, last_modified=modified)


class TestInsertOrdering:
    """Tests for the oldest-first ordering invariant."""

    def test_entries_sorted_oldest_first(self, fixed_clock, now: datetime) -> None:
        """Insertion order does not matter; iteration is oldest first."""
        registry = FolderRegistry(clock=fixed_clock)
        registry.insert(_entry("/p/mid", now - timedelta(days=10)))
        registry.insert(_entry("/p/new", now - timedelta(days=1)))
        registry.insert(_entry("/p/old", now - timedelta(days=100)))

        assert [e.path for e in registry] == ["/p/old", "/p/mid", "/p/new"]

    @pytest.mark.parametrize("order", list(itertools.permutations(range(4))))
    def test_any_insert_order_stays_sorted(
        self, fixed_clock, now: datetime, order: tuple[int, ...]
    ) -> None:
        """Every insertion order keeps the list sorted after each insert."""
        ages = [100, 31, 10, 1]
        registry = FolderRegistry(clock=fixed_clock)

        for index in order:
            registry.insert(_entry(f"/p/{ages[index]}d", now - timedelta(days=ages[index])))
            stamps = [e.last_modified for e in registry]
            assert stamps == sorted(stamps)

        assert [e.path for e in registry] == ["/p/100d", "/p/31d", "/p/10d", "/p/1d"]

    def test_equal_timestamps_keep_arrival_order(self, fixed_clock, now: datetime) -> None:
        """Ties are resolved by insertion order."""
        registry = FolderRegistry(clock=fixed_clock)
        stamp = now - timedelta(days=5)
        registry.insert(_entry("/p/first", stamp))
        registry.insert(_entry("/p/second", stamp))
        registry.insert(_entry("/p/third", stamp))

        assert [e.path for e in registry] == ["/p/first", "/p/second", "/p/third"]

    def test_duplicate_path_rejected(self, fixed_clock, now: datetime) -> None:
        """A second entry with the same path is not added."""
        registry = FolderRegistry(clock=fixed_clock)

        assert registry.insert(_entry("/p/a", now)) is True
        assert registry.insert(_entry("/p/a", now - timedelta(days=3))) is False
        assert len(registry) == 1
        assert "/p/a" in registry


class TestAutoSelect:
    """Tests for the age-based preselection rule."""

    def test_default_threshold_is_thirty_days(self) -> None:
        """The built-in threshold is 30 days."""
        assert FolderRegistry().auto_select_after == DEFAULT_AUTO_SELECT_AFTER
        assert DEFAULT_AUTO_SELECT_AFTER == timedelta(days=30)

    def test_threshold_is_strict(self, fixed_clock, now: datetime) -> None:
        """Exactly 30 days old is not selected; one second older is."""
        registry = FolderRegistry(clock=fixed_clock)
        registry.insert(_entry("/p/exact", now - timedelta(days=30)))
        registry.insert(_entry("/p/older", now - timedelta(days=30, seconds=1)))
        registry.insert(_entry("/p/fresh", now - timedelta(days=29)))

        selected = {e.path: e.selected for e in registry}
        assert selected == {"/p/older": True, "/p/exact": False, "/p/fresh": False}

    def test_disabled_threshold(self, fixed_clock, now: datetime) -> None:
        """None disables auto-selection."""
        registry = FolderRegistry(auto_select_after=None, clock=fixed_clock)
        registry.insert(_entry("/p/ancient", now - timedelta(days=900)))

        assert registry.selected_count() == 0
        assert registry.auto_select() == 0

    def test_auto_select_never_unselects(self, fixed_clock, now: datetime) -> None:
        """Re-running the rule keeps manual selections of young entries."""
        registry = FolderRegistry(clock=fixed_clock)
        registry.insert(_entry("/p/young", now - timedelta(days=1)))
        registry.insert(_entry("/p/old", now - timedelta(days=60)))
        registry.toggle(1)  # young entry is second, oldest first
        registry.toggle(0)  # unselect the old one manually

        newly = registry.auto_select()

        assert newly == 1
        assert set(registry.selected_paths()) == {"/p/young", "/p/old"}

    def test_auto_select_with_explicit_reference(self, fixed_clock, now: datetime) -> None:
        """An explicit threshold and reference time override the defaults."""
        registry = FolderRegistry(auto_select_after=None, clock=fixed_clock)
        registry.insert(_entry("/p/a", now - timedelta(days=3)))
        registry.insert(_entry("/p/b", now - timedelta(days=1)))

        newly = registry.auto_select(threshold=timedelta(days=2), now=now)

        assert newly == 1
        assert registry.selected_paths() == ["/p/a"]


class TestSelection:
    """Tests for toggling, bulk selection, and removal."""

    def _filled(self, fixed_clock, now: datetime) -> FolderRegistry:
        registry = FolderRegistry(auto_select_after=None, clock=fixed_clock)
        registry.insert(_entry("/p/a", now - timedelta(days=3), size=10))
        registry.insert(_entry("/p/b", now - timedelta(days=2), size=20))
        registry.insert(_entry("/p/c", now - timedelta(days=1), size=40))
        return registry

    def test_toggle_flips_selection(self, fixed_clock, now: datetime) -> None:
        """Toggling twice restores the initial state."""
        registry = self._filled(fixed_clock, now)

        assert registry.toggle(1) is True
        assert registry.selected_paths() == ["/p/b"]
        assert registry.toggle(1) is True
        assert registry.selected_paths() == []

    def test_toggle_out_of_range(self, fixed_clock, now: datetime) -> None:
        """Out-of-range indices are ignored."""
        registry = self._filled(fixed_clock, now)

        assert registry.toggle(3) is False
        assert registry.toggle(-1) is False
        assert registry.selected_count() == 0

    def test_select_and_deselect_all(self, fixed_clock, now: datetime) -> None:
        """Bulk selection affects every entry."""
        registry = self._filled(fixed_clock, now)

        registry.select_all()
        assert registry.selected_count() == 3
        registry.deselect_all()
        assert registry.selected_count() == 0

    def test_aggregates(self, fixed_clock, now: datetime) -> None:
        """Selected and total sizes are sums over the right entries."""
        registry = self._filled(fixed_clock, now)
        registry.toggle(0)
        registry.toggle(2)

        assert registry.selected_count() == 2
        assert registry.total_selected_size() == 50
        assert registry.total_size() == 70

    def test_aggregates_track_every_step(self, fixed_clock, now: datetime) -> None:
        """The selected size matches a recomputed sum after each operation."""
        registry = self._filled(fixed_clock, now)
        registry.insert(_entry("/p/d", now, size=80))
        steps = [
            ("toggle", 0),
            ("select_all",),
            ("toggle", 2),
            ("deselect_all",),
            ("toggle", 1),
            ("toggle", 3),
            ("toggle", 1),
            ("select_all",),
            ("toggle", 3),
            ("deselect_all",),
        ]

        for name, *args in steps:
            getattr(registry, name)(*args)
            selected = [e for e in registry if e.selected]
            assert registry.total_selected_size() == sum(e.size_bytes for e in selected)
            assert registry.selected_count() == len(selected)
            assert registry.total_size() == 150

    def test_remove_clamps_cursor(self, fixed_clock, now: datetime) -> None:
        """Removing the last row moves the cursor back into range."""
        registry = self._filled(fixed_clock, now)
        registry.move_cursor(5)
        assert registry.cursor == 2

        removed = registry.remove("/p/c")

        assert removed is not None
        assert removed.path == "/p/c"
        assert registry.cursor == 1
        assert "/p/c" not in registry
        assert registry.remove("/p/c") is None

    def test_deselect_single(self, fixed_clock, now: datetime) -> None:
        """deselect forces one entry to unselected."""
        registry = self._filled(fixed_clock, now)
        registry.select_all()

        assert registry.deselect("/p/b") is True
        assert registry.deselect("/p/missing") is False
        assert registry.selected_paths() == ["/p/a", "/p/c"]

    def test_clear_resets(self, fixed_clock, now: datetime) -> None:
        """clear empties the registry and resets the cursor."""
        registry = self._filled(fixed_clock, now)
        registry.move_cursor(1)

        registry.clear()

        assert len(registry) == 0
        assert registry.cursor == 0
        assert registry.get("/p/a") is None


class TestCursorAndSnapshot:
    """Tests for cursor movement and render snapshots."""

    def test_cursor_clamped_when_empty(self) -> None:
        """The cursor stays at 0 on an empty registry."""
        registry = FolderRegistry()

        assert registry.move_cursor(1) == 0
        assert registry.move_cursor(-1) == 0

    def test_cursor_moves_within_bounds(self, fixed_clock, now: datetime) -> None:
        """The cursor never leaves [0, len - 1]."""
        registry = FolderRegistry(clock=fixed_clock)
        registry.insert(_entry("/p/a", now))
        registry.insert(_entry("/p/b", now))

        assert registry.move_cursor(-1) == 0
        assert registry.move_cursor(1) == 1
        assert registry.move_cursor(1) == 1

    def test_snapshot_is_detached(self, fixed_clock, now: datetime) -> None:
        """Changes after the snapshot do not leak into it."""
        registry = FolderRegistry(auto_select_after=None, clock=fixed_clock)
        registry.insert(_entry("/p/a", now, size=5))

        snapshot = registry.snapshot()
        registry.toggle(0)

        assert snapshot.entries[0].selected is False
        assert snapshot.selected_count == 0
        assert snapshot.total_size == 5
        assert registry.snapshot().selected_size == 5
