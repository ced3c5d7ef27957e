"""Live, ordered collection of discovered folders.

The registry keeps its entries sorted oldest-first by modification time
after every insertion, holds the selection state and the highlighted
cursor, and answers the aggregate questions the UI asks every tick.
It is owned by the foreground thread; the scan worker never touches it.
"""

import bisect
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta

from dustpan.scan.models import FolderEntry

logger = logging.getLogger(__name__)

# Entries older than this are selected as soon as they are found.
DEFAULT_AUTO_SELECT_AFTER = timedelta(days=30)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _sort_key(entry: FolderEntry) -> datetime:
    return entry.last_modified


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Read-only view of the registry handed to the renderer.

    Attributes:
        entries: Copies of the entries, oldest first.
        cursor: Index of the highlighted entry (0 when empty).
        selected_count: Number of selected entries.
        selected_size: Total size of selected entries in bytes.
        total_size: Total size of all entries in bytes.
    """

    entries: tuple[FolderEntry, ...]
    cursor: int
    selected_count: int
    selected_size: int
    total_size: int


class FolderRegistry:
    """Ordered, mutable collection of FolderEntry with selection state.

    Args:
        auto_select_after: Age beyond which entries are selected on insertion.
            None disables auto-selection.
        clock: Returns the current time; tests inject a fixed clock.
    """

    def __init__(
        self,
        auto_select_after: timedelta | None = DEFAULT_AUTO_SELECT_AFTER,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._entries: list[FolderEntry] = []
        self._paths: set[str] = set()
        self._cursor = 0
        self._auto_select_after = auto_select_after
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FolderEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> FolderEntry:
        return self._entries[index]

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    @property
    def cursor(self) -> int:
        """Index of the highlighted entry, clamped to the valid range."""
        return self._cursor

    @property
    def auto_select_after(self) -> timedelta | None:
        """The auto-select threshold applied on insertion."""
        return self._auto_select_after

    def insert(self, entry: FolderEntry) -> bool:
        """Insert an entry, keeping the collection sorted oldest first.

        The auto-select rule is applied to the new entry. Entries with an
        equal timestamp keep their arrival order.

        Args:
            entry: The entry to add.

        Returns:
            True if inserted, False if an entry with the same path exists.
        """
        if entry.path in self._paths:
            logger.debug("Ignoring duplicate entry: %s", entry.path)
            return False

        if self._auto_select_after is not None and self._is_older_than(
            entry, self._auto_select_after, self._clock()
        ):
            entry.selected = True

        bisect.insort_right(self._entries, entry, key=_sort_key)
        self._paths.add(entry.path)
        return True

    def get(self, path: str) -> FolderEntry | None:
        """Look up an entry by path."""
        if path not in self._paths:
            return None
        for entry in self._entries:
            if entry.path == path:
                return entry
        return None

    def remove(self, path: str) -> FolderEntry | None:
        """Remove an entry by path and keep the cursor in range.

        Returns:
            The removed entry, or None if no entry has that path.
        """
        for index, entry in enumerate(self._entries):
            if entry.path == path:
                del self._entries[index]
                self._paths.discard(path)
                entry.selected = False
                self._clamp_cursor()
                return entry
        return None

    def clear(self) -> None:
        """Drop every entry (scan reset)."""
        self._entries.clear()
        self._paths.clear()
        self._cursor = 0

    def move_cursor(self, delta: int) -> int:
        """Move the cursor by ``delta`` rows, clamped to [0, len - 1].

        Returns:
            The new cursor position.
        """
        self._cursor += delta
        self._clamp_cursor()
        return self._cursor

    def toggle(self, index: int) -> bool:
        """Flip the selection of the entry at ``index``.

        Returns:
            True if an entry was toggled, False if the index is out of range.
        """
        if not 0 <= index < len(self._entries):
            return False
        entry = self._entries[index]
        entry.selected = not entry.selected
        return True

    def select_all(self) -> None:
        """Select every entry."""
        for entry in self._entries:
            entry.selected = True

    def deselect_all(self) -> None:
        """Deselect every entry."""
        for entry in self._entries:
            entry.selected = False

    def deselect(self, path: str) -> bool:
        """Force a single entry to unselected.

        Returns:
            True if the entry exists.
        """
        entry = self.get(path)
        if entry is None:
            return False
        entry.selected = False
        return True

    def auto_select(self, threshold: timedelta | None = None, now: datetime | None = None) -> int:
        """Select every entry strictly older than ``threshold``.

        Entries already selected stay selected; nothing is ever unselected.

        Args:
            threshold: Age limit. Defaults to the registry's auto-select threshold.
            now: Reference time. Defaults to the registry clock.

        Returns:
            Number of entries newly selected.
        """
        threshold = threshold if threshold is not None else self._auto_select_after
        if threshold is None:
            return 0
        now = now or self._clock()

        newly_selected = 0
        for entry in self._entries:
            if not entry.selected and self._is_older_than(entry, threshold, now):
                entry.selected = True
                newly_selected += 1
        return newly_selected

    def selected_count(self) -> int:
        """Number of selected entries."""
        return sum(1 for entry in self._entries if entry.selected)

    def selected_paths(self) -> list[str]:
        """Paths of the selected entries, in registry order."""
        return [entry.path for entry in self._entries if entry.selected]

    def total_selected_size(self) -> int:
        """Total size of the selected entries in bytes."""
        return sum(entry.size_bytes for entry in self._entries if entry.selected)

    def total_size(self) -> int:
        """Total size of all entries in bytes."""
        return sum(entry.size_bytes for entry in self._entries)

    def snapshot(self) -> RegistrySnapshot:
        """Build a read-only copy for rendering."""
        return RegistrySnapshot(
            entries=tuple(replace(entry) for entry in self._entries),
            cursor=self._cursor,
            selected_count=self.selected_count(),
            selected_size=self.total_selected_size(),
            total_size=self.total_size(),
        )

    def _clamp_cursor(self) -> None:
        if not self._entries:
            self._cursor = 0
            return
        self._cursor = max(0, min(self._cursor, len(self._entries) - 1))

    @staticmethod
    def _is_older_than(entry: FolderEntry, threshold: timedelta, now: datetime) -> bool:
        return now - entry.last_modified > threshold
