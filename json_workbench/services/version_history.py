"""Bounded linear version history with undo and redo."""

import logging
from typing import List, Optional, Tuple, Union

from ..models.errors import HistoryBoundary
from ..models.history import HistorySnapshot, HistoryStep, VersionHistoryItem, now_millis

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class VersionHistory:
    """Snapshots of the document, oldest first, with a cursor on the current one.

    Appending while the cursor is behind the newest entry discards the redo
    branch. When the history grows past ``capacity`` the oldest entries are
    evicted and the cursor shifts with them. Reaching either end of the
    history is reported through :class:`HistoryStep`, never raised.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._items: List[VersionHistoryItem] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[VersionHistoryItem, ...]:
        return tuple(self._items)

    @property
    def cursor(self) -> int:
        """Index of the current snapshot, -1 when the history is empty."""
        return self._cursor

    @property
    def current(self) -> Optional[VersionHistoryItem]:
        if self._cursor < 0:
            return None
        return self._items[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._items) - 1

    def append(
        self,
        snapshot: Union[str, VersionHistoryItem],
        label: str = "Edit",
        created_at: Optional[int] = None,
    ) -> VersionHistoryItem:
        """Record a new snapshot and make it current.

        Args:
            snapshot: Serialized document text, or a ready-made history item
            label: Tag for text snapshots, e.g. "File loaded"
            created_at: Epoch milliseconds for text snapshots; defaults to now

        Returns:
            The stored item
        """
        if isinstance(snapshot, VersionHistoryItem):
            item = snapshot
        else:
            item = VersionHistoryItem(
                content=snapshot,
                label=label,
                created_at=now_millis() if created_at is None else created_at,
            )

        del self._items[self._cursor + 1:]
        self._items.append(item)
        self._cursor = len(self._items) - 1
        self._evict_overflow()
        return item

    def _evict_overflow(self) -> None:
        overflow = len(self._items) - self.capacity
        if overflow > 0:
            del self._items[:overflow]
            self._cursor = max(self._cursor - overflow, 0)
            logger.debug("Evicted %d history entries", overflow)

    def undo(self) -> HistoryStep:
        """Move back one snapshot."""
        if not self.can_undo:
            return HistoryStep(boundary=HistoryBoundary.NOTHING_TO_UNDO)
        self._cursor -= 1
        return HistoryStep(item=self._items[self._cursor])

    def redo(self) -> HistoryStep:
        """Move forward one snapshot."""
        if not self.can_redo:
            return HistoryStep(boundary=HistoryBoundary.NOTHING_TO_REDO)
        self._cursor += 1
        return HistoryStep(item=self._items[self._cursor])

    def restore(self, index: int) -> VersionHistoryItem:
        """Append a copy of an earlier snapshot as the newest entry.

        Raises:
            IndexError: If ``index`` does not name an entry
        """
        if not 0 <= index < len(self._items):
            raise IndexError(f"No history entry at index {index} (entries: {len(self._items)})")
        return self.append(self._items[index].content, label="Restored")

    def clear(self) -> None:
        self._items.clear()
        self._cursor = -1

    def snapshot(self) -> HistorySnapshot:
        """Export items and cursor for persistence."""
        return HistorySnapshot(items=list(self._items), cursor=self._cursor)

    @classmethod
    def from_snapshot(cls, snapshot: HistorySnapshot, capacity: int = DEFAULT_CAPACITY) -> "VersionHistory":
        """Rebuild a history, trimming it to ``capacity`` like an overflowing append."""
        history = cls(capacity)
        history._items = list(snapshot.items)
        if not history._items:
            return history
        history._cursor = min(max(snapshot.cursor, 0), len(history._items) - 1)
        history._evict_overflow()
        return history
