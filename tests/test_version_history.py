"""Tests for the bounded version history."""

import pytest

from json_workbench.models.errors import HistoryBoundary
from json_workbench.models.history import HistorySnapshot, VersionHistoryItem
from json_workbench.services.version_history import VersionHistory


def filled(count, capacity=50):
    history = VersionHistory(capacity)
    for number in range(count):
        history.append(f"v{number}", created_at=number)
    return history


class TestAppend:
    """Tests for recording snapshots."""

    def test_empty(self):
        history = VersionHistory()
        assert len(history) == 0
        assert history.cursor == -1
        assert history.current is None
        assert not history.can_undo
        assert not history.can_redo

    def test_append_moves_cursor(self):
        history = filled(3)
        assert history.cursor == 2
        assert history.current.content == "v2"
        assert history.current.label == "Edit"

    def test_capacity_evicts_oldest(self):
        history = filled(60)
        assert len(history) == 50
        assert history.cursor == 49
        assert history.items[0].content == "v10"

    def test_append_discards_redo_branch(self):
        history = filled(4)
        history.undo()
        history.undo()
        history.append("branch")
        assert [item.content for item in history.items] == ["v0", "v1", "branch"]
        assert not history.can_redo

    def test_append_item(self):
        history = VersionHistory()
        item = VersionHistoryItem(content="{}", label="File loaded", created_at=5)
        assert history.append(item) is item

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            VersionHistory(0)


class TestUndoRedo:
    """Tests for moving the cursor."""

    def test_undo_and_redo(self):
        history = filled(3)
        assert history.undo().item.content == "v1"
        assert history.undo().item.content == "v0"
        step = history.undo()
        assert not step.moved
        assert step.boundary is HistoryBoundary.NOTHING_TO_UNDO
        assert history.redo().item.content == "v1"

    def test_redo_at_newest(self):
        step = filled(2).redo()
        assert step.item is None
        assert step.boundary is HistoryBoundary.NOTHING_TO_REDO

    def test_empty_history_boundaries(self):
        history = VersionHistory()
        assert history.undo().boundary is HistoryBoundary.NOTHING_TO_UNDO
        assert history.redo().boundary is HistoryBoundary.NOTHING_TO_REDO


class TestRestoreAndSnapshot:
    """Tests for restoring entries and persistence round trips."""

    def test_restore_appends_copy(self):
        history = filled(3)
        restored = history.restore(0)
        assert restored.content == "v0"
        assert restored.label == "Restored"
        assert len(history) == 4
        assert history.cursor == 3

    def test_restore_bad_index(self):
        with pytest.raises(IndexError):
            filled(2).restore(5)

    def test_snapshot_round_trip(self):
        history = filled(5)
        history.undo()
        rebuilt = VersionHistory.from_snapshot(history.snapshot())
        assert rebuilt.items == history.items
        assert rebuilt.cursor == 3

    def test_snapshot_uses_camel_case_alias(self):
        data = filled(1).snapshot().model_dump(by_alias=True)
        assert data["currentVersionIndex"] == 0
        assert data["items"][0]["createdAt"] == 0

    def test_from_snapshot_trims_to_capacity(self):
        snapshot = filled(10).snapshot()
        rebuilt = VersionHistory.from_snapshot(snapshot, capacity=4)
        assert [item.content for item in rebuilt.items] == ["v6", "v7", "v8", "v9"]
        assert rebuilt.cursor == 3

    def test_from_snapshot_clamps_cursor(self):
        items = [VersionHistoryItem(content="a", created_at=1)]
        rebuilt = VersionHistory.from_snapshot(HistorySnapshot(items=items, cursor=7))
        assert rebuilt.cursor == 0

    def test_from_empty_snapshot(self):
        rebuilt = VersionHistory.from_snapshot(HistorySnapshot())
        assert rebuilt.cursor == -1
        assert len(rebuilt) == 0

    def test_clear(self):
        history = filled(3)
        history.clear()
        assert history.cursor == -1
        assert history.current is None
