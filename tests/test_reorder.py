"""Tests for reordering, progress edits and the optimistic coordinator."""

import pytest

from scope_timeline.models import ScheduledItem
from scope_timeline.reorder import (
    ReorderCoordinator,
    index_of,
    move,
    renumber,
    update_progress,
)


def _items(*ids):
    return [ScheduledItem(id=i, name=i.upper(), order_index=n) for n, i in enumerate(ids)]


def _ids(items):
    return [item.id for item in items]


class TestMove:
    def test_move_forward(self):
        result = move(_items("a", "b", "c", "d"), 0, 2)
        assert _ids(result) == ["b", "c", "a", "d"]
        assert [item.order_index for item in result] == [0, 1, 2, 3]

    def test_move_to_front(self):
        assert _ids(move(_items("a", "b", "c", "d"), 3, 0)) == ["d", "a", "b", "c"]

    @pytest.mark.parametrize("src,dst", [(1, 1), (0, 4), (4, 0), (-1, 2), (2, -1)])
    def test_noop_moves(self, src, dst):
        items = _items("a", "b", "c", "d")
        result = move(items, src, dst)
        assert result == items
        assert result is not items

    def test_move_is_reversible(self):
        items = _items("a", "b", "c", "d", "e")
        for src in range(len(items)):
            for dst in range(len(items)):
                assert move(move(items, src, dst), dst, src) == items

    def test_input_not_mutated(self):
        items = _items("a", "b", "c")
        move(items, 0, 2)
        assert _ids(items) == ["a", "b", "c"]
        assert [item.order_index for item in items] == [0, 1, 2]

    def test_renumber_keeps_unchanged_items(self):
        items = _items("a", "b")
        renumbered = renumber(items)
        assert renumbered[0] is items[0]
        assert renumber(list(reversed(items)))[0].order_index == 0


class TestUpdateProgress:
    def test_sets_value(self):
        result = update_progress(_items("a", "b"), "b", 60)
        assert [item.percent_complete for item in result] == [0, 60]

    def test_clamps(self):
        assert update_progress(_items("a"), "a", 140)[0].percent_complete == 100
        assert update_progress(_items("a"), "a", -5)[0].percent_complete == 0

    def test_index_of(self):
        items = _items("a", "b")
        assert index_of(items, "b") == 1
        assert index_of(items, "zzz") == -1


class _Recorder:
    def __init__(self):
        self.states = []

    def __call__(self, items):
        self.states.append(_ids(items))


class TestReorderCoordinator:
    @pytest.mark.asyncio
    async def test_successful_commit(self):
        committed = []

        async def commit(items):
            committed.append(_ids(items))

        applied = _Recorder()
        outcome = await ReorderCoordinator(commit).reorder(_items("a", "b", "c"), 0, 2, applied)

        assert outcome.committed
        assert not outcome.reverted
        assert _ids(outcome.items) == ["b", "c", "a"]
        assert applied.states == [["b", "c", "a"]]
        assert committed == [["b", "c", "a"]]

    @pytest.mark.asyncio
    async def test_failed_commit_reverts(self):
        async def commit(items):
            raise OSError("disk full")

        applied = _Recorder()
        items = _items("a", "b", "c")
        outcome = await ReorderCoordinator(commit).reorder(items, 0, 2, applied)

        assert not outcome.committed
        assert outcome.reverted
        assert isinstance(outcome.error, OSError)
        assert outcome.items == items
        assert applied.states == [["b", "c", "a"], ["a", "b", "c"]]

    @pytest.mark.asyncio
    async def test_sync_commit_hook(self):
        calls = []
        outcome = await ReorderCoordinator(calls.append).reorder(_items("a", "b"), 1, 0, _Recorder())
        assert outcome.committed
        assert _ids(calls[0]) == ["b", "a"]

    @pytest.mark.asyncio
    async def test_noop_skips_commit(self):
        calls = []
        applied = _Recorder()
        outcome = await ReorderCoordinator(calls.append).reorder(_items("a", "b"), 1, 1, applied)
        assert not outcome.committed
        assert not outcome.reverted
        assert calls == []
        assert applied.states == []

    @pytest.mark.asyncio
    async def test_edit_progress_commit(self):
        calls = []
        values = []
        outcome = await ReorderCoordinator(calls.append).edit_progress(
            _items("a", "b"), "a", 40, lambda items: values.append(items[0].percent_complete)
        )
        assert outcome.committed
        assert outcome.items[0].percent_complete == 40
        assert values == [40]

    @pytest.mark.asyncio
    async def test_edit_progress_revert_restores_previous(self):
        def commit(items):
            raise PermissionError("read-only")

        items = [ScheduledItem(id="a", percent_complete=30)]
        values = []
        outcome = await ReorderCoordinator(commit).edit_progress(
            items, "a", 70, lambda new: values.append(new[0].percent_complete)
        )
        assert outcome.reverted
        assert outcome.items[0].percent_complete == 30
        assert values == [70, 30]

    @pytest.mark.asyncio
    async def test_edit_progress_unknown_id(self):
        calls = []
        outcome = await ReorderCoordinator(calls.append).edit_progress(
            _items("a"), "missing", 50, _Recorder()
        )
        assert not outcome.committed
        assert calls == []

    @pytest.mark.asyncio
    async def test_edit_progress_same_value_is_noop(self):
        calls = []
        items = [ScheduledItem(id="a", percent_complete=50)]
        outcome = await ReorderCoordinator(calls.append).edit_progress(items, "a", 50, _Recorder())
        assert not outcome.committed
        assert calls == []
