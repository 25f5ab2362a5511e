"""Optimistic reordering and progress edits with revert-on-failure.

``move`` and ``update_progress`` are pure. ``ReorderCoordinator`` wires them to
a caller-supplied commit hook: the new state is applied right away, the hook
is awaited, and if it raises the inverse change is applied. Moves are not
queued; callers issue one at a time per item.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace

from scope_timeline.models import ScheduledItem, clamp_percent

CommitHook = Callable[[list[ScheduledItem]], "Awaitable[None] | None"]
ApplyHook = Callable[[list[ScheduledItem]], None]


def renumber(items: Sequence[ScheduledItem]) -> list[ScheduledItem]:
    """Reassign order_index 0..n-1 following sequence order."""
    return [
        item if item.order_index == index else replace(item, order_index=index)
        for index, item in enumerate(items)
    ]


def move(items: Sequence[ScheduledItem], from_index: int, to_index: int) -> list[ScheduledItem]:
    """Move one item from *from_index* to *to_index*, renumbering order_index.

    Equal or out-of-range indices leave the order untouched.
    """
    count = len(items)
    if from_index == to_index or not (0 <= from_index < count) or not (0 <= to_index < count):
        return list(items)
    reordered = list(items)
    moved = reordered.pop(from_index)
    reordered.insert(to_index, moved)
    return renumber(reordered)


def update_progress(
    items: Sequence[ScheduledItem], item_id: str, percent: int
) -> list[ScheduledItem]:
    """Return items with *item_id*'s percent complete set (clamped to 0..100)."""
    value = clamp_percent(percent)
    return [
        replace(item, percent_complete=value) if item.id == item_id else item
        for item in items
    ]


def index_of(items: Sequence[ScheduledItem], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


@dataclass(frozen=True)
class ReorderOutcome:
    """Result of an optimistic change: the visible items and whether it stuck."""

    items: list[ScheduledItem]
    committed: bool
    error: Exception | None = None

    @property
    def reverted(self) -> bool:
        return not self.committed and self.error is not None


class ReorderCoordinator:
    """Apply changes optimistically, commit them, compensate on failure."""

    def __init__(self, commit: CommitHook) -> None:
        self._commit = commit

    async def _run_commit(self, items: list[ScheduledItem]) -> None:
        result = self._commit(items)
        if inspect.isawaitable(result):
            await result

    async def reorder(
        self,
        items: Sequence[ScheduledItem],
        from_index: int,
        to_index: int,
        apply: ApplyHook,
    ) -> ReorderOutcome:
        new_items = move(items, from_index, to_index)
        if new_items == list(items):
            return ReorderOutcome(items=new_items, committed=False)

        apply(new_items)
        try:
            await self._run_commit(new_items)
        except Exception as exc:
            restored = move(new_items, to_index, from_index)
            apply(restored)
            return ReorderOutcome(items=restored, committed=False, error=exc)
        return ReorderOutcome(items=new_items, committed=True)

    async def edit_progress(
        self,
        items: Sequence[ScheduledItem],
        item_id: str,
        percent: int,
        apply: ApplyHook,
    ) -> ReorderOutcome:
        index = index_of(items, item_id)
        if index < 0:
            return ReorderOutcome(items=list(items), committed=False)
        previous = items[index].percent_complete
        new_items = update_progress(items, item_id, percent)
        if new_items[index].percent_complete == previous:
            return ReorderOutcome(items=new_items, committed=False)

        apply(new_items)
        try:
            await self._run_commit(new_items)
        except Exception as exc:
            restored = [
                replace(item, percent_complete=previous) if item.id == item_id else item
                for item in new_items
            ]
            apply(restored)
            return ReorderOutcome(items=restored, committed=False, error=exc)
        return ReorderOutcome(items=new_items, committed=True)
