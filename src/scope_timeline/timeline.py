"""One-call snapshot of everything a timeline screen displays."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from scope_timeline.bounds import raw_bounds, resolve_bounds
from scope_timeline.business_days import coerce_date, days_between, item_actual_mandays, item_mandays, normalize_dates
from scope_timeline.geometry import ItemBars, compute_bars, today_percent
from scope_timeline.grid import build_grid
from scope_timeline.models import ProjectStatus, ScheduledItem, TimeGrid, TimelineWindow
from scope_timeline.progress import aggregate
from scope_timeline.status import infer_status


@dataclass(frozen=True)
class TimelineRow:
    item: ScheduledItem
    bars: ItemBars
    mandays: int
    actual_mandays: int


@dataclass(frozen=True)
class TimelineSnapshot:
    window: TimelineWindow
    grid: TimeGrid
    rows: tuple[TimelineRow, ...]
    today: date
    today_percent: float | None
    progress: int
    status: ProjectStatus
    start: date | None
    due: date | None

    @property
    def total_mandays(self) -> int:
        return sum(row.mandays for row in self.rows)

    @property
    def overdue_count(self) -> int:
        return sum(1 for row in self.rows if row.bars.is_overdue)


def project_duration_days(start: Any, due: Any) -> int:
    """Inclusive calendar days from start to due; 0 when invalid or reversed."""
    start_date = coerce_date(start)
    due_date = coerce_date(due)
    if start_date is None or due_date is None:
        return 0
    return max(0, days_between(start_date, due_date) + 1)


def build_timeline(
    items: Sequence[ScheduledItem],
    start: Any = None,
    due: Any = None,
    include_actual: bool = True,
    today: date | None = None,
    excluded: Iterable[Any] | None = None,
) -> TimelineSnapshot:
    """Resolve window, grid, per-item bars, progress and status in one pass.

    *start*/*due* are the project-level dates. When absent, status inference
    falls back to the earliest planned start and latest planned end.
    """
    now = today or date.today()
    skip = normalize_dates(excluded)
    start_date = coerce_date(start)
    due_date = coerce_date(due)

    window = resolve_bounds(items, start_date, due_date, include_actual, today=now)
    grid = build_grid(window)
    rows = tuple(
        TimelineRow(
            item=item,
            bars=compute_bars(item, window),
            mandays=item_mandays(item, skip),
            actual_mandays=item_actual_mandays(item, skip),
        )
        for item in items
    )

    progress = aggregate(items)
    status_start, status_due = start_date, due_date
    planned = raw_bounds(items)
    if planned is not None:
        status_start = status_start or planned[0]
        status_due = status_due or planned[1]
    status = infer_status(progress, status_start, status_due, today=now)

    return TimelineSnapshot(
        window=window,
        grid=grid,
        rows=rows,
        today=now,
        today_percent=today_percent(window, now),
        progress=progress,
        status=status,
        start=status_start,
        due=status_due,
    )
