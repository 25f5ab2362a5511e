"""Resolve the week-aligned timeline window spanned by a set of items."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from scope_timeline.business_days import coerce_date, end_of_week, start_of_week
from scope_timeline.models import ScheduledItem, TimelineWindow


def collect_dates(
    items: Iterable[ScheduledItem],
    explicit_start: Any = None,
    explicit_end: Any = None,
    include_actual: bool = False,
) -> list[date]:
    """Gather every valid date that should fit inside the timeline."""
    raw: list[Any] = []
    for item in items:
        raw.append(item.planned_start)
        raw.append(item.planned_end)
        if include_actual:
            raw.append(item.actual_start)
            raw.append(item.actual_end)
    raw.append(explicit_start)
    raw.append(explicit_end)

    dates: list[date] = []
    for value in raw:
        d = coerce_date(value)
        if d is not None:
            dates.append(d)
    return dates


def raw_bounds(
    items: Iterable[ScheduledItem],
    explicit_start: Any = None,
    explicit_end: Any = None,
    include_actual: bool = False,
) -> tuple[date, date] | None:
    """Earliest and latest candidate date, before week expansion. None if there are none."""
    dates = collect_dates(items, explicit_start, explicit_end, include_actual)
    if not dates:
        return None
    return min(dates), max(dates)


def resolve_bounds(
    items: Iterable[ScheduledItem],
    explicit_start: Any = None,
    explicit_end: Any = None,
    include_actual: bool = False,
    today: date | None = None,
) -> TimelineWindow:
    """Compute the timeline window, expanded outward to Monday..Sunday.

    With no usable dates at all the window collapses to a single point at
    *today*.
    """
    bounds = raw_bounds(items, explicit_start, explicit_end, include_actual)
    if bounds is None:
        now = today or date.today()
        return TimelineWindow(start=now, end=now)
    earliest, latest = bounds
    return TimelineWindow(start=start_of_week(earliest), end=end_of_week(latest))
