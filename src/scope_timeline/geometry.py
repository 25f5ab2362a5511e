"""Bar geometry for Gantt-style charts.

Every position is a percentage of the timeline window width. Bars are clamped
so that ``0 <= left_percent <= 100`` and ``left_percent + width_percent <= 100``;
a reversed or incomplete date range degrades to a zero-width bar instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from scope_timeline.business_days import coerce_date, days_between
from scope_timeline.models import (
    BarGeometry,
    ProgressColor,
    ScheduledItem,
    TimelineWindow,
    clamp_percent,
)

LOW_THRESHOLD = 25
MEDIUM_THRESHOLD = 80

EMPTY_BAR = BarGeometry(0.0, 0.0)


def bar_between(start: Any, end: Any, window: TimelineWindow) -> BarGeometry:
    """Geometry of a bar covering [start, end] inclusive inside *window*."""
    total_days = window.total_days
    start_date = coerce_date(start)
    end_date = coerce_date(end)
    if total_days <= 0 or start_date is None or end_date is None:
        return EMPTY_BAR

    offset = max(0, days_between(window.start, start_date))
    duration = max(0, days_between(start_date, end_date) + 1)

    left = min(100.0, offset / total_days * 100)
    width = max(0.0, min(100.0 - left, duration / total_days * 100))
    return BarGeometry(left_percent=left, width_percent=width)


def planned_bar(item: ScheduledItem, window: TimelineWindow) -> BarGeometry:
    return bar_between(item.planned_start, item.planned_end, window)


def actual_bar(item: ScheduledItem, window: TimelineWindow) -> BarGeometry | None:
    """Geometry of the actual bar, or None when the item has not been executed."""
    if coerce_date(item.actual_start) is None or coerce_date(item.actual_end) is None:
        return None
    return bar_between(item.actual_start, item.actual_end, window)


def is_overdue(item: ScheduledItem) -> bool:
    """True when the item actually finished (or is finishing) after its planned end."""
    actual_end = coerce_date(item.actual_end)
    planned_end = coerce_date(item.planned_end)
    return actual_end is not None and planned_end is not None and actual_end > planned_end


def progress_color(percent: Any) -> ProgressColor:
    """Three-tier colour from percent complete: ≤25 low, ≤80 medium, else high."""
    value = clamp_percent(percent)
    if value <= LOW_THRESHOLD:
        return ProgressColor.LOW
    if value <= MEDIUM_THRESHOLD:
        return ProgressColor.MEDIUM
    return ProgressColor.HIGH


def today_percent(window: TimelineWindow, today: date | None = None) -> float | None:
    """Position of the today marker, or None when it should not be drawn."""
    total_days = window.total_days
    if total_days <= 0:
        return None
    now = today or date.today()
    percent = days_between(window.start, now) / total_days * 100
    if percent < 0 or percent > 100:
        return None
    return percent


@dataclass(frozen=True)
class ItemBars:
    """Everything a renderer needs to paint one item's row."""

    planned: BarGeometry
    actual: BarGeometry | None
    is_overdue: bool
    color: ProgressColor
    progress: int

    @property
    def display_color(self) -> ProgressColor:
        """Colour tier with the overdue override applied."""
        if self.is_overdue and self.actual is not None:
            return ProgressColor.OVERDUE
        return self.color

    @property
    def progress_fill(self) -> BarGeometry | None:
        """Part of the actual bar filled by progress (left aligned inside it)."""
        if self.actual is None:
            return None
        return BarGeometry(
            left_percent=self.actual.left_percent,
            width_percent=self.actual.width_percent * self.progress / 100,
        )


def compute_bars(item: ScheduledItem, window: TimelineWindow) -> ItemBars:
    return ItemBars(
        planned=planned_bar(item, window),
        actual=actual_bar(item, window),
        is_overdue=is_overdue(item),
        color=progress_color(item.percent_complete),
        progress=item.progress,
    )
