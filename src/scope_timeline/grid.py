"""Build the week columns and month header bands of a timeline."""

from __future__ import annotations

from datetime import timedelta

from scope_timeline.models import MonthBand, TimeColumn, TimeGrid, TimelineWindow

COLUMN_LABEL_FORMAT = "%b %d"  # e.g. "Jan 08"
BAND_LABEL_FORMAT = "%b %Y"  # e.g. "Jan 2024"
WEEK = timedelta(days=7)


def build_columns(window: TimelineWindow) -> list[TimeColumn]:
    """One column per 7-day step from window.start through window.end."""
    columns: list[TimeColumn] = []
    cur = window.start
    while cur <= window.end:
        columns.append(TimeColumn(week_start=cur, label=cur.strftime(COLUMN_LABEL_FORMAT)))
        cur += WEEK
    return columns


def group_bands(columns: list[TimeColumn]) -> list[MonthBand]:
    """Merge consecutive columns that share a month+year into bands."""
    bands: list[MonthBand] = []
    for index, column in enumerate(columns):
        label = column.week_start.strftime(BAND_LABEL_FORMAT)
        if bands and bands[-1].label == label:
            last = bands[-1]
            bands[-1] = MonthBand(label, last.column_count + 1, last.first_column_index)
        else:
            bands.append(MonthBand(label=label, column_count=1, first_column_index=index))
    return bands


def build_grid(window: TimelineWindow) -> TimeGrid:
    columns = build_columns(window)
    return TimeGrid(columns=tuple(columns), bands=tuple(group_bands(columns)))
