"""Weekly burnup series and schedule-performance metrics.

Effort is measured in mandays (business days). Planned effort accrues either
per scope (each scope's mandays spread over its own business days) or linearly
over the whole project window. Actual effort is each scope's completed share
(percent complete × mandays) spread evenly over the calendar days from its
start up to today or its end, whichever comes first.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from scope_timeline.business_days import (
    business_days,
    coerce_date,
    days_between,
    item_mandays,
    normalize_dates,
    start_of_week,
)
from scope_timeline.models import ScheduledItem

PLANNED_MODES = ("scope", "linear")

ON_TRACK_LOW = 0.95
ON_TRACK_HIGH = 1.05


@dataclass(frozen=True)
class BurnupPoint:
    """Cumulative planned/actual effort at the end of one week."""

    week_start: date
    week_end: date
    label: str
    planned: float
    actual: float
    scope: float
    scope_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class BurnupMetrics:
    completion_percent: float
    spi: float
    velocity: float
    remaining_work: float
    weeks_remaining: int
    projected_completion: date | None
    schedule_variance: float
    days_ahead_behind: int

    @property
    def is_ahead(self) -> bool:
        return self.spi > 1

    @property
    def is_on_track(self) -> bool:
        return ON_TRACK_LOW <= self.spi <= ON_TRACK_HIGH

    @property
    def is_behind(self) -> bool:
        return self.spi < ON_TRACK_LOW


def _planned_range(item: ScheduledItem) -> tuple[date, date] | None:
    start = coerce_date(item.planned_start)
    end = coerce_date(item.planned_end)
    if start is None or end is None:
        return None
    return start, end


def total_planned_effort(
    items: Iterable[ScheduledItem], excluded: Iterable[Any] | None = None
) -> float:
    """Sum of planned mandays across all scopes."""
    return float(sum(item_mandays(item, excluded) for item in items))


def planned_by_scope(
    items: Sequence[ScheduledItem], on: date, excluded: frozenset[date] = frozenset()
) -> float:
    total = 0.0
    for item in items:
        span = _planned_range(item)
        if span is None:
            continue
        start, end = span
        if on < start:
            continue
        mandays = item_mandays(item, excluded)
        if on >= end:
            total += mandays
            continue
        denom = max(1, business_days(start, end, excluded))
        elapsed = max(0, min(denom, business_days(start, on, excluded)))
        total += mandays * (elapsed / denom)
    return total


def planned_linear(
    total_planned: float,
    window_start: date,
    window_end: date,
    on: date,
    excluded: frozenset[date] = frozenset(),
) -> float:
    total_md = max(1, business_days(window_start, window_end, excluded))
    elapsed = max(0, min(total_md, business_days(window_start, on, excluded)))
    return total_planned * (elapsed / total_md)


def actual_completed(
    items: Sequence[ScheduledItem],
    on: date,
    today: date,
    excluded: frozenset[date] = frozenset(),
) -> float:
    total = 0.0
    for item in items:
        span = _planned_range(item)
        if span is None:
            continue
        start, end = span
        if on < start:
            continue
        completed = item.progress / 100 * item_mandays(item, excluded)
        active_end = min(end, today)
        if on <= active_end:
            denom = max(1, days_between(start, active_end) + 1)
            fraction = min(1.0, (days_between(start, on) + 1) / denom)
            total += completed * fraction
        else:
            total += completed
    return total


def _week_label(week_start: date, week_end: date) -> str:
    return f"{week_start.strftime('%d/%m')}–{week_end.strftime('%d/%m')}"


def burnup_series(
    items: Sequence[ScheduledItem],
    window_start: Any,
    window_end: Any,
    mode: str = "scope",
    today: date | None = None,
    excluded: Iterable[Any] | None = None,
) -> list[BurnupPoint]:
    """One cumulative point per week from the Monday before *window_start*.

    Returns an empty list when the window is unparseable.
    """
    start = coerce_date(window_start)
    end = coerce_date(window_end)
    if start is None or end is None:
        return []
    if mode not in PLANNED_MODES:
        mode = "scope"

    now = today or date.today()
    skip = normalize_dates(excluded)
    total_planned = total_planned_effort(items, skip)
    points: list[BurnupPoint] = []

    week_start = start_of_week(start)
    while week_start <= end:
        week_last_day = week_start + timedelta(days=6)
        week_end = min(week_last_day, end)

        if mode == "linear":
            planned = planned_linear(total_planned, start, end, week_end, skip)
        else:
            planned = planned_by_scope(items, week_end, skip)
        actual = actual_completed(items, week_end, now, skip)

        names = []
        for item in items:
            span = _planned_range(item)
            if span is None or not item.name:
                continue
            if not (week_last_day < span[0] or week_start > span[1]):
                names.append(item.name)

        points.append(
            BurnupPoint(
                week_start=week_start,
                week_end=week_end,
                label=_week_label(week_start, week_end),
                planned=round(planned, 2),
                actual=round(actual, 2),
                scope=total_planned,
                scope_names=tuple(names),
            )
        )
        week_start += timedelta(days=7)
    return points


def burnup_metrics(
    series: Sequence[BurnupPoint],
    total_planned: float,
    window_start: Any,
    window_end: Any,
    today: date | None = None,
) -> BurnupMetrics | None:
    """Completion, SPI, velocity and a projected finish from a burnup series."""
    start = coerce_date(window_start)
    end = coerce_date(window_end)
    if start is None or end is None:
        return None

    now = today or date.today()
    latest = series[-1] if series else None
    current_actual = latest.actual if latest else 0.0
    current_planned = latest.planned if latest else 0.0

    completion = current_actual / total_planned * 100 if total_planned > 0 else 0.0
    spi = current_actual / current_planned if current_planned > 0 else 0.0
    velocity = current_actual / len(series) if series else 0.0
    remaining = max(0.0, total_planned - current_actual)

    weeks_remaining = 0
    projected: date | None = None
    if velocity > 0 and remaining > 0:
        weeks_remaining = math.ceil(remaining / velocity)
        projected = now + timedelta(weeks=weeks_remaining)

    variance = current_actual - current_planned
    days_ahead_behind = 0
    if current_planned > 0:
        days_ahead_behind = math.floor(
            variance / current_planned * days_between(start, end) + 0.5
        )

    return BurnupMetrics(
        completion_percent=completion,
        spi=spi,
        velocity=velocity,
        remaining_work=remaining,
        weeks_remaining=weeks_remaining,
        projected_completion=projected,
        schedule_variance=variance,
        days_ahead_behind=days_ahead_behind,
    )
