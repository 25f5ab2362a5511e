"""Calendar helpers: date coercion, week alignment and business-day counting."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any

from scope_timeline.models import ScheduledItem

MONDAY = 0
SATURDAY = 5


def coerce_date(value: Any) -> date | None:
    """Turn a date, datetime or ISO-8601 string into a date. Anything else → None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def normalize_dates(values: Iterable[Any] | None) -> frozenset[date]:
    """Reduce an iterable of date-likes to a set of calendar dates, dropping junk."""
    if not values:
        return frozenset()
    result = set()
    for value in values:
        d = coerce_date(value)
        if d is not None:
            result.add(d)
    return frozenset(result)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from *start* to *end* (negative when end is earlier)."""
    return (end - start).days


def start_of_week(d: date) -> date:
    """Monday of the week containing *d*."""
    return d - timedelta(days=(d.weekday() - MONDAY) % 7)


def end_of_week(d: date) -> date:
    """Sunday of the week containing *d*."""
    return start_of_week(d) + timedelta(days=6)


def is_business_day(d: date, excluded: frozenset[date] | set[date] = frozenset()) -> bool:
    return d.weekday() < SATURDAY and d not in excluded


def business_days(
    start: Any,
    end: Any,
    excluded: Iterable[Any] | None = None,
) -> int:
    """Count Mon–Fri days in [start, end] inclusive, skipping *excluded* dates.

    Returns 0 for unparseable dates or a reversed range.
    """
    start_date = coerce_date(start)
    end_date = coerce_date(end)
    if start_date is None or end_date is None or end_date < start_date:
        return 0

    skip = normalize_dates(excluded)
    count = 0
    current = start_date
    one_day = timedelta(days=1)
    while current <= end_date:
        if is_business_day(current, skip):
            count += 1
        current += one_day
    return count


def item_mandays(item: ScheduledItem, excluded: Iterable[Any] | None = None) -> int:
    """Planned mandays: the stored value when present, otherwise derived from dates."""
    if item.mandays_planned is not None:
        return max(0, item.mandays_planned)
    return business_days(item.planned_start, item.planned_end, excluded)


def item_actual_mandays(item: ScheduledItem, excluded: Iterable[Any] | None = None) -> int:
    """Actual mandays: the stored value when present, otherwise derived from dates."""
    if item.mandays_actual is not None:
        return max(0, item.mandays_actual)
    return business_days(item.actual_start, item.actual_end, excluded)
