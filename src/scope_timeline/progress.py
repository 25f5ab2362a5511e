"""Aggregate per-scope progress into one project figure."""

from __future__ import annotations

import math
from collections.abc import Iterable

from scope_timeline.models import ScheduledItem, clamp_percent


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate(items: Iterable[ScheduledItem]) -> int:
    """Simple mean of clamped percent-complete values, rounded half-up.

    Every scope counts equally regardless of its duration. Empty input → 0.
    """
    values = [clamp_percent(item.percent_complete) for item in items]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
