"""Infer a lifecycle status from progress and dates."""

from __future__ import annotations

from datetime import date
from typing import Any

from scope_timeline.business_days import coerce_date, days_between
from scope_timeline.models import ProjectStatus, clamp_percent

# Deadline within this many days and progress below the threshold → at risk.
AT_RISK_WINDOW_DAYS = 2
AT_RISK_PROGRESS_THRESHOLD = 80


def infer_status(
    percent_complete: Any,
    start_date: Any = None,
    due_date: Any = None,
    today: date | None = None,
) -> ProjectStatus:
    """Map progress and dates to a ProjectStatus. First matching rule wins.

    1. complete (>= 100)                                   → COMPLETED
    2. due date already passed                             → AT_RISK
    3. due within AT_RISK_WINDOW_DAYS and progress < 80    → AT_RISK
    4. not started yet, before start date, 0%              → NOT_STARTED
    5. 0%                                                  → NOT_STARTED
    6. otherwise                                           → IN_PROGRESS

    Missing or unparseable dates simply disable the rules that need them.
    """
    percent = clamp_percent(percent_complete)
    now = today or date.today()
    start = coerce_date(start_date)
    due = coerce_date(due_date)

    if percent >= 100:
        return ProjectStatus.COMPLETED

    if due is not None:
        days_remaining = days_between(now, due)
        if days_remaining < 0:
            return ProjectStatus.AT_RISK
        if percent < AT_RISK_PROGRESS_THRESHOLD and days_remaining <= AT_RISK_WINDOW_DAYS:
            return ProjectStatus.AT_RISK

    if start is not None and now < start and percent == 0:
        return ProjectStatus.NOT_STARTED

    if percent <= 0:
        return ProjectStatus.NOT_STARTED

    return ProjectStatus.IN_PROGRESS
