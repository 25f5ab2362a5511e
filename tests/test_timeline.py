"""End-to-end tests for the timeline snapshot."""

from datetime import date

import pytest

from scope_timeline.models import ProjectStatus, ScheduledItem, TimelineWindow
from scope_timeline.timeline import build_timeline, project_duration_days

TODAY = date(2024, 1, 10)

ITEMS = [
    ScheduledItem(id="a", name="Design", order_index=0, planned_start=date(2024, 1, 1),
                  planned_end=date(2024, 1, 5), percent_complete=100),
    ScheduledItem(id="b", name="Build", order_index=1, planned_start=date(2024, 1, 8),
                  planned_end=date(2024, 1, 12), percent_complete=50),
    ScheduledItem(id="c", name="Launch", order_index=2, planned_start=date(2024, 1, 15),
                  planned_end=date(2024, 1, 19), percent_complete=0),
]


class TestBuildTimeline:
    def test_three_scope_project(self):
        snapshot = build_timeline(ITEMS, due=date(2024, 1, 19), today=TODAY)

        assert snapshot.window == TimelineWindow(date(2024, 1, 1), date(2024, 1, 21))
        assert len(snapshot.grid.columns) == 3
        assert snapshot.progress == 50
        assert snapshot.status == ProjectStatus.IN_PROGRESS
        assert snapshot.total_mandays == 15
        assert snapshot.today_percent == pytest.approx(45.0)
        assert snapshot.start == date(2024, 1, 1)
        assert [row.bars.planned.left_percent for row in snapshot.rows] == pytest.approx([0, 35, 70])

    def test_rows_follow_input_order(self):
        snapshot = build_timeline(list(reversed(ITEMS)), today=TODAY)
        assert [row.item.id for row in snapshot.rows] == ["c", "b", "a"]

    def test_empty_project(self):
        snapshot = build_timeline([], today=TODAY)
        assert snapshot.progress == 0
        assert snapshot.status == ProjectStatus.NOT_STARTED
        assert snapshot.today_percent is None
        assert snapshot.rows == ()

    def test_overdue_rows_counted(self):
        late = ScheduledItem(id="x", planned_start=date(2024, 1, 1), planned_end=date(2024, 1, 5),
                             actual_start=date(2024, 1, 1), actual_end=date(2024, 1, 9), percent_complete=100)
        snapshot = build_timeline([late, *ITEMS], today=TODAY)
        assert snapshot.overdue_count == 1

    def test_past_due_is_at_risk(self):
        snapshot = build_timeline(ITEMS, due=date(2024, 1, 19), today=date(2024, 1, 25))
        assert snapshot.status == ProjectStatus.AT_RISK
        assert snapshot.today_percent is None

    def test_holidays_reduce_mandays(self):
        snapshot = build_timeline(ITEMS, today=TODAY, excluded=["2024-01-02"])
        assert snapshot.total_mandays == 14


class TestProjectDuration:
    def test_inclusive(self):
        assert project_duration_days(date(2024, 1, 1), date(2024, 1, 19)) == 19

    def test_reversed_or_invalid(self):
        assert project_duration_days(date(2024, 1, 19), date(2024, 1, 1)) == 0
        assert project_duration_days("bad", date(2024, 1, 1)) == 0
        assert project_duration_days(None, None) == 0
