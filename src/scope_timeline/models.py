"""Data models for Scope Timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class ProjectStatus(Enum):
    """Lifecycle state inferred for a project or scope."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    AT_RISK = "at_risk"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ProjectStatus.NOT_STARTED: "Not Started",
    ProjectStatus.IN_PROGRESS: "In Progress",
    ProjectStatus.COMPLETED: "Completed",
    ProjectStatus.AT_RISK: "To Review",
}


class ProgressColor(Enum):
    """Colour tier of a bar, derived from percent complete."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    OVERDUE = "overdue"


DATE_FORMAT_PRESETS: dict[str, str] = {
    "YYYY-MM-DD": "%Y-%m-%d",
    "DD/MM/YY": "%d/%m/%y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "MMM DD, YYYY": "%b %d, %Y",
}
DEFAULT_DATE_FORMAT = "DD/MM/YY"


def format_date(d: date | None, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Format a date for display. Returns '-' for None."""
    if d is None:
        return "-"
    fmt = DATE_FORMAT_PRESETS.get(date_format)
    if fmt is None:
        return d.isoformat()
    return d.strftime(fmt)


def clamp_percent(value: Any) -> int:
    """Coerce a percent-complete value into an int in [0, 100]. Garbage → 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    if number <= 0:
        return 0
    if number >= 100:
        return 100
    return int(number + 0.5)


@dataclass(frozen=True)
class ScheduledItem:
    """One scope of planned work. Edit with dataclasses.replace()."""

    id: str
    name: str = ""
    order_index: int = 0
    planned_start: date | None = None
    planned_end: date | None = None
    actual_start: date | None = None
    actual_end: date | None = None
    percent_complete: int = 0
    mandays_planned: int | None = None  # None = derive from planned dates
    mandays_actual: int | None = None

    @property
    def progress(self) -> int:
        """Percent complete clamped into [0, 100]."""
        return clamp_percent(self.percent_complete)

    @property
    def has_actual(self) -> bool:
        return self.actual_start is not None and self.actual_end is not None


@dataclass(frozen=True)
class TimelineWindow:
    """Date span rendered by a chart, Monday..Sunday aligned."""

    start: date
    end: date

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days

    @property
    def week_count(self) -> int:
        return (self.total_days + 6) // 7 if self.total_days > 0 else 1


@dataclass(frozen=True)
class TimeColumn:
    """One week column of the timeline grid."""

    week_start: date
    label: str


@dataclass(frozen=True)
class MonthBand:
    """Header band grouping consecutive week columns of the same month."""

    label: str
    column_count: int
    first_column_index: int


@dataclass(frozen=True)
class TimeGrid:
    """Week columns plus the month bands spanning them."""

    columns: tuple[TimeColumn, ...] = ()
    bands: tuple[MonthBand, ...] = ()


@dataclass(frozen=True)
class BarGeometry:
    """Horizontal placement of a bar as percentages of the timeline width."""

    left_percent: float = 0.0
    width_percent: float = 0.0

    @property
    def right_percent(self) -> float:
        return self.left_percent + self.width_percent

    @property
    def is_empty(self) -> bool:
        return self.width_percent <= 0


@dataclass
class ParseWarning:
    """A warning generated while reading item records."""

    source: str
    index: int
    message: str

    def __str__(self) -> str:
        return f"{self.source}[{self.index}]: {self.message}"


@dataclass
class ItemSet:
    """Items read from one source, with the warnings raised on the way."""

    source: str
    items: list[ScheduledItem] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    def find(self, item_id: str) -> ScheduledItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
