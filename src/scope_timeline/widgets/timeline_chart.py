"""Timeline (Gantt) chart widget.

Paints a TimelineSnapshot: month bands, week columns, and two lines per scope
(planned bar, actual bar with progress fill). All positions come from the
engine as percentages; this widget only maps them onto terminal cells.
"""

from __future__ import annotations

from rich.segment import Segment
from rich.style import Style
from textual.strip import Strip
from textual.widget import Widget

from scope_timeline.models import BarGeometry, ProgressColor, format_date
from scope_timeline.timeline import TimelineRow, TimelineSnapshot

NAME_WIDTH = 28
HEADER_LINES = 2
LINES_PER_ROW = 2

PROGRESS_COLORS: dict[ProgressColor, str] = {
    ProgressColor.LOW: "#ef4444",
    ProgressColor.MEDIUM: "#f59e0b",
    ProgressColor.HIGH: "#10b981",
    ProgressColor.OVERDUE: "#dc2626",
}
PLANNED_COLOR = "#2563eb"
TODAY_COLOR = "#ef4444"
BAND_BG = "#1e293b"
HIGHLIGHT_BG = "#334155"


def bar_cells(geometry: BarGeometry | None, width: int) -> tuple[int, int]:
    """Map a percentage bar onto [start, end) cell indices of a *width*-cell track.

    A non-empty bar always covers at least one cell.
    """
    if geometry is None or width <= 0 or geometry.is_empty:
        return (0, 0)
    start = min(width - 1, int(geometry.left_percent / 100 * width))
    end = int(round(geometry.right_percent / 100 * width))
    end = min(width, max(start + 1, end))
    return (start, end)


def marker_cell(percent: float | None, width: int) -> int:
    """Cell index of the today marker, -1 when it is not drawn."""
    if percent is None or width <= 0:
        return -1
    return min(width - 1, int(percent / 100 * width))


class TimelineChart(Widget):
    """Scope rows with planned/actual bars over a week grid."""

    DEFAULT_CSS = """
    TimelineChart {
        height: 1fr;
        background: $background;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._snapshot: TimelineSnapshot | None = None
        self._show_actual: bool = True
        self._date_format: str = "DD/MM/YY"
        self.highlighted: int = 0

    @property
    def snapshot(self) -> TimelineSnapshot | None:
        return self._snapshot

    @property
    def show_actual(self) -> bool:
        return self._show_actual

    def update_snapshot(
        self,
        snapshot: TimelineSnapshot,
        show_actual: bool = True,
        date_format: str | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._show_actual = show_actual
        if date_format:
            self._date_format = date_format
        if snapshot.rows:
            self.highlighted = max(0, min(self.highlighted, len(snapshot.rows) - 1))
        else:
            self.highlighted = 0
        self.refresh()

    def row_at_line(self, y: int) -> int:
        """Row index painted on line *y*, or -1 for header lines."""
        if y < HEADER_LINES:
            return -1
        return (y - HEADER_LINES) // LINES_PER_ROW

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        snapshot = self._snapshot
        if snapshot is None or not snapshot.rows:
            if y == 0:
                return Strip([Segment("  No scopes to display", Style(dim=True))])
            return Strip.blank(width)

        track = max(0, width - NAME_WIDTH)
        if y == 0:
            return self._render_band_row(snapshot, track)
        if y == 1:
            return self._render_column_row(snapshot, track)

        index = self.row_at_line(y)
        if index >= len(snapshot.rows):
            return Strip.blank(width)
        row = snapshot.rows[index]
        is_actual_line = (y - HEADER_LINES) % LINES_PER_ROW == 1
        return self._render_item_line(snapshot, row, index, track, is_actual_line)

    # ── header ──

    def _column_span(self, snapshot: TimelineSnapshot, track: int, first: int, count: int) -> tuple[int, int]:
        total = max(1, len(snapshot.grid.columns))
        start = int(first / total * track)
        end = int((first + count) / total * track)
        return start, end

    def _render_band_row(self, snapshot: TimelineSnapshot, track: int) -> Strip:
        header = Style(bold=True)
        segments = [Segment("Scope".ljust(NAME_WIDTH), header)]
        for i, band in enumerate(snapshot.grid.bands):
            start, end = self._column_span(snapshot, track, band.first_column_index, band.column_count)
            span = max(0, end - start)
            bg = Style(bgcolor=BAND_BG) if i % 2 == 1 else Style()
            segments.append(Segment(band.label[:span].center(span), header + bg))
        return Strip(segments)

    def _render_column_row(self, snapshot: TimelineSnapshot, track: int) -> Strip:
        dim = Style(dim=True)
        segments = [Segment("".ljust(NAME_WIDTH))]
        for i, column in enumerate(snapshot.grid.columns):
            start, end = self._column_span(snapshot, track, i, 1)
            span = max(0, end - start)
            label = column.week_start.strftime("%d")
            segments.append(Segment(label[:span].ljust(span), dim))
        return Strip(segments)

    # ── rows ──

    def _name_cell(self, row: TimelineRow, actual_line: bool) -> str:
        if actual_line:
            text = f"  {row.bars.progress}% · {row.mandays}md"
        else:
            item = row.item
            text = f"{item.order_index + 1}. {item.name}"
        if len(text) > NAME_WIDTH - 1:
            text = text[: NAME_WIDTH - 2] + "…"
        return text.ljust(NAME_WIDTH)

    def _render_item_line(
        self,
        snapshot: TimelineSnapshot,
        row: TimelineRow,
        index: int,
        track: int,
        actual_line: bool,
    ) -> Strip:
        base = Style(bgcolor=HIGHLIGHT_BG) if index == self.highlighted else Style()
        today_col = marker_cell(snapshot.today_percent, track)
        today_style = Style(color=TODAY_COLOR)

        fill_end = -1
        if actual_line:
            if self._show_actual and row.bars.actual is not None:
                start, end = bar_cells(row.bars.actual, track)
                _, fill_end = bar_cells(row.bars.progress_fill, track)
            else:
                start, end = (0, 0)
            bar_style = Style(color=PROGRESS_COLORS[row.bars.display_color])
        else:
            start, end = bar_cells(row.bars.planned, track)
            bar_style = Style(color=PLANNED_COLOR)

        name_style = base + Style(dim=actual_line)
        segments = [Segment(self._name_cell(row, actual_line), name_style)]
        for c in range(track):
            if start <= c < end:
                if not actual_line:
                    segments.append(Segment("░", bar_style + base))
                elif c < fill_end:
                    segments.append(Segment("█", bar_style + base))
                else:
                    segments.append(Segment("▒", bar_style + base))
            elif c == today_col:
                segments.append(Segment("│", today_style + base))
            else:
                segments.append(Segment(" ", base))
        return Strip(segments)

    def describe_row(self, index: int) -> str:
        """One-line description of a row for the status bar."""
        if self._snapshot is None or not (0 <= index < len(self._snapshot.rows)):
            return ""
        row = self._snapshot.rows[index]
        item = row.item
        fmt = self._date_format
        planned = f"{format_date(item.planned_start, fmt)} → {format_date(item.planned_end, fmt)}"
        text = f"{item.name}: planned {planned} ({row.mandays}md)"
        if item.actual_start or item.actual_end:
            actual = f"{format_date(item.actual_start, fmt)} → {format_date(item.actual_end, fmt)}"
            text += f", actual {actual} ({row.actual_mandays}md)"
        if row.bars.is_overdue:
            text += " [overdue]"
        return text
