"""Main Textual App for Scope Timeline."""

from __future__ import annotations

import asyncio
import os
from datetime import date
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from scope_timeline.config import (
    ProjectConfig,
    get_holidays,
    get_progress_step,
    load_config,
    load_settings,
    save_config,
)
from scope_timeline.models import ParseWarning, ScheduledItem, format_date
from scope_timeline.parser import load_items
from scope_timeline.reorder import ReorderCoordinator, ReorderOutcome
from scope_timeline.timeline import TimelineSnapshot, build_timeline
from scope_timeline.widgets.timeline_chart import TimelineChart
from scope_timeline.writer import write_items


class TimelineApp(App):
    """Scope Timeline - delivery timeline and progress viewer."""

    TITLE = "Scope Timeline"

    CSS = """
    #summary {
        height: 1;
        padding: 0 1;
    }
    #status-bar {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit_app", "Quit"),
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("down,j", "cursor_down", "Down", show=False),
        Binding("up,k", "cursor_up", "Up", show=False),
        Binding("J", "move_down", "Move Down"),
        Binding("K", "move_up", "Move Up"),
        Binding("plus", "progress_up", "Progress +"),
        Binding("minus", "progress_down", "Progress -"),
        Binding("a", "toggle_actual", "Actual Bars"),
        Binding("exclamation_mark", "warnings", "Warnings", show=False),
    ]

    def __init__(self, project_dir: Path, no_color: bool = False, today: date | None = None) -> None:
        if no_color:
            os.environ["NO_COLOR"] = "1"
        super().__init__()
        self.project_dir = project_dir
        self.config: ProjectConfig = ProjectConfig()
        self.items: list[ScheduledItem] = []
        self.warnings: list[ParseWarning] = []
        self.snapshot: TimelineSnapshot | None = None
        self.show_actual: bool = True
        self._today = today
        self._holidays: frozenset[date] = frozenset()
        self._progress_step: int = 10
        self._commit_lock = asyncio.Lock()
        self._coordinator = ReorderCoordinator(self._commit)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="summary")
        yield TimelineChart(id="chart")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self._load_project()

    @property
    def items_path(self) -> Path:
        return self.config.items_path(self.project_dir)

    def _load_project(self) -> None:
        self.config = load_config(self.project_dir)
        settings = load_settings(self.project_dir)
        self._holidays = get_holidays(settings)
        self._progress_step = get_progress_step(settings)
        self.show_actual = self.config.include_actual

        item_set = load_items(self.items_path)
        self.items = item_set.items
        self.warnings = item_set.warnings
        if self.config.name:
            self.title = f"Scope Timeline - {self.config.name}"
        if self.warnings:
            self.notify(f"{len(self.warnings)} warning(s) while loading scopes", severity="warning")
        self._refresh_ui()

    def _refresh_ui(self) -> None:
        self.snapshot = build_timeline(
            self.items,
            start=self.config.start,
            due=self.config.due,
            include_actual=self.show_actual,
            today=self._today,
            excluded=self._holidays,
        )
        chart = self.query_one("#chart", TimelineChart)
        chart.update_snapshot(self.snapshot, show_actual=self.show_actual, date_format=self.config.date_format)
        self._update_summary()
        self._update_status_bar()

    def _update_summary(self) -> None:
        snap = self.snapshot
        if snap is None:
            return
        fmt = self.config.date_format
        window = f"{format_date(snap.window.start, fmt)} - {format_date(snap.window.end, fmt)}"
        text = (
            f"{snap.progress}% · {snap.status.label} · {window} "
            f"({snap.window.week_count} weeks) · {snap.total_mandays} mandays"
        )
        if snap.overdue_count:
            text += f" · {snap.overdue_count} overdue"
        self.query_one("#summary", Static).update(text)

    def _update_status_bar(self) -> None:
        chart = self.query_one("#chart", TimelineChart)
        text = chart.describe_row(chart.highlighted)
        if self.warnings:
            text = f"⚠ {len(self.warnings)}  {text}"
        self.query_one("#status-bar", Static).update(text)

    @property
    def highlighted_index(self) -> int:
        return self.query_one("#chart", TimelineChart).highlighted

    def _set_highlight(self, index: int) -> None:
        chart = self.query_one("#chart", TimelineChart)
        if not self.items:
            return
        chart.highlighted = max(0, min(index, len(self.items) - 1))
        chart.refresh()
        self._update_status_bar()

    # ── persistence ──

    def _commit(self, items: list[ScheduledItem]) -> None:
        write_items(self.items_path, items)

    def _apply(self, items: list[ScheduledItem]) -> None:
        self.items = items
        self._refresh_ui()

    def _report(self, outcome: ReorderOutcome, what: str) -> None:
        if outcome.reverted:
            self.log.error(f"{what} failed: {outcome.error!r}")
            self.notify(f"{what} failed, change reverted: {outcome.error}", severity="error")

    # ── Actions ──

    def action_cursor_down(self) -> None:
        self._set_highlight(self.highlighted_index + 1)

    def action_cursor_up(self) -> None:
        self._set_highlight(self.highlighted_index - 1)

    async def action_move_down(self) -> None:
        await self._move_highlighted(1)

    async def action_move_up(self) -> None:
        await self._move_highlighted(-1)

    async def _move_highlighted(self, delta: int) -> None:
        async with self._commit_lock:
            from_index = self.highlighted_index
            to_index = from_index + delta
            if not (0 <= to_index < len(self.items)):
                return
            self._set_highlight(to_index)
            outcome = await self._coordinator.reorder(self.items, from_index, to_index, self._apply)
            if outcome.reverted:
                self._set_highlight(from_index)
            self._report(outcome, "Reorder")

    async def action_progress_up(self) -> None:
        await self._adjust_progress(self._progress_step)

    async def action_progress_down(self) -> None:
        await self._adjust_progress(-self._progress_step)

    async def _adjust_progress(self, delta: int) -> None:
        async with self._commit_lock:
            if not self.items:
                return
            item = self.items[self.highlighted_index]
            outcome = await self._coordinator.edit_progress(
                self.items, item.id, item.progress + delta, self._apply
            )
            self._report(outcome, "Progress update")

    def action_toggle_actual(self) -> None:
        self.show_actual = not self.show_actual
        self._refresh_ui()

    def action_save(self) -> None:
        try:
            write_items(self.items_path, self.items)
            save_config(self.project_dir, self.config)
        except OSError as e:
            self.notify(f"Save failed: {e}", severity="error")
            return
        self.notify("Saved", severity="information")

    def action_warnings(self) -> None:
        if not self.warnings:
            self.notify("No warnings", severity="information")
            return
        lines = [str(w) for w in self.warnings[:5]]
        if len(self.warnings) > 5:
            lines.append(f"... and {len(self.warnings) - 5} more")
        self.notify("\n".join(lines), title="Warnings", severity="warning")

    def action_quit_app(self) -> None:
        self.exit()
