"""Command-line entry point: the timeline viewer plus plain-text reports."""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table


class _DefaultGroup(click.Group):
    """Group whose default subcommand is `run`.

    `scope-timeline` and `scope-timeline PATH` both open the viewer; any
    registered name (summary, burnup, init) is dispatched as usual.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.no_args_is_help = False

    def invoke(self, ctx):
        # bare `scope-timeline`
        if not ctx._protected_args and not ctx.args:
            ctx._protected_args = ["run"]
        return super().invoke(ctx)

    def resolve_command(self, ctx, args):
        if args and args[0] in self.commands:
            return super().resolve_command(ctx, args)
        # anything else is a PATH (or option) for `run`
        return super().resolve_command(ctx, ["run", *args])


def _parse_today(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM-DD date", param_hint="--today")


def _project_dir(path: str) -> Path:
    project_dir = Path(path).resolve()
    if not project_dir.is_dir():
        click.echo(f"Error: '{project_dir}' is not a directory.", err=True)
        raise SystemExit(1)
    return project_dir


def _load(project_dir: Path):
    from scope_timeline.config import get_holidays, load_config, load_settings
    from scope_timeline.parser import load_items

    config = load_config(project_dir)
    holidays = get_holidays(load_settings(project_dir))
    item_set = load_items(config.items_path(project_dir))
    for warning in item_set.warnings:
        click.echo(f"warning: {warning}", err=True)
    return config, holidays, item_set.items


@click.group(cls=_DefaultGroup)
@click.option("--no-color", is_flag=True, help="Disable color output")
@click.version_option(package_name="scope-timeline")
@click.pass_context
def main(ctx, no_color: bool) -> None:
    """Scope Timeline - delivery timeline and progress for project scopes."""
    ctx.ensure_object(dict)
    ctx.obj["no_color"] = no_color


@main.command()
@click.argument("path", default=".", type=click.Path())
@click.option("--today", default=None, help="Override today's date (YYYY-MM-DD)")
@click.pass_context
def run(ctx, path: str, today: str | None) -> None:
    """Open the timeline view for the project in PATH."""
    from scope_timeline.app import TimelineApp

    project_dir = _project_dir(path)
    app = TimelineApp(project_dir=project_dir, no_color=ctx.obj["no_color"], today=_parse_today(today))
    app.run()


@main.command()
@click.argument("path", default=".", type=click.Path())
@click.option("--today", default=None, help="Override today's date (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.pass_context
def summary(ctx, path: str, today: str | None, as_json: bool) -> None:
    """Print scopes, mandays, bar positions and the project status."""
    from scope_timeline.models import format_date
    from scope_timeline.timeline import build_timeline, project_duration_days

    project_dir = _project_dir(path)
    config, holidays, items = _load(project_dir)
    snap = build_timeline(
        items,
        start=config.start,
        due=config.due,
        include_actual=config.include_actual,
        today=_parse_today(today),
        excluded=holidays,
    )

    if as_json:
        data = {
            "name": config.name,
            "progress": snap.progress,
            "status": snap.status.value,
            "window": {"start": snap.window.start.isoformat(), "end": snap.window.end.isoformat()},
            "durationDays": project_duration_days(snap.start, snap.due),
            "totalMandays": snap.total_mandays,
            "todayPercent": snap.today_percent,
            "scopes": [
                {
                    "id": row.item.id,
                    "name": row.item.name,
                    "orderIndex": row.item.order_index,
                    "mandays": row.mandays,
                    "actualMandays": row.actual_mandays,
                    "planned": {
                        "left": round(row.bars.planned.left_percent, 4),
                        "width": round(row.bars.planned.width_percent, 4),
                    },
                    "actual": None if row.bars.actual is None else {
                        "left": round(row.bars.actual.left_percent, 4),
                        "width": round(row.bars.actual.width_percent, 4),
                    },
                    "color": row.bars.color.value,
                    "overdue": row.bars.is_overdue,
                }
                for row in snap.rows
            ],
        }
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    fmt = config.date_format
    console = Console(no_color=ctx.obj["no_color"])
    table = Table(title=config.name or "Scopes")
    table.add_column("#", justify="right")
    table.add_column("Scope")
    table.add_column("Planned")
    table.add_column("Actual")
    table.add_column("Mandays", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Bar (left/width %)", justify="right")
    for row in snap.rows:
        item = row.item
        actual = "-"
        if item.actual_start or item.actual_end:
            actual = f"{format_date(item.actual_start, fmt)} → {format_date(item.actual_end, fmt)}"
        progress = f"{row.bars.progress}%"
        if row.bars.is_overdue:
            progress += " (overdue)"
        table.add_row(
            str(item.order_index + 1),
            item.name,
            f"{format_date(item.planned_start, fmt)} → {format_date(item.planned_end, fmt)}",
            actual,
            str(row.mandays),
            progress,
            f"{row.bars.planned.left_percent:.1f}/{row.bars.planned.width_percent:.1f}",
        )
    console.print(table)
    console.print(
        f"Progress: {snap.progress}%  Status: {snap.status.label}  "
        f"Window: {format_date(snap.window.start, fmt)} - {format_date(snap.window.end, fmt)} "
        f"({snap.window.week_count} weeks)  Mandays: {snap.total_mandays}"
    )


@main.command()
@click.argument("path", default=".", type=click.Path())
@click.option("--mode", type=click.Choice(["scope", "linear"]), default="scope", help="Planned curve")
@click.option("--today", default=None, help="Override today's date (YYYY-MM-DD)")
@click.pass_context
def burnup(ctx, path: str, mode: str, today: str | None) -> None:
    """Print the weekly burnup series and schedule metrics."""
    from scope_timeline.bounds import raw_bounds
    from scope_timeline.burnup import burnup_metrics, burnup_series, total_planned_effort

    project_dir = _project_dir(path)
    config, holidays, items = _load(project_dir)
    now = _parse_today(today) or date.today()

    start, end = config.start, config.due
    planned = raw_bounds(items)
    if planned is not None:
        start = start or planned[0]
        end = end or planned[1]
    if start is None or end is None:
        click.echo("Error: no project dates to build a burnup from.", err=True)
        raise SystemExit(1)

    series = burnup_series(items, start, end, mode=mode, today=now, excluded=holidays)
    total = total_planned_effort(items, holidays)
    metrics = burnup_metrics(series, total, start, end, today=now)

    console = Console(no_color=ctx.obj["no_color"])
    table = Table(title=f"Burnup ({mode})")
    table.add_column("Week")
    table.add_column("Planned", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Scope", justify="right")
    for point in series:
        table.add_row(point.label, f"{point.planned:.2f}", f"{point.actual:.2f}", f"{point.scope:.0f}")
    console.print(table)

    if metrics is not None:
        if metrics.is_on_track:
            verdict = "on track"
        elif metrics.is_ahead:
            verdict = "ahead"
        else:
            verdict = "behind"
        projected = metrics.projected_completion.isoformat() if metrics.projected_completion else "-"
        console.print(
            f"Completion: {metrics.completion_percent:.1f}%  SPI: {metrics.spi:.2f} ({verdict})  "
            f"Velocity: {metrics.velocity:.1f} md/week  Remaining: {metrics.remaining_work:.1f} md  "
            f"Projected: {projected}  Variance: {metrics.days_ahead_behind:+d} days"
        )


@main.command("init")
@click.argument("path", default=".", type=click.Path())
@click.option("--name", prompt="Project name", default="My Project", help="Project name")
def init_cmd(path: str, name: str) -> None:
    """Initialize a new project (config.toml + sample scopes file)."""
    from scope_timeline.config import ProjectConfig, save_config
    from scope_timeline.models import ScheduledItem
    from scope_timeline.writer import write_items

    project_dir = Path(path).resolve()
    config = ProjectConfig(name=name)
    items_path = config.items_path(project_dir)
    if items_path.exists():
        click.echo(f"Scopes file already exists: {items_path.name}", err=True)
        raise SystemExit(1)

    project_dir.mkdir(parents=True, exist_ok=True)
    save_config(project_dir, config)
    click.echo(f"Created {project_dir / '.scope-timeline' / 'config.toml'}")

    monday = date.today() - timedelta(days=date.today().weekday())
    sample = [
        ScheduledItem(
            id=f"scope-{i + 1}",
            name=title,
            order_index=i,
            planned_start=monday + timedelta(weeks=i),
            planned_end=monday + timedelta(weeks=i, days=4),
        )
        for i, title in enumerate(["Discovery", "Design", "Development", "Testing"])
    ]
    write_items(items_path, sample, backup=False)
    click.echo(f"Created {items_path}")
    click.echo(f"\nProject initialized at {project_dir}")
