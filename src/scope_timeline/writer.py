"""Write scopes back to their items file (JSON or YAML)."""

from __future__ import annotations

import contextlib
import json
import os
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml

from scope_timeline.models import ScheduledItem


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def item_to_record(item: ScheduledItem) -> dict[str, Any]:
    """Record form of an item, camelCase keys as used by the API."""
    record: dict[str, Any] = {
        "id": item.id,
        "orderIndex": item.order_index,
        "name": item.name,
        "startDate": _iso(item.planned_start),
        "endDate": _iso(item.planned_end),
        "progress": item.percent_complete,
    }
    if item.actual_start is not None:
        record["actualStartDate"] = _iso(item.actual_start)
    if item.actual_end is not None:
        record["actualEndDate"] = _iso(item.actual_end)
    if item.mandays_planned is not None:
        record["mandays"] = item.mandays_planned
    if item.mandays_actual is not None:
        record["actualMandays"] = item.mandays_actual
    return record


def serialize_items(items: Sequence[ScheduledItem], fmt: str = "json") -> str:
    data = {"scopes": [item_to_record(item) for item in items]}
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _backup(path: Path) -> None:
    """Copy *path* to ``<name>.bak``; a failed copy does not block the save."""
    try:
        shutil.copyfile(path, path.with_name(path.name + ".bak"))
    except OSError:
        pass


def _replace_atomically(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".scope-timeline-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def write_items(path: Path, items: Sequence[ScheduledItem], backup: bool = True) -> None:
    """Save *items* to *path*, format chosen by suffix.

    The previous file is kept as ``.bak`` and the new content replaces it in
    one rename, so readers never see a half-written file.
    """
    fmt = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"
    content = serialize_items(items, fmt)
    if backup and path.exists():
        _backup(path)
    _replace_atomically(path, content)
