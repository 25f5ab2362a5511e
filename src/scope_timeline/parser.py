"""Read scope records (API / file form) into ScheduledItems."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from scope_timeline.business_days import coerce_date
from scope_timeline.models import ItemSet, ParseWarning, ScheduledItem
from scope_timeline.progress import round_half_up
from scope_timeline.reorder import renumber

# Accepted keys per field, first match wins. Records come from the API in
# camelCase; hand-written files may use snake_case.
FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id", "serverId", "server_id"),
    "order_index": ("orderIndex", "order_index", "order"),
    "name": ("name", "title"),
    "planned_start": ("startDate", "plannedStart", "planned_start", "start"),
    "planned_end": ("endDate", "plannedEnd", "planned_end", "end"),
    "actual_start": ("actualStartDate", "actualStart", "actual_start"),
    "actual_end": ("actualEndDate", "actualEnd", "actual_end"),
    "percent_complete": ("progress", "percentComplete", "percent_complete"),
    "mandays_planned": ("mandays", "mandaysPlanned", "mandays_planned"),
    "mandays_actual": ("actualMandays", "mandaysActual", "mandays_actual"),
}


def _get(record: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_KEYS[field]:
        if key in record and record[key] not in (None, ""):
            return record[key]
    return None


def _parse_date(value: Any, source: str, index: int, warnings: list[ParseWarning]) -> date | None:
    if value is None:
        return None
    parsed = coerce_date(value)
    if parsed is None:
        warnings.append(ParseWarning(source, index, f"Invalid date: '{value}'"))
    return parsed


def _parse_percent(value: Any, source: str, index: int, warnings: list[ParseWarning]) -> int:
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        warnings.append(ParseWarning(source, index, f"Invalid progress: '{value}', defaulting to 0"))
        return 0
    if number < 0 or number > 100:
        warnings.append(ParseWarning(source, index, f"Progress {value} out of range 0-100"))
    return round_half_up(number)


def _parse_int(value: Any, label: str, source: str, index: int, warnings: list[ParseWarning]) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        warnings.append(ParseWarning(source, index, f"Invalid {label}: '{value}'"))
        return None


def parse_record(
    record: Mapping[str, Any], index: int, source: str, warnings: list[ParseWarning]
) -> ScheduledItem:
    """Parse one record. Bad fields become absent and add a warning."""
    raw_id = _get(record, "id")
    item_id = str(raw_id) if raw_id is not None else f"scope-{index + 1}"
    order = _parse_int(_get(record, "order_index"), "orderIndex", source, index, warnings)

    planned_start = _parse_date(_get(record, "planned_start"), source, index, warnings)
    planned_end = _parse_date(_get(record, "planned_end"), source, index, warnings)
    if planned_start and planned_end and planned_end < planned_start:
        warnings.append(ParseWarning(source, index, "Planned end is before planned start"))
    actual_start = _parse_date(_get(record, "actual_start"), source, index, warnings)
    actual_end = _parse_date(_get(record, "actual_end"), source, index, warnings)
    if actual_start and actual_end and actual_end < actual_start:
        warnings.append(ParseWarning(source, index, "Actual end is before actual start"))

    return ScheduledItem(
        id=item_id,
        name=str(_get(record, "name") or ""),
        order_index=order if order is not None else index,
        planned_start=planned_start,
        planned_end=planned_end,
        actual_start=actual_start,
        actual_end=actual_end,
        percent_complete=_parse_percent(_get(record, "percent_complete"), source, index, warnings),
        mandays_planned=_parse_int(_get(record, "mandays_planned"), "mandays", source, index, warnings),
        mandays_actual=_parse_int(_get(record, "mandays_actual"), "actualMandays", source, index, warnings),
    )


def parse_records(records: Iterable[Any], source: str = "<records>") -> ItemSet:
    """Parse records, sort by order index and renumber 0..n-1."""
    result = ItemSet(source=source)
    parsed: list[tuple[int, int, ScheduledItem]] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            result.warnings.append(ParseWarning(source, index, "Record is not a mapping, skipped"))
            continue
        item = parse_record(record, index, source, result.warnings)
        if item.id in seen:
            result.warnings.append(ParseWarning(source, index, f"Duplicate id '{item.id}', skipped"))
            continue
        seen.add(item.id)
        parsed.append((item.order_index, index, item))

    parsed.sort(key=lambda entry: (entry[0], entry[1]))
    result.items = renumber([item for _, _, item in parsed])
    return result


def _extract_records(data: Any) -> list[Any] | None:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("scopes", "deliverables", "items"):
            if isinstance(data.get(key), list):
                return data[key]
    return None


def load_items(path: Path) -> ItemSet:
    """Load items from a .json or .yaml/.yml file.

    A missing or unreadable file yields an empty set with a warning.
    """
    source = path.name
    if not path.exists():
        return ItemSet(source=source, warnings=[ParseWarning(source, 0, "File not found")])
    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (OSError, ValueError, yaml.YAMLError) as e:
        return ItemSet(source=source, warnings=[ParseWarning(source, 0, f"Cannot read file: {e}")])

    records = _extract_records(data)
    if records is None:
        return ItemSet(source=source, warnings=[ParseWarning(source, 0, "No scope list found")])
    return parse_records(records, source)
