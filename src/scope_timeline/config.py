"""Project config (.scope-timeline/config.toml via tomlkit) and YAML settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import tomlkit
import yaml

from scope_timeline.business_days import coerce_date
from scope_timeline.models import DATE_FORMAT_PRESETS, DEFAULT_DATE_FORMAT

CONFIG_DIR = ".scope-timeline"
CONFIG_FILE = "config.toml"
SETTINGS_FILE = "settings.yaml"
DEFAULT_ITEMS_FILE = "scopes.json"


@dataclass
class ProjectConfig:
    """Project-level configuration stored in .scope-timeline/config.toml."""

    name: str = ""
    start: date | None = None
    due: date | None = None
    include_actual: bool = True
    date_format: str = DEFAULT_DATE_FORMAT
    items_file: str = DEFAULT_ITEMS_FILE

    def items_path(self, project_dir: Path) -> Path:
        return project_dir / self.items_file


def _get_config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_DIR / CONFIG_FILE


def load_config(project_dir: Path) -> ProjectConfig:
    """Load project configuration from .scope-timeline/config.toml."""
    config_path = _get_config_path(project_dir)
    config = ProjectConfig()

    if not config_path.exists():
        return config

    try:
        content = config_path.read_text(encoding="utf-8")
        doc = tomlkit.parse(content)
    except Exception:
        return config

    project_section = doc.get("project", {})
    config.name = str(project_section.get("name", ""))
    # tomlkit hands back native TOML dates as date subclasses; strings also work
    config.start = coerce_date(project_section.get("start"))
    config.due = coerce_date(project_section.get("due"))
    config.include_actual = bool(project_section.get("include_actual", True))

    raw_fmt = str(project_section.get("date_format", DEFAULT_DATE_FORMAT))
    config.date_format = raw_fmt if raw_fmt in DATE_FORMAT_PRESETS else DEFAULT_DATE_FORMAT

    items_file = project_section.get("items_file")
    if items_file:
        config.items_file = str(items_file)

    return config


def save_config(project_dir: Path, config: ProjectConfig) -> None:
    """Save project configuration to .scope-timeline/config.toml."""
    config_path = _get_config_path(project_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()

    project_table = tomlkit.table()
    project_table.add("name", config.name)
    if config.start is not None:
        project_table.add("start", config.start.isoformat())
    if config.due is not None:
        project_table.add("due", config.due.isoformat())
    project_table.add("include_actual", config.include_actual)
    project_table.add("date_format", config.date_format)
    project_table.add("items_file", config.items_file)
    doc.add("project", project_table)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


# ── settings.yaml ──

DEFAULT_SETTINGS_PATH = Path(__file__).with_name("default_settings.yaml")


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML file; {} when missing, unreadable or not a mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _merge_settings(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(defaults)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_settings(current, value)
        else:
            merged[key] = value
    return merged


def load_settings(project_dir: Path | None = None) -> dict[str, Any]:
    """Bundled defaults, overlaid with the project's .scope-timeline/settings.yaml.

    Nested mappings merge key by key; lists such as ``holidays`` replace the
    default outright.
    """
    settings = _read_yaml_mapping(DEFAULT_SETTINGS_PATH)
    if project_dir is None:
        return settings
    override = _read_yaml_mapping(project_dir / CONFIG_DIR / SETTINGS_FILE)
    return _merge_settings(settings, override)


def get_holidays(settings: dict[str, Any]) -> frozenset[date]:
    """Parse holiday dates from settings into the excluded-date set."""
    raw = settings.get("holidays", [])
    holidays: set[date] = set()
    if isinstance(raw, list):
        for item in raw:
            d = coerce_date(item if isinstance(item, date) else str(item))
            if d is not None:
                holidays.add(d)
    return frozenset(holidays)


def get_progress_step(settings: dict[str, Any]) -> int:
    """Progress increment used by the +/- keys (1..100, default 10)."""
    try:
        step = int(settings.get("progress_step", 10))
    except (TypeError, ValueError):
        return 10
    return min(100, max(1, step))
