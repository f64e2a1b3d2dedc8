from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    AliasConfig,
    FieldAliases,
    KindAliases,
    ProjectConfig,
    SourceConfig,
)
from ..models.entities import MonthlyTarget, ProjectPlan

"""Config loading: column alias tables and project report configs.

Responsibilities:
- Load YAML (PyYAML ``safe_load``)
- Validate against the JSON schemas shipped next to this module
- Apply defaults (entry kind ``daily_entries``, units ``m3``/``m2``/``ton`` for
  concrete, formwork and rebar, error log dir ``logs``)
- Resolve relative source paths against the config file's directory
"""

__all__ = [
    "ConfigError",
    "DEFAULT_ALIASES_PATH",
    "load_column_aliases",
    "default_column_aliases",
    "load_config",
]

_CONFIG_DIR = Path(__file__).parent
DEFAULT_ALIASES_PATH = _CONFIG_DIR / "column_aliases.yml"
ALIASES_SCHEMA_PATH = _CONFIG_DIR / "column_aliases.schema.json"
PROJECT_SCHEMA_PATH = _CONFIG_DIR / "project.schema.json"

DEFAULT_ENTRY_KIND = "daily_entries"


class ConfigError(Exception):
    pass


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate config data against a JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            data fails validation (missing keys, wrong types, extra keys).
    """
    if not schema_path.exists():
        raise ConfigError(f"config schema not found: {schema_path}")
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_column_aliases(path: Path = DEFAULT_ALIASES_PATH) -> AliasConfig:
    data = _read_yaml(path)
    _validate_schema(data, ALIASES_SCHEMA_PATH)

    kinds: dict[str, KindAliases] = {}
    for kind, raw_fields in data["kinds"].items():
        fields = {
            name: FieldAliases(
                name=name,
                label=spec["label"],
                aliases=tuple(spec["aliases"]),
                required=spec.get("required", True),
            )
            for name, spec in raw_fields.items()
        }
        kinds[kind] = KindAliases(kind=kind, fields=fields)

    schedule = data["schedule"]
    return AliasConfig(
        kinds=kinds,
        schedule_period_label=schedule["period_label"],
        schedule_man_hours_aliases=tuple(schedule["man_hours_aliases"]),
    )


@lru_cache(maxsize=1)
def default_column_aliases() -> AliasConfig:
    """Alias tables shipped with the package (read once per process)."""
    return load_column_aliases(DEFAULT_ALIASES_PATH)


def _source(raw: dict[str, Any], base: Path, default_kind: str) -> SourceConfig:
    path = Path(raw["path"])
    if not path.is_absolute():
        path = base / path
    return SourceConfig(path=path, kind=raw.get("kind", default_kind), sheet=raw.get("sheet"))


def _check_alias_extensions(extra: dict[str, dict[str, list[str]]]) -> None:
    aliases = default_column_aliases()
    for kind, per_field in extra.items():
        if kind == "schedule_man_hours":
            if set(per_field) - {"aliases"}:
                raise ConfigError("column_aliases.schedule_man_hours only accepts 'aliases'")
            continue
        if kind not in aliases.kinds:
            raise ConfigError(f"column_aliases: unknown import kind '{kind}'")
        unknown = set(per_field) - set(aliases.kinds[kind].fields)
        if unknown:
            raise ConfigError(f"column_aliases.{kind}: unknown fields {sorted(unknown)}")


def load_config(path: Path) -> ProjectConfig:
    data = _read_yaml(path)
    _validate_schema(data, PROJECT_SCHEMA_PATH)

    base = path.parent
    raw_project = data.get("project", {})
    plan = ProjectPlan(
        planned_man_hours=float(raw_project.get("planned_man_hours", 0)),
        total_duration_days=int(raw_project.get("total_duration_days", 0)),
        total_concrete=float(raw_project.get("total_concrete", 0)),
        name=raw_project.get("name", ""),
    )
    targets = [
        MonthlyTarget(
            year=t["year"],
            month=t["month"],
            planned_man_hours=float(t["planned_man_hours"]),
            planned_concrete=float(t.get("planned_concrete", 0)),
        )
        for t in data.get("monthly_targets", [])
    ]
    extra_aliases = data.get("column_aliases", {})
    _check_alias_extensions(extra_aliases)

    schedule_raw = data.get("schedule")
    log_dir = Path(data.get("error_log_dir", "logs"))
    return ProjectConfig(
        project=plan,
        work_items=_source(data["work_items"], base, "work_items"),
        entries=[_source(e, base, DEFAULT_ENTRY_KIND) for e in data["entries"]],
        schedule=_source(schedule_raw, base, "work_schedule") if schedule_raw else None,
        monthly_targets=targets,
        concrete_unit=data.get("concrete_unit", "m3"),
        formwork_unit=data.get("formwork_unit", "m2"),
        rebar_unit=data.get("rebar_unit", "ton"),
        column_aliases=extra_aliases,
        error_log_dir=log_dir,
    )
