from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from .entities import MonthlyTarget, ProjectPlan

"""Config dataclasses for the import and reporting tool.

Separate from the YAML/JSON-schema loader in ``siteprogress.config.loader``;
these only carry typed, already validated values.
"""

__all__ = [
    "FieldAliases",
    "KindAliases",
    "AliasConfig",
    "SourceConfig",
    "ProjectConfig",
]


@dataclass(frozen=True)
class FieldAliases:
    """Accepted header spellings for one canonical field.

    ``label`` is the display name used in diagnostics. ``aliases`` are tried in
    order; the first column holding a value wins.
    """
    name: str
    label: str
    aliases: tuple[str, ...]
    required: bool = True


@dataclass(frozen=True)
class KindAliases:
    """Canonical field set of one import kind."""
    kind: str
    fields: dict[str, FieldAliases]

    @property
    def expected_columns(self) -> list[str]:
        """Display names listed in the header-mismatch warning."""
        return [f.label for f in self.fields.values() if f.required]

    def field(self, name: str) -> FieldAliases:
        return self.fields[name]


@dataclass(frozen=True)
class AliasConfig:
    """All canonical field sets plus the schedule man-hour alias family."""
    kinds: dict[str, KindAliases]
    schedule_period_label: str
    schedule_man_hours_aliases: tuple[str, ...]

    def extended(self, extra: dict[str, dict[str, list[str]]] | None) -> AliasConfig:
        """Return a copy with project-specific aliases appended (defaults keep priority)."""
        if not extra:
            return self
        kinds = dict(self.kinds)
        for kind, per_field in extra.items():
            if kind == "schedule_man_hours":
                continue
            base = kinds[kind]
            fields = dict(base.fields)
            for name, aliases in per_field.items():
                current = fields[name]
                merged = current.aliases + tuple(a for a in aliases if a not in current.aliases)
                fields[name] = replace(current, aliases=merged)
            kinds[kind] = replace(base, fields=fields)
        man_hours = self.schedule_man_hours_aliases
        extra_mh = extra.get("schedule_man_hours", {}).get("aliases", [])
        if extra_mh:
            man_hours = man_hours + tuple(a for a in extra_mh if a not in man_hours)
        return replace(self, kinds=kinds, schedule_man_hours_aliases=man_hours)


@dataclass(frozen=True)
class SourceConfig:
    """One spreadsheet to read: path, optional sheet and its import kind."""
    path: Path
    kind: str
    sheet: str | None = None


@dataclass(frozen=True)
class ProjectConfig:
    """Root configuration for a report run."""
    project: ProjectPlan
    work_items: SourceConfig
    entries: list[SourceConfig]
    schedule: SourceConfig | None = None
    monthly_targets: list[MonthlyTarget] = field(default_factory=list)
    concrete_unit: str = "m3"
    formwork_unit: str = "m2"
    rebar_unit: str = "ton"
    column_aliases: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    error_log_dir: Path = Path("logs")
