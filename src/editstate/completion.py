from __future__ import annotations
from typing import Any, Dict, List

from .model import DetailRow, ReportEditState, SectionState


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _row_ok(row: DetailRow, fields: List[str], mode: str) -> bool:
    if not fields:
        return True
    values = [_filled(row.fields.get(f)) for f in fields]
    return any(values) if mode == "any" else all(values)


def is_complete(section: SectionState, spec: Dict[str, Any]) -> bool:
    """
    Advisory completion for one section, driven by spec["completion"]:
      - each listed collection needs a visible row whose completion fields are
        all filled (rows="all") or any filled (rows="any")
      - each listed scalar must be non-blank
      - checks combine with join="and" (default) or "or"
    """
    if section is None or not section.is_initialized:
        return False
    rule = spec.get("completion", {})
    mode = rule.get("rows", "all")
    checks: List[bool] = []

    for cname in rule.get("collections", []):
        table = section.collections.get(cname)
        fields = spec["collections"][cname].get("complete_fields", [])
        visible = table.visible_rows() if table else []
        checks.append(any(_row_ok(r, fields, mode) for r in visible))

    for fname in rule.get("scalars", []):
        checks.append(_filled(section.scalar_fields.get(fname)))

    if not checks:
        return False
    if rule.get("join", "and") == "or":
        return any(checks)
    return all(checks)


def evaluate_all(state: ReportEditState, registry) -> Dict[str, bool]:
    """Completion per step, in step order."""
    return {
        key: is_complete(state.sections.get(key), registry.get_spec(key))
        for key in state.steps
    }
