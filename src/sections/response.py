"""
Backend payload <-> SectionState.

The report endpoint has served two shapes over time:
  current:  {"pmServerHealths": [{"id", "remarks", "details": [{"id", "serialNo", ...}]}]}
  legacy:   {"serverHealthData": {"remarks", "serverHealthData": [{...}]}}
Both normalize into the same SectionState; denormalize emits a minimal diff.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from editstate.model import RowTable, SectionPhase, SectionState
from editstate import rows as R
from .normalize import is_blank, parse_serial, resolve_vocabulary_id

log = logging.getLogger(__name__)

CURRENT = "current"
LEGACY = "legacy"
EMPTY = "empty"


@dataclass(frozen=True)
class DetectedShape:
    kind: str  # "current" | "legacy" | "empty"
    payload: Any = None


def _pascal(name: str) -> str:
    return name[:1].upper() + name[1:] if name else name


def _records(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, dict):
        return [value] if value else []
    if isinstance(value, list):
        return [r for r in value if isinstance(r, dict)]
    return []


def _pick(item: Mapping[str, Any], fdef: Dict[str, Any], local: str) -> Any:
    wire = fdef.get("wire", local)
    for name in (wire, _pascal(wire), local):
        if name in item:
            v = item[name]
            return "" if v is None else v
    return ""


def _id_of(item: Mapping[str, Any]) -> Optional[str]:
    for name in ("id", "Id", "ID"):
        v = item.get(name)
        if v is not None and str(v) != "":
            return str(v)
    return None


def _legacy_has_content(obj: Dict[str, Any], spec: Dict[str, Any]) -> bool:
    for local, fdef in spec["scalars"].items():
        if not is_blank(_pick(obj, fdef, local)):
            return True
    for coll in spec["collections"].values():
        if _records(obj.get(coll["legacy_key"])):
            return True
    return False


def detect_shape(raw: Optional[Mapping[str, Any]], spec: Dict[str, Any]) -> DetectedShape:
    if not raw:
        return DetectedShape(EMPTY)
    record_key = spec.get("record_key")
    if record_key:
        records = _records(raw.get(record_key))
        if records:
            return DetectedShape(CURRENT, records)
    legacy_key = spec.get("legacy_key")
    if legacy_key:
        obj = raw.get(legacy_key)
        if isinstance(obj, dict) and _legacy_has_content(obj, spec):
            return DetectedShape(LEGACY, obj)
    return DetectedShape(EMPTY)


def _table_from_items(items: Sequence[Mapping[str, Any]], coll: Dict[str, Any]) -> RowTable:
    table = RowTable()
    for i, item in enumerate(items):
        values = {local: _pick(item, fdef, local) for local, fdef in coll["fields"].items()}
        serial = parse_serial(item.get("serialNo", item.get("SerialNo")), i + 1)
        table = R.append_hydrated(table, _id_of(item), values, serial)
    return R.renumber(R.sort_by_serial(table))


def _default_table(coll: Dict[str, Any]) -> RowTable:
    table = RowTable()
    for defaults in coll["default_rows"]:
        values = {local: "" for local in coll["fields"]}
        values.update(defaults)
        table = R.add_row(table, values, synthesized=True)
    return table


def normalize(raw: Optional[Mapping[str, Any]], section_key: str, registry) -> SectionState:
    spec = registry.get_spec(section_key)
    if not spec:
        raise KeyError(f"Unknown section: {section_key}")
    shape = detect_shape(raw, spec)
    section = SectionState(key=section_key, phase=SectionPhase.HYDRATED, source_shape=shape.kind)

    if shape.kind == CURRENT:
        first = shape.payload[0]
        section.record_id = _id_of(first)
        section.scalar_fields = {k: _pick(first, f, k) for k, f in spec["scalars"].items()}
        for cname, coll in spec["collections"].items():
            items: List[Dict[str, Any]] = []
            for record in shape.payload:
                items.extend(_records(record.get(coll["detail_key"])))
            section.collections[cname] = _table_from_items(items, coll)
    elif shape.kind == LEGACY:
        obj = shape.payload
        section.record_id = _id_of(obj)
        section.scalar_fields = {k: _pick(obj, f, k) for k, f in spec["scalars"].items()}
        for cname, coll in spec["collections"].items():
            section.collections[cname] = _table_from_items(_records(obj.get(coll["legacy_key"])), coll)
    else:
        section.scalar_fields = {k: "" for k in spec["scalars"]}
        for cname, coll in spec["collections"].items():
            section.collections[cname] = _default_table(coll)

    log.debug("normalized %s from %s shape", section_key, shape.kind)
    return section


# ----- outbound -----

def _out_name(fdef: Dict[str, Any], local: str) -> str:
    return fdef.get("out") or _pascal(fdef.get("wire", local))


def _out_value(fdef: Dict[str, Any], value: Any, vocabularies: Optional[Mapping[str, Sequence[Any]]]) -> Any:
    if fdef.get("type") != "status":
        return value
    if is_blank(value):
        return None
    options = (vocabularies or {}).get(fdef.get("vocabulary"))
    if options is None:
        return value
    return resolve_vocabulary_id(value, options)


def denormalize(section: SectionState, section_key: str, registry,
                vocabularies: Optional[Mapping[str, Sequence[Any]]] = None) -> Dict[str, Any]:
    """
    Minimal outbound diff for one section:
      - only scalars edited since hydration
      - creates carry every field, updates only ID + SerialNo + changed fields,
        deletes only ID + IsDeleted
      - untouched persisted rows and untouched default rows are left out
    An unedited section gives {}.
    """
    spec = registry.get_spec(section_key)
    out: Dict[str, Any] = {}

    for local in section.changed_scalars:
        fdef = spec["scalars"].get(local)
        if fdef is None:
            continue
        out[_out_name(fdef, local)] = _out_value(fdef, section.scalar_fields.get(local), vocabularies)

    for cname, coll in spec["collections"].items():
        table = section.collections.get(cname)
        if table is None:
            continue
        d = R.diff(table)
        if d.is_empty:
            continue
        fields = coll["fields"]
        items: List[Dict[str, Any]] = []
        for row in d.creates:
            item: Dict[str, Any] = {"ID": None, "SerialNo": str(row.serial_no)}
            for local, fdef in fields.items():
                item[_out_name(fdef, local)] = _out_value(fdef, row.fields.get(local, ""), vocabularies)
            item["IsNew"] = True
            items.append(item)
        for row in d.updates:
            item = {"ID": row.identity.row_id, "SerialNo": str(row.serial_no)}
            for local in row.changed:
                fdef = fields.get(local)
                if fdef is not None:
                    item[_out_name(fdef, local)] = _out_value(fdef, row.fields.get(local), vocabularies)
            items.append(item)
        for row in d.deletes:
            items.append({"ID": row.identity.row_id, "IsDeleted": True})
        out[_pascal(coll["detail_key"])] = items

    if out and section.record_id:
        out["ID"] = section.record_id
    return out


# ----- report header -----

def _first(*values: Any) -> Any:
    for v in values:
        if not is_blank(v):
            return v
    return ""


def extract_metadata(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Read-only report header, with the same fallbacks the report screens use."""
    raw = raw or {}
    form = raw.get("reportForm") or {}
    server = raw.get("pmReportFormServer") or {}
    return {
        "reportFormID": _first(form.get("id"), server.get("reportFormID"), raw.get("reportFormID")),
        "jobNo": _first(form.get("jobNo"), raw.get("jobNo")),
        "projectNo": _first(server.get("projectNo"), raw.get("projectNo")),
        "stationName": _first(raw.get("stationNameWarehouseName"), server.get("stationName")),
        "systemDescription": _first(raw.get("systemNameWarehouseName"), server.get("systemDescription")),
        "customer": _first(server.get("customer"), raw.get("customer")),
        "reportTitle": _first(server.get("reportTitle"), "Server Preventive Maintenance Report"),
        "pmReportFormTypeID": _first(server.get("pmReportFormTypeID")),
        "pmReportFormTypeName": _first(server.get("pmReportFormTypeName")),
        "dateOfService": _first(server.get("dateOfService")),
    }


class ResponseNormalizer:
    """Registry-bound front for the module functions."""

    def __init__(self, registry):
        self.registry = registry

    def detect(self, raw, section_key: str) -> DetectedShape:
        return detect_shape(raw, self.registry.get_spec(section_key))

    def normalize(self, raw, section_key: str) -> SectionState:
        return normalize(raw, section_key, self.registry)

    def denormalize(self, section: SectionState, vocabularies=None) -> Dict[str, Any]:
        return denormalize(section, section.key, self.registry, vocabularies)

    def metadata(self, raw) -> Dict[str, Any]:
        return extract_metadata(raw)
