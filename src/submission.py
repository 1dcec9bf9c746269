from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from editstate import ReportEditState
from editstate.rows import diff
from sections import SectionRegistry
from sections.normalize import is_blank
from sections.response import denormalize


# Report header fields carried on every update; the rest of the header is read-only.
HEADER_FIELDS = {
    "PMReportFormTypeID": "pmReportFormTypeID",
    "ProjectNo": "projectNo",
    "Customer": "customer",
    "ReportTitle": "reportTitle",
}


# ---------------------------
# Public Facade
# ---------------------------

class SubmissionBuilder:
    """
    Fold every section's minimal diff into one update payload, and check
    required fields before anything is sent.

    Typical usage:
        sb = SubmissionBuilder(registry)
        ok, errors = sb.validate(state)
        if ok:
            data = sb.build(state, vocabularies)
            api.update_server_pm_report(state.report_id, data)
    """

    def __init__(self, registry: SectionRegistry):
        self.registry = registry

    # ---- Build payload (dict) ----
    def build(self, state: ReportEditState,
              vocabularies: Optional[Mapping[str, Sequence[Any]]] = None) -> Dict[str, Any]:
        return _build_submission_dict(state, self.registry, vocabularies)

    # ---- Validate required fields on rows that will be sent ----
    def validate(self, state: ReportEditState) -> Tuple[bool, List[str]]:
        return _validate_state(state, self.registry)

    # ---- JSON text ----
    def dumps(self, data: Dict[str, Any], pretty: bool = True) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False) if pretty else json.dumps(data, separators=(",", ":"))

    def is_empty(self, data: Dict[str, Any]) -> bool:
        """True when the payload carries nothing beyond the report header."""
        return not any(k not in HEADER_FIELDS for k in data)


# ---------------------------
# Payload construction
# ---------------------------

def _build_submission_dict(state: ReportEditState, registry: SectionRegistry,
                           vocabularies: Optional[Mapping[str, Sequence[Any]]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for out_key, meta_key in HEADER_FIELDS.items():
        value = state.metadata.get(meta_key)
        out[out_key] = None if is_blank(value) else value

    for key in state.steps:
        section = state.sections.get(key)
        if section is None or not section.is_initialized:
            continue
        payload = denormalize(section, key, registry, vocabularies)
        if payload:
            out[registry.get_spec(key)["submit_key"]] = payload
    return out


# ---------------------------
# Validation (required fields on outgoing rows)
# ---------------------------

def _validate_state(state: ReportEditState, registry: SectionRegistry) -> Tuple[bool, List[str]]:
    """
    Rows about to be created or updated must carry their key fields
    (server name, machine name, ...). Deleted rows are never checked.
    Return (ok, errors).
    """
    errors: List[str] = []
    for key in state.steps:
        section = state.sections.get(key)
        if section is None or not section.is_initialized:
            continue
        spec = registry.get_spec(key)
        title = spec.get("title", key)
        for cname, coll in spec["collections"].items():
            table = section.collections.get(cname)
            if table is None:
                continue
            d = diff(table)
            for row in d.creates + d.updates:
                for fname in coll["key_fields"]:
                    if is_blank(row.fields.get(fname)):
                        label = coll["fields"][fname].get("label", fname)
                        errors.append(f"{title} row {row.serial_no}: missing required '{label}'")
    return (len(errors) == 0), errors
