from __future__ import annotations
from typing import Dict, Any, List, Optional, Set, Tuple
from pathlib import Path
import copy

from editstate.protocol import SectionRegistryProtocol
from .normalize import normalize_text, normalize_date, normalize_status
from .specs import BUILTIN_SECTIONS, STEP_ORDER
from .loader import load_section_specs


class SectionRegistry(SectionRegistryProtocol):
    """
    Concrete section catalog with:
      - Built-in specs for all Server PM sections
      - Optional YAML overrides/extensions (plugins directory)
      - Optional extra_specs dict injection (for tests)
    Sections not in the built-in step order are appended after it.
    """

    def __init__(self, plugins_dir: Optional[str | Path] = None, extra_specs: Optional[Dict[str, Dict[str, Any]]] = None):
        self._specs: Dict[str, Dict[str, Any]] = {}
        self._order: List[str] = []

        # 1) built-ins
        for key in STEP_ORDER:
            self._register_spec(key, BUILTIN_SECTIONS[key])

        # 2) caller-provided extra specs (override/extend)
        if extra_specs:
            for key, spec in extra_specs.items():
                self._register_spec(key, spec)

        # 3) YAML overrides (override/extend)
        for key, spec in load_section_specs(plugins_dir).items():
            self._register_spec(key, spec)

    # ----- Protocol methods -----

    def steps(self) -> List[str]:
        return list(self._order)

    def get_spec(self, section_key: str) -> Dict[str, Any]:
        return self._specs.get(section_key, {})

    def validate_value(self, section_key: str, collection: Optional[str], field: str,
                       value: Any) -> Tuple[bool, Any, Optional[str]]:
        spec = self._specs.get(section_key)
        if not spec:
            return False, None, f"Unknown section: {section_key}"
        if collection is None:
            fdef = spec["scalars"].get(field)
            where = section_key
        else:
            coll = spec["collections"].get(collection)
            if coll is None:
                return False, None, f"Unknown collection for {section_key}: {collection}"
            fdef = coll["fields"].get(field)
            where = f"{section_key}.{collection}"
        if not fdef:
            return False, None, f"Unknown field for {where}: {field}"

        ftype = fdef.get("type", "text")
        if ftype == "text":
            return normalize_text(value)
        if ftype == "date":
            return normalize_date(value)
        if ftype == "status":
            return normalize_status(value)

        return False, None, f"Unsupported field type '{ftype}' for {where}.{field}"

    # ----- lookups used by the normalizer / evaluator / submission -----

    def title(self, section_key: str) -> str:
        return self.get_spec(section_key).get("title", section_key)

    def collection_spec(self, section_key: str, collection: str) -> Dict[str, Any]:
        return self.get_spec(section_key).get("collections", {}).get(collection, {})

    def vocabularies(self) -> Set[str]:
        """Every lookup vocabulary referenced by any status field."""
        names: Set[str] = set()
        for spec in self._specs.values():
            field_defs = list(spec["scalars"].values())
            for coll in spec["collections"].values():
                field_defs.extend(coll["fields"].values())
            for fdef in field_defs:
                if fdef.get("type") == "status" and fdef.get("vocabulary"):
                    names.add(fdef["vocabulary"])
        return names

    def all_specs(self) -> Dict[str, Dict[str, Any]]:
        return {k: self._specs[k] for k in self._order}

    # ----- internal plumbing -----

    def _register_spec(self, key: str, spec: Dict[str, Any]) -> None:
        spec = copy.deepcopy(spec)
        spec.setdefault("title", key)
        spec.setdefault("record_key", None)
        spec.setdefault("legacy_key", None)
        spec.setdefault("submit_key", f"{key}Data")
        spec.setdefault("scalars", {})
        spec.setdefault("collections", {})
        spec.setdefault("completion", {})

        completion = spec["completion"]
        completion.setdefault("collections", [])
        completion.setdefault("scalars", [])
        completion.setdefault("rows", "all")
        completion.setdefault("join", "and")
        if completion["rows"] not in ("all", "any") or completion["join"] not in ("and", "or"):
            raise ValueError(f"Spec for {key} has an invalid completion rule: {completion}")

        for fname in completion["scalars"]:
            if fname not in spec["scalars"]:
                raise ValueError(f"Spec for {key} requires unknown scalar '{fname}' for completion")

        for cname, coll in spec["collections"].items():
            coll.setdefault("detail_key", "details")
            coll.setdefault("legacy_key", cname)
            coll.setdefault("fields", {})
            coll.setdefault("key_fields", [])
            coll.setdefault("complete_fields", [])
            coll.setdefault("default_rows", [])
            fields = coll["fields"]
            for fname in list(coll["key_fields"]) + list(coll["complete_fields"]):
                if fname not in fields:
                    raise ValueError(f"Spec for {key}.{cname} references unknown field '{fname}'")
            for row in coll["default_rows"]:
                for fname in row:
                    if fname not in fields:
                        raise ValueError(f"Spec for {key}.{cname} has a default row with unknown field '{fname}'")

        for cname in completion["collections"]:
            if cname not in spec["collections"]:
                raise ValueError(f"Spec for {key} requires unknown collection '{cname}' for completion")

        self._specs[key] = spec
        if key not in self._order:
            self._order.append(key)
