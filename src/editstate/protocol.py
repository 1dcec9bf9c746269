from __future__ import annotations
from typing import Protocol, Optional, Any, Tuple, Dict, List


class SectionRegistryProtocol(Protocol):
    """
    Minimal contract used by the reducers to stay decoupled from the section catalog.

    Implementations must provide:
      - steps() -> ordered list of section keys (the wizard's step list)
      - get_spec(section_key) -> dict with keys:
            title: str
            record_key / legacy_key / submit_key: str
            scalars: {field: field def}
            collections: {name: {detail_key, legacy_key, fields, key_fields,
                                 complete_fields, default_rows}}
            completion: {collections, scalars, rows, join}
      - validate_value(section_key, collection, field, value)
            -> (ok: bool, normalized: Any, error: str|None)
        collection is None for scalar fields.
    """
    def steps(self) -> List[str]: ...
    def get_spec(self, section_key: str) -> Dict[str, Any]: ...
    def validate_value(self, section_key: str, collection: Optional[str], field: str,
                       value: Any) -> Tuple[bool, Any, Optional[str]]: ...
