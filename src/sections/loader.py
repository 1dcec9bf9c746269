from __future__ import annotations
from typing import Dict, Any, Optional
from pathlib import Path
import logging

import yaml

log = logging.getLogger(__name__)


def load_section_specs(path: Optional[str | Path]) -> Dict[str, Dict[str, Any]]:
    """
    Load YAML section overrides from a directory (optional).
    Returns a dict {section_key: spec}. No-op if the path is missing.
    A file holds either one section (with a top-level 'key') or a 'sections' list.
    """
    specs: Dict[str, Dict[str, Any]] = {}
    if not path:
        return specs
    p = Path(path)
    if not p.exists() or not p.is_dir():
        log.warning("section overrides directory not found: %s", p)
        return specs
    for yml in sorted(p.glob("*.yaml")):
        data = (yaml.safe_load(yml.read_text(encoding="utf-8")) or {})
        entries = data["sections"] if isinstance(data.get("sections"), list) else [data]
        for spec in entries:
            key = spec.get("key")
            if not key:
                raise ValueError(f"{yml}: section spec missing 'key'")
            specs[key] = {k: v for k, v in spec.items() if k != "key"}
        log.debug("loaded %d section spec(s) from %s", len(entries), yml.name)
    return specs
