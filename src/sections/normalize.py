from __future__ import annotations
from datetime import date, datetime
from typing import Any, Iterable, Optional, Tuple
import re

_GUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def _lc(x: Any) -> str:
    return str(x).strip().lower()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def normalize_text(value: Any) -> Tuple[bool, Any, Optional[str]]:
    if value is None:
        return True, "", None
    if isinstance(value, (dict, list, tuple, set)):
        return False, None, f"Expected text, got: {value!r}"
    return True, str(value), None


def normalize_date(value: Any) -> Tuple[bool, Any, Optional[str]]:
    """Dates travel as ISO-8601 strings; blank stays blank."""
    if is_blank(value):
        return True, "", None
    if isinstance(value, datetime):
        return True, value.isoformat(), None
    if isinstance(value, date):
        return True, value.isoformat(), None
    s = str(value).strip()
    try:
        datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return False, None, f"Expected an ISO date, got: {value}"
    return True, s, None


def normalize_status(value: Any) -> Tuple[bool, Any, Optional[str]]:
    """Status fields hold a vocabulary id (or, transiently, a vocabulary name)."""
    if value is None:
        return True, "", None
    if isinstance(value, (dict, list, tuple, set)):
        return False, None, f"Expected a status id, got: {value!r}"
    return True, str(value).strip(), None


def parse_serial(value: Any, default: int) -> int:
    """Backend serials are strings like "3"; anything unusable falls back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        n = int(str(value).strip())
    except ValueError:
        return default
    return n if n > 0 else default


def resolve_vocabulary_id(value: Any, options: Iterable[Any]) -> Any:
    """
    Map a status value onto a vocabulary id.
    GUIDs and known ids pass through; a known name (case-insensitive) becomes its id;
    blank becomes None; anything else is returned unchanged.
    """
    if is_blank(value):
        return None
    s = str(value).strip()
    if _GUID.match(s):
        return s
    opts = list(options or ())
    for opt in opts:
        if str(opt.id) == s:
            return opt.id
    for opt in opts:
        if _lc(opt.name) == _lc(s):
            return opt.id
    return s
