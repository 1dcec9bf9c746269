"""
Lookup vocabularies (YesNoStatus, ResultStatus, ...) shared by every section.

Each vocabulary is fetched at most once per cache and kept as an immutable
tuple of LookupOption. A failed fetch is logged, recorded in `failures`, and
replaced by a small built-in list so the editor stays usable.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

import httpx

from errors import ApiError, VocabularyFetchFailure

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupOption:
    id: str
    name: str


def _options(names: Iterable[str]) -> Tuple[LookupOption, ...]:
    # offline fallbacks have no backend ids; the name stands in for it
    return tuple(LookupOption(id=n, name=n) for n in names)


FALLBACK_VOCABULARIES: Dict[str, Tuple[LookupOption, ...]] = {
    "YesNoStatus": _options(["Yes", "No"]),
    "ResultStatus": _options(["Pass", "Fail"]),
    "ServerDiskStatus": _options(["Healthy", "Unhealthy"]),
    "ASAFirewallStatus": _options(["Normal", "Abnormal"]),
}


def parse_options(items: Iterable[Mapping[str, Any]]) -> Tuple[LookupOption, ...]:
    out: List[LookupOption] = []
    for item in items:
        oid = item.get("id", item.get("ID"))
        name = item.get("name", item.get("Name"))
        if oid is None or name is None:
            raise ApiError(f"Lookup entry without id/name: {item!r}")
        out.append(LookupOption(id=str(oid), name=str(name)))
    return tuple(out)


class LookupCache:
    """
    Usage:
        cache = LookupCache(api.get_vocabulary)
        cache.get("YesNoStatus")   # -> (LookupOption(...), ...)
    """

    def __init__(self, fetch: Callable[[str], Iterable[Mapping[str, Any]]],
                 fallbacks: Optional[Mapping[str, Tuple[LookupOption, ...]]] = None):
        self._fetch = fetch
        self._fallbacks = dict(FALLBACK_VOCABULARIES if fallbacks is None else fallbacks)
        self._cache: Dict[str, Tuple[LookupOption, ...]] = {}
        self.failures: Dict[str, VocabularyFetchFailure] = {}

    def get(self, name: str) -> Tuple[LookupOption, ...]:
        if name not in self._cache:
            self._cache[name] = self._load(name)
        return self._cache[name]

    def refresh(self, name: Optional[str] = None) -> None:
        """Forget one vocabulary (or all); the next get() fetches again."""
        names = [name] if name else list(self._cache)
        for n in names:
            self._cache.pop(n, None)
            self.failures.pop(n, None)

    def is_degraded(self, name: str) -> bool:
        return name in self.failures

    def names(self) -> List[str]:
        return sorted(self._cache)

    def as_mapping(self) -> Dict[str, Tuple[LookupOption, ...]]:
        return dict(self._cache)

    def _load(self, name: str) -> Tuple[LookupOption, ...]:
        try:
            return parse_options(self._fetch(name))
        except (httpx.HTTPError, ApiError, KeyError, TypeError, ValueError) as e:
            failure = VocabularyFetchFailure(name, str(e) or type(e).__name__)
            self.failures[name] = failure
            log.warning("%s; using fallback values", failure)
            return self._fallbacks.get(name, ())
