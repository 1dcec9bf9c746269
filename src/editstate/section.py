from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import copy
import logging

from sections.response import normalize as normalize_response
from . import rows as R
from .commands import (
    Command, HydrateSection, SetScalarField, AddRow, EditRowField, DeleteRow, RestoreRow,
)
from .completion import is_complete
from .model import RowTable, SectionPhase, SectionState
from .protocol import SectionRegistryProtocol

log = logging.getLogger(__name__)


def reduce_section(section: SectionState, cmd: Command, registry: SectionRegistryProtocol) -> SectionState:
    """
    Pure transition for one section. Never mutates the input.
    Raises ValueError on impossible transitions (edits before hydration,
    second hydration, unknown collection or field, invalid value).
    """
    if isinstance(cmd, HydrateSection):
        if section.is_initialized:
            raise ValueError(f"Section {section.key} is already hydrated.")
        return normalize_response(cmd.raw, section.key, registry)

    if not section.is_initialized:
        raise ValueError(f"Section {section.key} is not hydrated yet.")

    s = copy.deepcopy(section)

    if isinstance(cmd, SetScalarField):
        ok, normalized, err = registry.validate_value(s.key, None, cmd.field, cmd.value)
        if not ok:
            raise ValueError(err or f"Invalid value for {cmd.field}: {cmd.value}")
        s.scalar_fields[cmd.field] = normalized
        if cmd.field not in s.changed_scalars:
            s.changed_scalars.append(cmd.field)
        s.phase = SectionPhase.EDITING
        return s

    if isinstance(cmd, AddRow):
        table = _table(s, cmd.collection)
        values = _blank_row(registry, s.key, cmd.collection)
        for fname, value in (cmd.defaults or {}).items():
            values[fname] = _validated(registry, s.key, cmd.collection, fname, value)
        s.collections[cmd.collection] = R.renumber(R.add_row(table, values))
        s.phase = SectionPhase.EDITING
        return s

    if isinstance(cmd, EditRowField):
        table = _table(s, cmd.collection)
        value = _validated(registry, s.key, cmd.collection, cmd.field, cmd.value)
        s.collections[cmd.collection] = R.renumber(R.edit_field(table, cmd.handle, cmd.field, value))
        s.phase = SectionPhase.EDITING
        return s

    if isinstance(cmd, DeleteRow):
        table = _table(s, cmd.collection)
        s.collections[cmd.collection] = R.renumber(R.soft_delete(table, cmd.handle))
        s.phase = SectionPhase.EDITING
        return s

    if isinstance(cmd, RestoreRow):
        table = _table(s, cmd.collection)
        s.collections[cmd.collection] = R.renumber(R.restore(table, cmd.handle))
        s.phase = SectionPhase.EDITING
        return s

    raise ValueError(f"Unsupported section command: {type(cmd).__name__}")


class SectionEditModel:
    """
    One wizard step's editable data. Hosts get:
      data                                  current SectionState
      on_data_change(new_state)             once per applied edit
      on_status_change(section_key, done)   right after each data change
    Nothing is emitted until the section has been hydrated.
    """

    def __init__(self, key: str, registry: SectionRegistryProtocol, state: Optional[SectionState] = None,
                 on_data_change: Optional[Callable[[SectionState], None]] = None,
                 on_status_change: Optional[Callable[[str, bool], None]] = None):
        self.key = key
        self.registry = registry
        self._state = state if state is not None else SectionState(key=key)
        self.on_data_change = on_data_change
        self.on_status_change = on_status_change

    @property
    def data(self) -> SectionState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state.is_initialized

    def is_complete(self) -> bool:
        return is_complete(self._state, self.registry.get_spec(self.key))

    def hydrate(self, raw: Optional[Dict[str, Any]]) -> bool:
        if self._state.is_initialized:
            log.warning("%s: already hydrated, ignoring new data", self.key)
            return False
        self._state = reduce_section(self._state, HydrateSection(self.key, raw), self.registry)
        if self.on_status_change:
            self.on_status_change(self.key, self.is_complete())
        return True

    def apply(self, cmd: Command) -> SectionState:
        if isinstance(cmd, HydrateSection):
            self.hydrate(cmd.raw)
            return self._state
        if not self._state.is_initialized:
            log.warning("%s: dropped %s received before hydration", self.key, type(cmd).__name__)
            return self._state
        self._state = reduce_section(self._state, cmd, self.registry)
        log.debug("%s: applied %s", self.key, type(cmd).__name__)
        if self.on_data_change:
            self.on_data_change(self._state)
        if self.on_status_change:
            self.on_status_change(self.key, self.is_complete())
        return self._state

    # ----- conveniences -----

    def set_field(self, field: str, value: Any) -> SectionState:
        return self.apply(SetScalarField(self.key, field, value))

    def add_row(self, collection: str, defaults: Optional[Dict[str, Any]] = None) -> Optional[int]:
        """Returns the new row's handle, or None if the edit was dropped."""
        table = self._state.collections.get(collection)
        handle = table.next_handle if table is not None else None
        before = self._state
        self.apply(AddRow(self.key, collection, defaults))
        return handle if self._state is not before else None

    def edit_row(self, collection: str, handle: int, field: str, value: Any) -> SectionState:
        return self.apply(EditRowField(self.key, collection, handle, field, value))

    def delete_row(self, collection: str, handle: int) -> SectionState:
        return self.apply(DeleteRow(self.key, collection, handle))

    def restore_row(self, collection: str, handle: int) -> SectionState:
        return self.apply(RestoreRow(self.key, collection, handle))

    def sync(self, state: SectionState) -> None:
        """Replace the held state silently (history navigation)."""
        self._state = state


# ----- helpers -----

def _table(s: SectionState, collection: str) -> RowTable:
    table = s.collections.get(collection)
    if table is None:
        raise ValueError(f"Unknown collection for {s.key}: {collection}")
    return table


def _blank_row(registry, key: str, collection: str) -> Dict[str, Any]:
    coll = registry.get_spec(key).get("collections", {}).get(collection, {})
    return {fname: "" for fname in coll.get("fields", {})}


def _validated(registry, key: str, collection: str, fname: str, value: Any) -> Any:
    ok, normalized, err = registry.validate_value(key, collection, fname, value)
    if not ok:
        raise ValueError(err or f"Invalid value for {fname}: {value}")
    return normalized
