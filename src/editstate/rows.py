"""
Row reconciliation for one section collection.

Every function takes a RowTable and returns a new one; the input is never
touched, so callers can compare old and new values for change detection.

Delete/restore policy:
  - a Pending row is removed outright on delete;
  - a Persisted row is flagged (is_deleted + is_modified) and stays in place,
    hidden from visible_rows(), so it can be restored before submission;
  - renumber() only renumbers visible rows; a deleted row keeps the serial it
    had when it was last visible, and a restore puts it back at its old
    position in list order;
  - renumber() never flags rows; diff() compares serial_no with
    hydrated_serial to find persisted rows that moved.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import copy

from errors import InvalidRowOperation
from .model import DetailRow, EditFlags, RowIdentity, RowTable


@dataclass
class RowDiff:
    creates: List[DetailRow] = field(default_factory=list)
    updates: List[DetailRow] = field(default_factory=list)
    deletes: List[DetailRow] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)


def add_row(table: RowTable, defaults: Optional[Dict[str, Any]] = None, synthesized: bool = False) -> RowTable:
    t = copy.deepcopy(table)
    row = DetailRow(
        handle=t.next_handle,
        identity=RowIdentity.pending(),
        serial_no=len(t.visible_rows()) + 1,
        fields=dict(defaults or {}),
        flags=EditFlags(is_new=True),
        synthesized=synthesized,
    )
    t.rows.append(row)
    t.next_handle += 1
    return t


def append_hydrated(table: RowTable, row_id: Any, fields: Dict[str, Any], serial_no: int) -> RowTable:
    """Append a row coming from backend data; no id means the backend sent an unsaved row."""
    t = copy.deepcopy(table)
    persisted = row_id is not None and str(row_id) != ""
    row = DetailRow(
        handle=t.next_handle,
        identity=RowIdentity.persisted(row_id) if persisted else RowIdentity.pending(),
        serial_no=serial_no,
        fields=dict(fields),
        flags=EditFlags(is_new=not persisted),
        hydrated_serial=serial_no if persisted else None,
    )
    t.rows.append(row)
    t.next_handle += 1
    return t


def edit_field(table: RowTable, handle: int, field_name: str, value: Any) -> RowTable:
    t = copy.deepcopy(table)
    row = _require(t, handle, "edit")
    if row.flags.is_deleted:
        raise InvalidRowOperation(f"Row {handle} is deleted; restore it before editing.")
    row.fields[field_name] = value
    row.synthesized = False
    if row.identity.is_persisted:
        row.flags.is_modified = True
        if field_name not in row.changed:
            row.changed.append(field_name)
    return t


def soft_delete(table: RowTable, handle: int) -> RowTable:
    t = copy.deepcopy(table)
    row = _require(t, handle, "delete")
    if row.flags.is_deleted:
        raise InvalidRowOperation(f"Row {handle} is already deleted.")
    if row.identity.is_persisted:
        row.flags.modified_before_delete = row.flags.is_modified
        row.flags.is_deleted = True
        row.flags.is_modified = True
    else:
        del t.rows[t.index_of(handle)]
    return t


def restore(table: RowTable, handle: int) -> RowTable:
    """Undelete a row; is_modified goes back to its pre-delete value, so an untouched row is not re-sent."""
    t = copy.deepcopy(table)
    row = _require(t, handle, "restore")
    if not row.flags.is_deleted:
        raise InvalidRowOperation(f"Row {handle} is not deleted; nothing to restore.")
    row.flags.is_deleted = False
    row.flags.is_modified = row.flags.modified_before_delete
    row.flags.modified_before_delete = False
    return t


def renumber(table: RowTable) -> RowTable:
    t = copy.deepcopy(table)
    n = 0
    for row in t.rows:
        if row.flags.is_deleted:
            continue
        n += 1
        row.serial_no = n
    return t


def sort_by_serial(table: RowTable) -> RowTable:
    """Stable ascending sort on serial_no (ties keep their current order)."""
    t = copy.deepcopy(table)
    t.rows.sort(key=lambda r: r.serial_no)
    return t


def diff(table: RowTable) -> RowDiff:
    """
    Minimal-diff classification:
      deleted + Persisted        -> delete
      Pending, not synthesized   -> create
      Persisted + is_modified    -> update
      anything else              -> omitted
    Once the table has any change, persisted rows whose serial moved away
    from the backend's are added as updates too, so the saved serials stay
    dense and unique.
    """
    out = RowDiff()
    moved: List[DetailRow] = []
    for row in table.rows:
        if row.flags.is_deleted:
            if row.identity.is_persisted:
                out.deletes.append(row)
            continue
        if not row.identity.is_persisted:
            if not row.synthesized:
                out.creates.append(row)
            continue
        if row.flags.is_modified:
            out.updates.append(row)
        elif row.hydrated_serial is not None and row.serial_no != row.hydrated_serial:
            moved.append(row)
    if not out.is_empty:
        out.updates.extend(moved)
    return out


# ----- helpers -----

def _require(table: RowTable, handle: int, action: str) -> DetailRow:
    row = table.find(handle)
    if row is None:
        raise InvalidRowOperation(f"Cannot {action}: no row with handle {handle}.")
    return row
