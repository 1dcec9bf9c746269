from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class SectionPhase(Enum):
    UNINITIALIZED = auto()
    HYDRATED = auto()
    EDITING = auto()


@dataclass(frozen=True)
class RowIdentity:
    """Persisted(id) for rows the backend knows about, Pending for client-side rows."""
    row_id: Optional[str] = None

    @classmethod
    def persisted(cls, row_id: Any) -> "RowIdentity":
        if row_id is None or str(row_id) == "":
            raise ValueError("A persisted row needs a non-empty id.")
        return cls(row_id=str(row_id))

    @classmethod
    def pending(cls) -> "RowIdentity":
        return cls()

    @property
    def is_persisted(self) -> bool:
        return self.row_id is not None


@dataclass
class EditFlags:
    is_new: bool = False
    is_modified: bool = False
    is_deleted: bool = False
    # is_modified as it was before a soft delete; put back on restore
    modified_before_delete: bool = False


@dataclass
class DetailRow:
    handle: int
    identity: RowIdentity
    serial_no: int
    fields: Dict[str, Any] = field(default_factory=dict)
    flags: EditFlags = field(default_factory=EditFlags)
    changed: List[str] = field(default_factory=list)  # fields edited since hydration
    synthesized: bool = False  # default scenario row, untouched so far
    hydrated_serial: Optional[int] = None  # serial the backend holds for a persisted row

    @property
    def visible(self) -> bool:
        return not self.flags.is_deleted


@dataclass
class RowTable:
    """
    One section collection. Rows keep display order; callers address them by
    handle, which stays valid across adds and removals.
    """
    rows: List[DetailRow] = field(default_factory=list)
    next_handle: int = 1

    def visible_rows(self) -> List[DetailRow]:
        return [r for r in self.rows if r.visible]

    def find(self, handle: int) -> Optional[DetailRow]:
        for r in self.rows:
            if r.handle == handle:
                return r
        return None

    def index_of(self, handle: int) -> int:
        for i, r in enumerate(self.rows):
            if r.handle == handle:
                return i
        return -1

    def handle_for_serial(self, serial_no: int) -> Optional[int]:
        """Visible row currently showing this serial number."""
        for r in self.visible_rows():
            if r.serial_no == serial_no:
                return r.handle
        return None


@dataclass
class SectionState:
    key: str
    scalar_fields: Dict[str, Any] = field(default_factory=dict)
    collections: Dict[str, RowTable] = field(default_factory=dict)
    phase: SectionPhase = SectionPhase.UNINITIALIZED
    record_id: Optional[str] = None
    source_shape: Optional[str] = None  # "current" | "legacy" | "empty"
    changed_scalars: List[str] = field(default_factory=list)

    @property
    def is_initialized(self) -> bool:
        return self.phase != SectionPhase.UNINITIALIZED

    @property
    def remarks(self) -> str:
        return str(self.scalar_fields.get("remarks") or "")


@dataclass
class ReportEditState:
    report_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)  # read-only header
    steps: List[str] = field(default_factory=list)
    sections: Dict[str, SectionState] = field(default_factory=dict)
    current_step: Optional[str] = None
    is_transitioning: bool = False
    exited: bool = False
    review_requested: bool = False
    dirty: bool = False
    submitted: bool = False  # the edits were accepted; a reload starts a new session
    last_submitted_at: float = 0.0

    def get_section(self, key: str) -> Optional[SectionState]:
        return self.sections.get(key)

    def current_index(self) -> int:
        """Position of current_step in steps; -1 before a report is loaded."""
        if self.current_step is None or self.current_step not in self.steps:
            return -1
        return self.steps.index(self.current_step)
