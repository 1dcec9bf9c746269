from __future__ import annotations
from dataclasses import dataclass, field
from typing import List
import copy

from .model import ReportEditState
from .commands import Command
from .reducer import reduce
from .protocol import SectionRegistryProtocol

DEFAULT_MAX_HISTORY = 10


@dataclass
class Store:
    """
    Small wrapper around the pure reducer with undo/redo snapshots.

    Usage:
        store = Store(registry=my_registry)
        store.apply(LoadReport("42", raw))
        store.undo(); store.redo()

    Only the last max_history snapshots are kept; older ones are dropped.
    """
    state: ReportEditState = field(default_factory=ReportEditState)
    registry: SectionRegistryProtocol = field(default=None)  # inject at construction
    max_history: int = DEFAULT_MAX_HISTORY
    _undo: List[ReportEditState] = field(default_factory=list)
    _redo: List[ReportEditState] = field(default_factory=list)

    def apply(self, cmd: Command, record: bool = True) -> ReportEditState:
        """record=False applies without an undo snapshot (navigation, hydration)."""
        new_state = reduce(self.state, cmd, self.registry)
        if record:
            self._push_undo(copy.deepcopy(self.state))
            self._redo.clear()
        self.state = new_state
        return self.state

    def undo(self) -> ReportEditState:
        if not self._undo:
            return self.state
        self._redo.append(copy.deepcopy(self.state))
        self.state = self._undo.pop()
        return self.state

    def redo(self) -> ReportEditState:
        if not self._redo:
            return self.state
        self._push_undo(copy.deepcopy(self.state))
        self.state = self._redo.pop()
        return self.state

    def _push_undo(self, snapshot: ReportEditState) -> None:
        self._undo.append(snapshot)
        if len(self._undo) > self.max_history:
            del self._undo[:len(self._undo) - self.max_history]

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def clear_history(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def reset(self, state: ReportEditState = None) -> None:
        """Drop the session: fresh state, no history."""
        self.state = state if state is not None else ReportEditState()
        self.clear_history()
