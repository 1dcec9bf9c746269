"""
Public API for the editstate package.

Import from here everywhere else, so you can refactor internals freely:
    from editstate import (
        ReportEditState, SectionState, RowTable, DetailRow, RowIdentity, EditFlags, SectionPhase,
        HydrateSection, SetScalarField, AddRow, EditRowField, DeleteRow, RestoreRow,
        LoadReport, SectionChanged, NextStep, PrevStep, JumpToStep, FinishTransition, MarkSubmitted,
        SectionRegistryProtocol, reduce, reduce_section, SectionEditModel, Store,
        is_complete, evaluate_all,
    )
"""
from .model import (
    ReportEditState, SectionState, RowTable, DetailRow, RowIdentity, EditFlags, SectionPhase,
)
from .commands import (
    Command, SectionCommand,
    HydrateSection, SetScalarField, AddRow, EditRowField, DeleteRow, RestoreRow,
    LoadReport, SectionChanged, NextStep, PrevStep, JumpToStep, ExitWizard, FinishTransition, MarkSubmitted,
)
from .protocol import SectionRegistryProtocol
from .rows import RowDiff
from .section import reduce_section, SectionEditModel
from .completion import is_complete, evaluate_all
from .reducer import reduce
from .store import Store, DEFAULT_MAX_HISTORY

__all__ = [
    # model
    "ReportEditState", "SectionState", "RowTable", "DetailRow", "RowIdentity", "EditFlags",
    "SectionPhase", "RowDiff",
    # commands
    "Command", "SectionCommand",
    "HydrateSection", "SetScalarField", "AddRow", "EditRowField", "DeleteRow", "RestoreRow",
    "LoadReport", "SectionChanged", "NextStep", "PrevStep", "JumpToStep", "ExitWizard", "FinishTransition",
    "MarkSubmitted",
    # protocol, reducers, model, store
    "SectionRegistryProtocol", "reduce", "reduce_section", "SectionEditModel", "Store", "DEFAULT_MAX_HISTORY",
    "is_complete", "evaluate_all",
]
