from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import time


class Command:
    """Marker base class for all commands (intents)."""
    pass


# ----- section commands (routed to one section) -----

@dataclass
class SectionCommand(Command):
    section_key: str


@dataclass
class HydrateSection(SectionCommand):
    """Normalize backend data into the section; only valid while uninitialized."""
    raw: Optional[Dict[str, Any]] = None


@dataclass
class SetScalarField(SectionCommand):
    field: str = ""
    value: Any = None


@dataclass
class AddRow(SectionCommand):
    collection: str = ""
    defaults: Optional[Dict[str, Any]] = None


@dataclass
class EditRowField(SectionCommand):
    collection: str = ""
    handle: int = 0
    field: str = ""
    value: Any = None


@dataclass
class DeleteRow(SectionCommand):
    collection: str = ""
    handle: int = 0


@dataclass
class RestoreRow(SectionCommand):
    collection: str = ""
    handle: int = 0


# ----- wizard commands -----

@dataclass
class LoadReport(Command):
    report_id: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SectionChanged(Command):
    """A bound section model produced a new state; record it in the report."""
    section_key: str
    section: Any = None
    edited: bool = True  # False when the change is a hydration


@dataclass
class NextStep(Command):
    """Advance one step; on the last step, flags a review/submit request."""


@dataclass
class PrevStep(Command):
    """Go back one step; on the first step, exits the wizard."""


@dataclass
class JumpToStep(Command):
    step: str


@dataclass
class ExitWizard(Command):
    """Leave the wizard without submitting."""


@dataclass
class FinishTransition(Command):
    """The step-change animation has finished."""


@dataclass
class MarkSubmitted(Command):
    """Signals that the backend accepted a submission; clears dirty and closes the edits to resubmission."""
    when: float = field(default_factory=time.time)
