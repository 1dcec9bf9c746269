from __future__ import annotations
import copy

from .model import ReportEditState, SectionState
from .commands import (
    Command, SectionCommand, HydrateSection, LoadReport, SectionChanged,
    NextStep, PrevStep, JumpToStep, ExitWizard, FinishTransition, MarkSubmitted,
)
from .protocol import SectionRegistryProtocol
from .section import reduce_section
from sections.response import extract_metadata


def reduce(state: ReportEditState, cmd: Command, registry: SectionRegistryProtocol) -> ReportEditState:
    """
    Pure state transformer for the whole report. Never mutates the input state.
    Raises ValueError on impossible transitions; the controller should generally guard.
    """
    s = copy.deepcopy(state)

    # --- Report load: header + empty (uninitialized) sections ---
    if isinstance(cmd, LoadReport):
        steps = list(registry.steps())
        return ReportEditState(
            report_id=str(cmd.report_id),
            metadata=extract_metadata(cmd.raw),
            steps=steps,
            sections={key: SectionState(key=key) for key in steps},
            current_step=steps[0] if steps else None,
        )

    # --- Section edits (hydration included) ---
    if isinstance(cmd, SectionCommand):
        sec = s.sections.get(cmd.section_key)
        if sec is None:
            raise ValueError(f"Unknown section: {cmd.section_key}")
        new_sec = reduce_section(sec, cmd, registry)
        s.sections[cmd.section_key] = new_sec
        if not isinstance(cmd, HydrateSection):
            s.dirty = True
        return s

    if isinstance(cmd, SectionChanged):
        if cmd.section_key not in s.sections:
            raise ValueError(f"Unknown section: {cmd.section_key}")
        s.sections[cmd.section_key] = copy.deepcopy(cmd.section)
        if cmd.edited:
            s.dirty = True
        return s

    # --- Step navigation (blocked while a transition is in flight) ---
    if isinstance(cmd, NextStep):
        if s.is_transitioning or s.current_step is None:
            return s
        idx = s.current_index()
        if idx >= len(s.steps) - 1:
            s.review_requested = True
            return s
        s.current_step = s.steps[idx + 1]
        s.is_transitioning = True
        return s

    if isinstance(cmd, PrevStep):
        if s.is_transitioning or s.current_step is None:
            return s
        idx = s.current_index()
        if idx <= 0:
            s.exited = True
            return s
        s.current_step = s.steps[idx - 1]
        s.is_transitioning = True
        return s

    if isinstance(cmd, JumpToStep):
        if s.is_transitioning:
            return s
        if cmd.step not in s.steps:
            raise ValueError(f"Unknown step: {cmd.step}")
        if cmd.step != s.current_step:
            s.current_step = cmd.step
            s.is_transitioning = True
        return s

    if isinstance(cmd, ExitWizard):
        s.exited = True
        s.is_transitioning = False
        return s

    if isinstance(cmd, FinishTransition):
        s.is_transitioning = False
        return s

    # --- Submission acknowledgment ---
    if isinstance(cmd, MarkSubmitted):
        s.dirty = False
        s.review_requested = False
        s.submitted = True
        s.last_submitted_at = cmd.when
        return s

    # Unhandled command -> no-op
    return s

