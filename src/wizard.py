"""
Multi-section edit/review wizard for one Server PM report.

The controller owns the report store, one SectionEditModel per step, and the
shared lookup cache. Section edits flow model -> store (undoable); navigation
and hydration go to the store without history.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

import httpx

from editstate import (
    Command, SectionCommand, ReportEditState, SectionState, SectionEditModel, Store,
    LoadReport, SectionChanged, NextStep, PrevStep, JumpToStep, ExitWizard,
    FinishTransition, MarkSubmitted, DEFAULT_MAX_HISTORY,
)
from errors import ApiError, HydrationFailure, SubmissionFailure, ValidationFailure
from lookups import LookupCache, LookupOption
from sections import SectionRegistry
from submission import SubmissionBuilder

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HydrationTicket:
    """Handed out when section data is requested; only the current session's tickets are honored."""
    section_key: str
    generation: int


@dataclass
class SubmitOutcome:
    ok: bool
    response: Any = None
    errors: List[str] = field(default_factory=list)
    retryable: bool = False


class WizardController:
    def __init__(self, api, registry: SectionRegistry, lookups: Optional[LookupCache] = None,
                 animate_transitions: bool = False, max_history: int = DEFAULT_MAX_HISTORY):
        self.api = api
        self.registry = registry
        self.lookups = lookups if lookups is not None else LookupCache(api.get_vocabulary)
        self.animate_transitions = animate_transitions
        self.builder = SubmissionBuilder(registry)
        self.store = Store(registry=registry, max_history=max_history)
        self.status: Dict[str, bool] = {}
        self._models: Dict[str, SectionEditModel] = {}
        self._generation = 0

    @property
    def state(self) -> ReportEditState:
        return self.store.state

    @property
    def generation(self) -> int:
        return self._generation

    # ----- session -----

    def load(self, report_id: str) -> ReportEditState:
        """Fetch the report once and hydrate every step. Raises HydrationFailure."""
        self._generation += 1
        try:
            raw = self.api.get_server_pm_report(report_id)
        except (httpx.HTTPError, ApiError) as e:
            failure = HydrationFailure(str(report_id), str(e) or type(e).__name__)
            log.error("%s", failure)
            raise failure from e

        self.store.reset()
        self.store.apply(LoadReport(str(report_id), raw), record=False)
        self.status = {}
        self._bind_models()

        for name in sorted(self.registry.vocabularies()):
            self.lookups.get(name)

        for key in self.state.steps:
            self.deliver_section_data(self.request_section_data(key), raw)
        self.store.clear_history()
        log.info("report %s loaded: %d sections", report_id, len(self.state.steps))
        return self.state

    def leave(self) -> None:
        """Exit the wizard; responses still in flight for this session are discarded."""
        self._generation += 1
        if not self.state.exited:
            self.store.apply(ExitWizard(), record=False)
        log.info("left report %s", self.state.report_id)

    # ----- sections -----

    def section(self, key: str) -> SectionEditModel:
        try:
            return self._models[key]
        except KeyError:
            raise KeyError(f"Unknown section: {key}") from None

    def dispatch(self, cmd: Command) -> Any:
        """Section commands go through the bound model; everything else is navigation."""
        if isinstance(cmd, SectionCommand):
            return self.section(cmd.section_key).apply(cmd)
        if isinstance(cmd, NextStep):
            return self.next()
        if isinstance(cmd, PrevStep):
            return self.back()
        if isinstance(cmd, JumpToStep):
            return self.jump_to(cmd.step)
        return self.store.apply(cmd, record=False)

    def request_section_data(self, key: str) -> HydrationTicket:
        return HydrationTicket(key, self._generation)

    def deliver_section_data(self, ticket: HydrationTicket, raw: Optional[Dict[str, Any]]) -> bool:
        if ticket.generation != self._generation:
            log.warning("%s: discarding data from an earlier session", ticket.section_key)
            return False
        model = self._models.get(ticket.section_key)
        if model is None or not model.hydrate(raw):
            return False
        self.store.apply(SectionChanged(ticket.section_key, model.data, edited=False), record=False)
        return True

    # ----- navigation -----

    def next(self) -> Optional[Dict[str, Any]]:
        """Advance one step; on the last step, return the assembled submission."""
        s = self.state
        if s.is_transitioning or s.current_step is None:
            return None
        if s.current_index() >= len(s.steps) - 1:
            payload = self.assemble_submission()
            self.store.apply(NextStep(), record=False)
            return payload
        self._navigate(NextStep())
        return None

    def back(self) -> bool:
        """Retreat one step; on the first step, leave the wizard."""
        s = self.state
        if s.is_transitioning or s.current_step is None:
            return False
        if s.current_index() <= 0:
            self.leave()
            return True
        return self._navigate(PrevStep())

    def jump_to(self, key: str) -> bool:
        return self._navigate(JumpToStep(key))

    def finish_transition(self) -> None:
        self.store.apply(FinishTransition(), record=False)

    def _navigate(self, cmd: Command) -> bool:
        if self.state.is_transitioning:
            log.debug("ignored %s during a transition", type(cmd).__name__)
            return False
        self.store.apply(cmd, record=False)
        if self.state.is_transitioning and not self.animate_transitions:
            self.finish_transition()
        return True

    # ----- history -----

    def undo(self) -> ReportEditState:
        return self._travel(self.store.undo)

    def redo(self) -> ReportEditState:
        return self._travel(self.store.redo)

    def _travel(self, step) -> ReportEditState:
        s = self.state
        nav = (s.current_step, s.is_transitioning, s.exited, s.review_requested)
        step()
        t = self.state
        t.current_step, t.is_transitioning, t.exited, t.review_requested = nav
        for key, model in self._models.items():
            model.sync(t.sections[key])
            self.status[key] = model.is_complete()
        return t

    # ----- submission -----

    def assemble_submission(self) -> Dict[str, Any]:
        """Validate, then fold every section diff into one payload. Raises ValidationFailure."""
        ok, errors = self.builder.validate(self.state)
        if not ok:
            raise ValidationFailure(errors)
        vocabularies = {name: self.lookups.get(name) for name in self.registry.vocabularies()}
        return self.builder.build(self.state, vocabularies)

    def submit(self) -> SubmitOutcome:
        if self.state.report_id is None:
            raise ValueError("No report loaded.")
        if self.state.submitted:
            # an accepted state is consumed once
            log.warning("report %s already submitted; reload before submitting again", self.state.report_id)
            return SubmitOutcome(ok=False, errors=["Report already submitted; reload it to edit again."])
        try:
            payload = self.assemble_submission()
        except ValidationFailure as e:
            log.warning("%s", e)
            return SubmitOutcome(ok=False, errors=e.errors, retryable=False)

        try:
            response = self.api.update_server_pm_report(self.state.report_id, payload)
        except httpx.HTTPStatusError as e:
            failure = SubmissionFailure(e.response.text or str(e), e.response.status_code)
        except (httpx.HTTPError, ApiError) as e:
            failure = SubmissionFailure(str(e) or type(e).__name__)
        else:
            self.store.apply(MarkSubmitted(), record=False)
            self.store.clear_history()
            return SubmitOutcome(ok=True, response=response)

        log.error("%s", failure)
        return SubmitOutcome(ok=False, errors=[failure.reason], retryable=failure.retryable)

    # ----- read side -----

    def progress(self) -> List[Tuple[str, str, bool]]:
        return [(key, self.registry.title(key), self._models[key].is_complete()) for key in self.state.steps]

    def vocabulary(self, name: str) -> Tuple[LookupOption, ...]:
        return self.lookups.get(name)

    # ----- wiring -----

    def _bind_models(self) -> None:
        self._models = {}
        for key in self.state.steps:
            self._models[key] = SectionEditModel(
                key, self.registry, state=self.state.sections[key],
                on_data_change=self._data_listener(key),
                on_status_change=self._on_status,
            )

    def _data_listener(self, key: str):
        def _on_data(new_state: SectionState) -> None:
            self.store.apply(SectionChanged(key, new_state))
        return _on_data

    def _on_status(self, key: str, is_complete: bool) -> None:
        self.status[key] = is_complete
