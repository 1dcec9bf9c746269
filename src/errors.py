"""
Error taxonomy for the report edit engine.

    ReportEditError
      ├── HydrationFailure        initial report fetch failed (fatal for the session)
      ├── VocabularyFetchFailure  a lookup list failed to load (a fallback is used)
      ├── InvalidRowOperation     row-level invariant violated (programmer error)
      ├── ValidationFailure       required fields missing at submission time
      ├── SubmissionFailure       backend rejected the assembled payload (retryable)
      └── ApiError                backend answered with something we cannot use
"""
from __future__ import annotations
from typing import List, Optional


class ReportEditError(Exception):
    """Base class for everything raised by this package."""


class HydrationFailure(ReportEditError):
    def __init__(self, report_id: str, reason: str):
        super().__init__(f"Failed to load report {report_id}: {reason}")
        self.report_id = report_id
        self.reason = reason


class VocabularyFetchFailure(ReportEditError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Failed to load vocabulary '{name}': {reason}")
        self.name = name
        self.reason = reason


class InvalidRowOperation(ReportEditError, ValueError):
    """Raised by the row reconciler; the UI should never be able to trigger it."""


class ValidationFailure(ReportEditError):
    def __init__(self, errors: List[str]):
        super().__init__("Submission blocked: " + "; ".join(errors))
        self.errors = list(errors)


class SubmissionFailure(ReportEditError):
    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Submission failed: {reason}")
        self.reason = reason
        self.status_code = status_code
        self.retryable = True


class ApiError(ReportEditError):
    pass
