"""Errors surfaced by the evaluation service to its callers."""

from __future__ import annotations


class EvaluationError(Exception):
    """Base error; ``message`` is safe to show to end users."""

    def __init__(self, message: str, *, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.detail = detail


class RecordNotFoundError(EvaluationError):
    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class EmptyHistoryError(EvaluationError):
    """The user has no completed answers to analyse."""


class GenerationFailedError(EvaluationError):
    """A generation call kept failing after all retries."""


class CompetencyAnalysisError(GenerationFailedError):
    """The competency analysis could not be parsed after all retries."""
