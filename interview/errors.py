"""Error taxonomy for the interview lifecycle."""
from __future__ import annotations


class InterviewError(Exception):
    """Base class for lifecycle failures surfaced to callers."""


class InvalidInput(InterviewError):
    """Malformed or missing request fields."""


class NotFound(InterviewError):
    """Unknown session id."""


class InvalidState(InterviewError):
    """Operation not allowed for the session's current status."""


class MissingPlan(InterviewError):
    """Session has no interview plan attached."""


class PersistenceFailure(InterviewError):
    """The transcript store could not read or write."""


__all__ = [
    "InterviewError",
    "InvalidInput",
    "NotFound",
    "InvalidState",
    "MissingPlan",
    "PersistenceFailure",
]
