"""Interview lifecycle domain: models, errors, plans and analysis."""
from .errors import InterviewError, InvalidInput, InvalidState, MissingPlan, NotFound, PersistenceFailure
from .models import (
    ROLES,
    STATUS_ORDER,
    CostTotals,
    GeneratedPlan,
    InterviewAnalysis,
    InterviewPlan,
    Message,
    Session,
)

__all__ = [
    "InterviewError",
    "InvalidInput",
    "InvalidState",
    "MissingPlan",
    "NotFound",
    "PersistenceFailure",
    "ROLES",
    "STATUS_ORDER",
    "CostTotals",
    "GeneratedPlan",
    "InterviewAnalysis",
    "InterviewPlan",
    "Message",
    "Session",
]
