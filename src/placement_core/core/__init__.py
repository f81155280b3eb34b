"""Core data models and error taxonomy."""

from .errors import (
    BulkFailure,
    BulkResult,
    CriteriaResult,
    ErrorKind,
    TransitionResult,
    WorkflowDefinitionError,
    WorkflowError,
)
from .models import (
    Actor,
    CandidateProfile,
    EligibilityCriteria,
    HistoryEntry,
    JobPosting,
    JobStatus,
    MatchBreakdown,
    MatchResult,
    Role,
    WorkflowInstance,
)

__all__ = [
    "Actor",
    "BulkFailure",
    "BulkResult",
    "CandidateProfile",
    "CriteriaResult",
    "EligibilityCriteria",
    "ErrorKind",
    "HistoryEntry",
    "JobPosting",
    "JobStatus",
    "MatchBreakdown",
    "MatchResult",
    "Role",
    "TransitionResult",
    "WorkflowDefinitionError",
    "WorkflowError",
    "WorkflowInstance",
]
