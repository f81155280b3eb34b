"""
Placement Workflow Core: rules engine for a campus-recruitment platform.

This package implements the application and onboarding-approval workflows as
pure finite-state machines with auditable history, plus the eligibility filter
and weighted match scoring used to list and rank jobs for students.
"""

__version__ = "0.1.0"

from placement_core.core.errors import ErrorKind, WorkflowError
from placement_core.core.models import Actor, CandidateProfile, JobPosting, Role, WorkflowInstance
from placement_core.jobs.eligibility import is_eligible
from placement_core.jobs.matcher import MatchScorer, score_match
from placement_core.workflow.application import ApplicationWorkflow
from placement_core.workflow.approval import ApprovalWorkflow
from placement_core.workflow.bulk import BulkOperationCoordinator

__all__ = [
    "Actor",
    "ApplicationWorkflow",
    "ApprovalWorkflow",
    "BulkOperationCoordinator",
    "CandidateProfile",
    "ErrorKind",
    "JobPosting",
    "MatchScorer",
    "Role",
    "WorkflowError",
    "WorkflowInstance",
    "is_eligible",
    "score_match",
]
