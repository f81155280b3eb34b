"""Finite-state workflows for applications and onboarding approvals."""

from .engine import (
    Edge,
    FiniteWorkflow,
    InstanceRepository,
    WorkflowDefinition,
    available_actions,
    create_instance,
    detect_conflict,
    request_state,
    transition,
)
from .application import (
    APPLICATION_WORKFLOW,
    ApplicationAction,
    ApplicationMilestones,
    ApplicationStatus,
    ApplicationWorkflow,
    TimelineItem,
)
from .approval import (
    ORGANIZATION_APPROVAL,
    RECRUITER_APPROVAL,
    ApprovalAction,
    ApprovalRecord,
    ApprovalStatus,
    ApprovalWorkflow,
    BulkCascadeResult,
    CascadeResult,
    cascade_bulk_organization_approval,
    cascade_organization_approval,
)
from .bulk import BulkOperationCoordinator, apply_bulk

__all__ = [
    "APPLICATION_WORKFLOW",
    "ORGANIZATION_APPROVAL",
    "RECRUITER_APPROVAL",
    "ApplicationAction",
    "ApplicationMilestones",
    "ApplicationStatus",
    "ApplicationWorkflow",
    "ApprovalAction",
    "ApprovalRecord",
    "ApprovalStatus",
    "ApprovalWorkflow",
    "BulkCascadeResult",
    "BulkOperationCoordinator",
    "CascadeResult",
    "Edge",
    "FiniteWorkflow",
    "InstanceRepository",
    "TimelineItem",
    "WorkflowDefinition",
    "apply_bulk",
    "available_actions",
    "cascade_bulk_organization_approval",
    "cascade_organization_approval",
    "create_instance",
    "detect_conflict",
    "request_state",
    "transition",
]
