"""Onboarding approval workflow for organizations and recruiters.

Rejection is terminal. An organization or recruiter turned down once is
onboarded again by registering a new entity, which starts a fresh approval
in ``pending``.
"""

from datetime import datetime
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from placement_core.core.errors import BulkResult, TransitionResult
from placement_core.core.models import Actor, Role, WorkflowInstance, utcnow
from placement_core.utils.logging import get_logger
from placement_core.workflow.bulk import BulkOperationCoordinator
from placement_core.workflow.engine import FiniteWorkflow, WorkflowDefinition, edge

logger = get_logger(__name__)


class ApprovalStatus(str, Enum):
    """Onboarding approval status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalAction(str, Enum):
    """Decisions a placement officer can take."""
    APPROVE = "approve"
    REJECT = "reject"


APPROVER_ROLES = (Role.TPO, Role.ADMIN)


def _approval_definition(name: str) -> WorkflowDefinition:
    return WorkflowDefinition(
        name=name,
        states=list(ApprovalStatus),
        initial_state=ApprovalStatus.PENDING,
        terminal_states=[ApprovalStatus.APPROVED, ApprovalStatus.REJECTED],
        edges=[
            edge(ApprovalStatus.PENDING, ApprovalAction.APPROVE, ApprovalStatus.APPROVED, APPROVER_ROLES),
            edge(ApprovalStatus.PENDING, ApprovalAction.REJECT, ApprovalStatus.REJECTED, APPROVER_ROLES),
        ],
        labels={
            ApprovalStatus.PENDING: "Pending Approval",
            ApprovalStatus.APPROVED: "Approved",
            ApprovalStatus.REJECTED: "Rejected",
        },
    )


ORGANIZATION_APPROVAL = _approval_definition("organization_approval")
RECRUITER_APPROVAL = _approval_definition("recruiter_approval")


class ApprovalRecord(BaseModel):
    """Who decided an approval, when, and with which notes."""
    status: str = Field(..., description="Current approval status")
    approved_by: Optional[str] = Field(None, description="User who took the decision")
    decided_at: Optional[datetime] = Field(None, description="When the decision was taken")
    notes: Optional[str] = Field(None, description="Notes recorded with the decision")


class CascadeResult(BaseModel):
    """Outcome of approving an organization together with its pending recruiters."""
    organization: TransitionResult = Field(..., description="Result for the organization itself")
    recruiters: BulkResult = Field(default_factory=BulkResult, description="Results for pending recruiters")
    skipped: List[str] = Field(default_factory=list, description="Recruiters not pending or not in the organization")


class BulkCascadeResult(BaseModel):
    """Outcome of bulk-approving organizations together with their pending recruiters."""
    organizations: BulkResult = Field(..., description="Per-organization results")
    recruiters: BulkResult = Field(default_factory=BulkResult, description="Results for pending recruiters")
    skipped: List[str] = Field(
        default_factory=list, description="Recruiters not pending or whose organization was not approved"
    )


class ApprovalWorkflow(FiniteWorkflow):
    """Approves or rejects organizations and recruiters awaiting onboarding."""

    def __init__(self, definition: WorkflowDefinition = ORGANIZATION_APPROVAL):
        super().__init__(definition)
        self.logger = logger.bind(component="approval_workflow", workflow=definition.name)

    def approve(
        self,
        instance: WorkflowInstance,
        actor: Actor,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        return self.request_state(instance, ApprovalAction.APPROVE, actor, note=notes, now=now)

    def reject(
        self,
        instance: WorkflowInstance,
        actor: Actor,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        return self.request_state(instance, ApprovalAction.REJECT, actor, note=notes, now=now)

    def bulk(
        self,
        instances: Iterable[WorkflowInstance],
        action: ApprovalAction,
        actor: Actor,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BulkResult:
        """Approve or reject many entities at once ("approve selected")."""
        return BulkOperationCoordinator(self.definition).apply_bulk(
            instances, action, actor, notes=notes, now=now
        )

    def record(self, instance: WorkflowInstance) -> ApprovalRecord:
        """Summarize the decision taken on an approval instance, if any."""
        decision = next(
            (entry for entry in reversed(instance.history) if entry.action is not None),
            None,
        )
        if decision is None:
            return ApprovalRecord(status=instance.current_state)
        return ApprovalRecord(
            status=instance.current_state,
            approved_by=decision.actor_id,
            decided_at=decision.timestamp,
            notes=decision.note,
        )


def _split_pending_recruiters(
    recruiters: Iterable[WorkflowInstance],
    organization_ids: AbstractSet[str],
) -> Tuple[List[WorkflowInstance], List[str]]:
    pending: List[WorkflowInstance] = []
    skipped: List[str] = []
    for recruiter in recruiters:
        if (
            recruiter.organization_id in organization_ids
            and recruiter.current_state == ApprovalStatus.PENDING.value
        ):
            pending.append(recruiter)
        else:
            skipped.append(recruiter.id)
    return pending, skipped


def _approve_recruiters(
    recruiters: Iterable[WorkflowInstance],
    organization_ids: AbstractSet[str],
    actor: Actor,
    now: datetime,
) -> Tuple[BulkResult, List[str]]:
    pending, skipped = _split_pending_recruiters(recruiters, organization_ids)
    # Organization notes are not copied onto recruiter approvals.
    result = ApprovalWorkflow(RECRUITER_APPROVAL).bulk(pending, ApprovalAction.APPROVE, actor, now=now)
    return result, skipped


def cascade_organization_approval(
    organization: WorkflowInstance,
    recruiters: Iterable[WorkflowInstance],
    actor: Actor,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CascadeResult:
    """Approve an organization, then every pending recruiter that belongs to it.

    Recruiters are approved only when the organization approval succeeds.
    Recruiters of other organizations, or no longer pending, are skipped and
    returned unchanged.
    """
    now = now or utcnow()
    org_result = ApprovalWorkflow(ORGANIZATION_APPROVAL).approve(organization, actor, notes=notes, now=now)
    if not org_result.success:
        return CascadeResult(organization=org_result, skipped=[r.id for r in recruiters])

    recruiter_result, skipped = _approve_recruiters(recruiters, {organization.id}, actor, now)
    logger.info(
        "Organization approval cascaded",
        organization_id=organization.id,
        recruiters_approved=len(recruiter_result.succeeded),
        recruiters_skipped=len(skipped),
    )
    return CascadeResult(organization=org_result, recruiters=recruiter_result, skipped=skipped)


def cascade_bulk_organization_approval(
    organizations: Iterable[WorkflowInstance],
    recruiters: Iterable[WorkflowInstance],
    actor: Actor,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BulkCascadeResult:
    """Bulk-approve organizations, then the pending recruiters of each one approved.

    Recruiters whose organization failed in the batch (already decided,
    forbidden) stay as they were and are reported as skipped.
    """
    now = now or utcnow()
    org_result = ApprovalWorkflow(ORGANIZATION_APPROVAL).bulk(
        organizations, ApprovalAction.APPROVE, actor, notes=notes, now=now
    )

    recruiter_result, skipped = _approve_recruiters(recruiters, set(org_result.succeeded), actor, now)
    logger.info(
        "Bulk organization approval cascaded",
        organizations_approved=len(org_result.succeeded),
        organizations_failed=len(org_result.failed),
        recruiters_approved=len(recruiter_result.succeeded),
        recruiters_skipped=len(skipped),
    )
    return BulkCascadeResult(organizations=org_result, recruiters=recruiter_result, skipped=skipped)
