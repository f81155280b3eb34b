"""Job application lifecycle workflow."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from placement_core.core.errors import ErrorKind, TransitionResult, WorkflowError
from placement_core.core.models import Actor, CandidateProfile, JobPosting, Role, WorkflowInstance
from placement_core.utils.logging import get_logger
from placement_core.workflow.engine import FiniteWorkflow, WorkflowDefinition, edge

logger = get_logger(__name__)


class ApplicationStatus(str, Enum):
    """Application status tracking."""
    APPLIED = "applied"
    SCREENING = "screening"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    SELECTED = "selected"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class ApplicationAction(str, Enum):
    """Actions that move an application between statuses."""
    SCREEN = "screen"
    SHORTLIST = "shortlist"
    INTERVIEW = "interview"
    SELECT = "select"
    REJECT = "reject"
    WITHDRAW = "withdraw"


STAFF_ROLES = (Role.RECRUITER, Role.TPO, Role.ADMIN)


def same_organization(instance: WorkflowInstance, actor: Actor) -> bool:
    """Staff may only act on applications to their own organization's jobs."""
    return instance.organization_id is not None and actor.organization_id == instance.organization_id


def owning_applicant(instance: WorkflowInstance, actor: Actor) -> bool:
    """Only the applicant may withdraw."""
    return instance.owner_id is not None and actor.user_id == instance.owner_id


_S = ApplicationStatus
_A = ApplicationAction

STATUS_LABELS: Dict[str, str] = {
    _S.APPLIED.value: "Application submitted",
    _S.SCREENING.value: "Under Review",
    _S.SHORTLISTED.value: "Shortlisted",
    _S.INTERVIEWED.value: "Interviewed",
    _S.SELECTED.value: "Selected",
    _S.REJECTED.value: "Rejected",
    _S.WITHDRAWN.value: "Withdrawn",
}

STATUS_DESCRIPTIONS: Dict[str, str] = {
    _S.APPLIED.value: "Your application was successfully submitted",
    _S.SCREENING.value: "Your application is now under review",
    _S.SHORTLISTED.value: "Congratulations! You have been shortlisted",
    _S.INTERVIEWED.value: "You have completed the interview process",
    _S.SELECTED.value: "Congratulations! You have been selected for the position",
    _S.REJECTED.value: "Thank you for your interest. We regret to inform you that you were not selected",
    _S.WITHDRAWN.value: "You have withdrawn your application",
}

APPLICATION_WORKFLOW = WorkflowDefinition(
    name="application",
    states=list(ApplicationStatus),
    initial_state=_S.APPLIED,
    terminal_states=[_S.SELECTED, _S.REJECTED, _S.WITHDRAWN],
    edges=[
        edge(_S.APPLIED, _A.SCREEN, _S.SCREENING, STAFF_ROLES, same_organization),
        edge(_S.SCREENING, _A.SHORTLIST, _S.SHORTLISTED, STAFF_ROLES, same_organization),
        edge(_S.SHORTLISTED, _A.INTERVIEW, _S.INTERVIEWED, STAFF_ROLES, same_organization),
        edge(_S.INTERVIEWED, _A.SELECT, _S.SELECTED, STAFF_ROLES, same_organization),
        edge(_S.INTERVIEWED, _A.REJECT, _S.REJECTED, STAFF_ROLES, same_organization),
        edge(_S.APPLIED, _A.REJECT, _S.REJECTED, STAFF_ROLES, same_organization),
        edge(_S.SCREENING, _A.REJECT, _S.REJECTED, STAFF_ROLES, same_organization),
        edge(_S.SHORTLISTED, _A.REJECT, _S.REJECTED, STAFF_ROLES, same_organization),
        edge(_S.APPLIED, _A.WITHDRAW, _S.WITHDRAWN, [Role.STUDENT], owning_applicant),
        edge(_S.SCREENING, _A.WITHDRAW, _S.WITHDRAWN, [Role.STUDENT], owning_applicant),
    ],
    labels=STATUS_LABELS,
)


class TimelineItem(BaseModel):
    """Human-readable projection of one history entry."""
    status: str = Field(..., description="Status reached")
    label: str = Field(..., description="Short label")
    description: str = Field(..., description="Longer description for the applicant")
    timestamp: datetime = Field(..., description="When the status was reached")
    note: Optional[str] = Field(None, description="Feedback recorded with the step")


class ApplicationMilestones(BaseModel):
    """Timestamps of the milestones recruiters report on."""
    applied_at: Optional[datetime] = None
    screening_at: Optional[datetime] = None
    shortlisted_at: Optional[datetime] = None
    interviewed_at: Optional[datetime] = None
    result_at: Optional[datetime] = None
    withdrawn_at: Optional[datetime] = None


class ApplicationWorkflow(FiniteWorkflow):
    """Moves job applications through the recruitment stages."""

    def __init__(self, definition: WorkflowDefinition = APPLICATION_WORKFLOW):
        super().__init__(definition)
        self.logger = logger.bind(component="application_workflow")

    def apply(
        self,
        application_id: str,
        job: JobPosting,
        applicant: CandidateProfile,
        now: Optional[datetime] = None,
    ) -> WorkflowInstance:
        """Create a new application in ``applied``.

        Submission checks (job open, deadline, duplicates, eligibility) are
        done beforehand with ``check_application_intake``.
        """
        actor = Actor(user_id=applicant.user_id, role=Role.STUDENT)
        return self.create(
            application_id,
            actor,
            owner_id=applicant.user_id,
            organization_id=job.organization_id,
            now=now,
        )

    def update_status(
        self,
        instance: WorkflowInstance,
        status: Union[ApplicationStatus, str],
        actor: Actor,
        feedback: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """Move the application to ``status`` on behalf of ``actor``.

        Selecting the status the application already has fails with
        NoOpTransition so callers can ask for a different status.
        """
        try:
            status = ApplicationStatus(status)
        except ValueError:
            return TransitionResult.fail(
                WorkflowError(
                    kind=ErrorKind.ILLEGAL_TRANSITION,
                    state=instance.current_state,
                    details=[f"unknown status {status!r}"],
                )
            )

        if status.value == instance.current_state:
            self.logger.warning(
                "Status update rejected",
                entity_id=instance.id,
                status=status.value,
                error_kind=ErrorKind.NO_OP_TRANSITION.value,
            )
            return TransitionResult.fail(
                WorkflowError(kind=ErrorKind.NO_OP_TRANSITION, state=instance.current_state)
            )

        action = self.definition.action_for(status)
        if action is None:
            return TransitionResult.fail(
                WorkflowError(
                    kind=ErrorKind.ILLEGAL_TRANSITION,
                    state=instance.current_state,
                    details=[f"no action leads to {status.value!r}"],
                )
            )
        return self.request_state(instance, action, actor, note=feedback, now=now)

    def withdraw(
        self,
        instance: WorkflowInstance,
        actor: Actor,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        return self.transition(instance, ApplicationAction.WITHDRAW, actor, note=note, now=now)

    def timeline(self, instance: WorkflowInstance) -> List[TimelineItem]:
        """Project the history into display items, oldest first."""
        return [
            TimelineItem(
                status=entry.to_state,
                label=self.definition.label(entry.to_state),
                description=STATUS_DESCRIPTIONS.get(entry.to_state, ""),
                timestamp=entry.timestamp,
                note=entry.note,
            )
            for entry in instance.history
        ]

    def milestones(self, instance: WorkflowInstance) -> ApplicationMilestones:
        reached = {entry.to_state: entry.timestamp for entry in instance.history}
        result_at = reached.get(_S.SELECTED.value) or reached.get(_S.REJECTED.value)
        return ApplicationMilestones(
            applied_at=reached.get(_S.APPLIED.value),
            screening_at=reached.get(_S.SCREENING.value),
            shortlisted_at=reached.get(_S.SHORTLISTED.value),
            interviewed_at=reached.get(_S.INTERVIEWED.value),
            result_at=result_at,
            withdrawn_at=reached.get(_S.WITHDRAWN.value),
        )
