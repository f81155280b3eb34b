"""Error taxonomy and result types returned across the engine boundary."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from placement_core.core.models import EligibilityCriteria, WorkflowInstance


class ErrorKind(str, Enum):
    """Kinds of failure a caller must handle."""
    ILLEGAL_TRANSITION = "IllegalTransition"
    NO_OP_TRANSITION = "NoOpTransition"
    FORBIDDEN = "Forbidden"
    INVALID_CRITERIA = "InvalidCriteria"
    CONFLICTING_STATE = "ConflictingState"
    # Submission-time checks
    JOB_NOT_OPEN = "JobNotOpen"
    DEADLINE_PASSED = "DeadlinePassed"
    ALREADY_APPLIED = "AlreadyApplied"
    NOT_ELIGIBLE = "NotEligible"


class WorkflowError(BaseModel):
    """A failed request. Carries the kind and the offending state/action, not prose."""
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(..., description="Error kind")
    state: Optional[str] = Field(None, description="State the instance was in")
    action: Optional[str] = Field(None, description="Requested action")
    details: List[str] = Field(default_factory=list, description="Machine-oriented specifics")


class TransitionResult(BaseModel):
    """Outcome of a single workflow transition."""
    success: bool = Field(..., description="Whether the transition was applied")
    instance: Optional[WorkflowInstance] = Field(None, description="New instance on success")
    error: Optional[WorkflowError] = Field(None, description="Failure on error")

    @classmethod
    def ok(cls, instance: WorkflowInstance) -> "TransitionResult":
        return cls(success=True, instance=instance)

    @classmethod
    def fail(cls, error: WorkflowError) -> "TransitionResult":
        return cls(success=False, error=error)


class CriteriaResult(BaseModel):
    """Outcome of validating untrusted eligibility criteria."""
    success: bool = Field(..., description="Whether the criteria are well formed")
    criteria: Optional[EligibilityCriteria] = Field(None, description="Parsed criteria on success")
    error: Optional[WorkflowError] = Field(None, description="InvalidCriteria on failure")


class BulkFailure(BaseModel):
    """One item that a bulk operation could not transition."""
    id: str = Field(..., description="Entity identifier")
    error: WorkflowError = Field(..., description="Why the item failed")


class BulkResult(BaseModel):
    """Per-item outcome of a bulk operation."""
    succeeded: List[str] = Field(default_factory=list, description="Ids transitioned successfully")
    failed: List[BulkFailure] = Field(default_factory=list, description="Ids that failed, with errors")
    instances: Dict[str, WorkflowInstance] = Field(
        default_factory=dict, description="New instances for succeeded ids, to be persisted by the caller"
    )

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


class WorkflowDefinitionError(ValueError):
    """Raised while building a malformed workflow definition."""
