"""Core data models for the placement workflow core."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current time used for history timestamps."""
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Actor roles supplied by the identity collaborator."""
    STUDENT = "student"
    RECRUITER = "recruiter"
    TPO = "tpo"
    ADMIN = "admin"


class JobStatus(str, Enum):
    """Lifecycle of a job posting."""
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class Actor(BaseModel):
    """Identity of whoever requests a transition. Treated as trusted input."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Requesting user identifier")
    role: Role = Field(..., description="Requesting user role")
    organization_id: Optional[str] = Field(None, description="Organization the user belongs to")


class HistoryEntry(BaseModel):
    """One audited step in a workflow instance's life."""
    model_config = ConfigDict(frozen=True)

    from_state: Optional[str] = Field(None, description="State before the step (None on creation)")
    to_state: str = Field(..., description="State after the step")
    action: Optional[str] = Field(None, description="Action that caused the step (None on creation)")
    actor_id: str = Field(..., description="User who performed the step")
    actor_role: Role = Field(..., description="Role of the user who performed the step")
    timestamp: datetime = Field(default_factory=utcnow, description="When the step happened")
    note: Optional[str] = Field(None, description="Free-text feedback or approval notes")


class WorkflowInstance(BaseModel):
    """An entity's progress through a workflow.

    Instances are immutable snapshots: every successful transition produces a
    new instance with one more history entry and a bumped version.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier of the owning entity")
    workflow: str = Field(..., description="Name of the workflow definition")
    current_state: str = Field(..., description="Current workflow state")
    history: Tuple[HistoryEntry, ...] = Field(default_factory=tuple, description="Append-only step log")
    owner_id: Optional[str] = Field(None, description="Owning user (the applicant for applications)")
    organization_id: Optional[str] = Field(None, description="Owning organization")
    version: int = Field(0, ge=0, description="Incremented once per transition")
    created_at: datetime = Field(default_factory=utcnow, description="Creation time")


class EligibilityCriteria(BaseModel):
    """Hard admissibility criteria attached to a job. Unset fields do not restrict.

    Job documents store criteria with camelCase keys (minCGPA, allowedBranches,
    graduationYear); both spellings are accepted and any other key is rejected.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    min_cgpa: Optional[float] = Field(
        None, ge=0, le=10,
        validation_alias=AliasChoices("min_cgpa", "minCGPA"),
        description="Minimum CGPA on a 10 point scale",
    )
    allowed_branches: Optional[Tuple[str, ...]] = Field(
        None,
        validation_alias=AliasChoices("allowed_branches", "allowedBranches"),
        description="Branches allowed to apply",
    )
    graduation_year: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("graduation_year", "graduationYear"),
        description="Required graduation year",
    )


class CandidateProfile(BaseModel):
    """Read-only view of a student's profile."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Student user identifier")
    cgpa: float = Field(..., ge=0, le=10, description="CGPA on a 10 point scale")
    branch: str = Field(..., description="Academic branch")
    graduation_year: int = Field(..., description="Expected graduation year")
    skills: Tuple[str, ...] = Field(default_factory=tuple, description="Declared skills")
    experience_years: int = Field(0, ge=0, description="Years of work experience")


class JobPosting(BaseModel):
    """A job as seen by eligibility and scoring."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Job identifier")
    title: str = Field("", description="Job title")
    organization_id: str = Field(..., description="Organization that owns the job")
    criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria, description="Eligibility criteria")
    skills_required: Tuple[str, ...] = Field(default_factory=tuple, description="Required skills")
    experience_required: int = Field(0, ge=0, description="Years of experience required")
    status: JobStatus = Field(JobStatus.ACTIVE, description="Posting status")
    application_deadline: Optional[datetime] = Field(None, description="Last moment applications are accepted")


class MatchBreakdown(BaseModel):
    """Earned points per component; None marks a component excluded from scoring."""
    skills: Optional[float] = Field(None, description="Skills points out of 40")
    cgpa: Optional[float] = Field(None, description="CGPA points out of 30")
    branch: Optional[float] = Field(None, description="Branch points out of 20")
    experience: float = Field(0.0, description="Experience points out of 10")


class MatchResult(BaseModel):
    """Derived, non-persistent suitability of a candidate for a job."""
    job_id: str = Field(..., description="Scored job")
    eligible: bool = Field(..., description="Result of the eligibility filter")
    score: int = Field(..., ge=0, le=100, description="Weighted match percentage")
    max_score: float = Field(..., description="Sum of included component weights")
    breakdown: MatchBreakdown = Field(..., description="Per-component points")
    fit_level: str = Field(..., description="excellent, good, fair or poor")
