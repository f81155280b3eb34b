"""Eligibility filtering between job criteria and candidate profiles."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from placement_core.core.errors import CriteriaResult, ErrorKind, WorkflowError
from placement_core.core.models import (
    CandidateProfile,
    EligibilityCriteria,
    JobPosting,
    JobStatus,
    utcnow,
)
from placement_core.utils.logging import get_logger

logger = get_logger(__name__)


class Criterion(str, Enum):
    """Individual eligibility checks."""
    MIN_CGPA = "min_cgpa"
    ALLOWED_BRANCHES = "allowed_branches"
    GRADUATION_YEAR = "graduation_year"


class EligibilityFailure(BaseModel):
    """A single unmet criterion."""
    criterion: Criterion = Field(..., description="Criterion that was not met")
    required: Any = Field(None, description="What the job asks for")
    actual: Any = Field(None, description="What the candidate has")
    message: str = Field(..., description="Explanation suitable for display")


class EligibilityReport(BaseModel):
    """Every unmet criterion for a candidate, not just the first."""
    eligible: bool = Field(..., description="True when no criterion failed")
    failures: List[EligibilityFailure] = Field(default_factory=list, description="Unmet criteria")


def _cgpa_ok(criteria: EligibilityCriteria, profile: CandidateProfile) -> bool:
    return criteria.min_cgpa is None or profile.cgpa >= criteria.min_cgpa


def _branch_ok(criteria: EligibilityCriteria, profile: CandidateProfile) -> bool:
    return not criteria.allowed_branches or profile.branch in criteria.allowed_branches


def _year_ok(criteria: EligibilityCriteria, profile: CandidateProfile) -> bool:
    return criteria.graduation_year is None or profile.graduation_year == criteria.graduation_year


def is_eligible(criteria: Optional[EligibilityCriteria], profile: CandidateProfile) -> bool:
    """Whether the profile satisfies every criterion that is set.

    Unset criteria impose no constraint.
    """
    if criteria is None:
        return True
    return _cgpa_ok(criteria, profile) and _branch_ok(criteria, profile) and _year_ok(criteria, profile)


def evaluate_eligibility(
    criteria: Optional[EligibilityCriteria],
    profile: CandidateProfile,
) -> EligibilityReport:
    """Check every criterion and report each one the profile fails."""
    failures: List[EligibilityFailure] = []
    if criteria is None:
        return EligibilityReport(eligible=True)

    if not _cgpa_ok(criteria, profile):
        failures.append(EligibilityFailure(
            criterion=Criterion.MIN_CGPA,
            required=criteria.min_cgpa,
            actual=profile.cgpa,
            message=f"Minimum CGPA requirement: {criteria.min_cgpa}",
        ))
    if not _branch_ok(criteria, profile):
        failures.append(EligibilityFailure(
            criterion=Criterion.ALLOWED_BRANCHES,
            required=list(criteria.allowed_branches),
            actual=profile.branch,
            message="Your branch is not eligible for this position",
        ))
    if not _year_ok(criteria, profile):
        failures.append(EligibilityFailure(
            criterion=Criterion.GRADUATION_YEAR,
            required=criteria.graduation_year,
            actual=profile.graduation_year,
            message=f"This position is for {criteria.graduation_year} graduates only",
        ))

    return EligibilityReport(eligible=not failures, failures=failures)


def _invalid(details: List[str]) -> CriteriaResult:
    logger.warning("Invalid eligibility criteria", details=details)
    return CriteriaResult(
        success=False,
        error=WorkflowError(kind=ErrorKind.INVALID_CRITERIA, details=details),
    )


def parse_criteria(raw: Optional[Mapping[str, Any]]) -> CriteriaResult:
    """Validate untrusted criteria, returning InvalidCriteria instead of raising."""
    try:
        data = dict(raw or {})
    except (TypeError, ValueError) as e:
        return _invalid([str(e)])

    try:
        criteria = EligibilityCriteria.model_validate(data)
    except ValidationError as e:
        return _invalid([
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ])
    return CriteriaResult(success=True, criteria=criteria)


def _aware(moment: datetime) -> datetime:
    # Naive timestamps from the persistence layer are taken as UTC.
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def check_application_intake(
    job: JobPosting,
    profile: CandidateProfile,
    already_applied: bool = False,
    now: Optional[datetime] = None,
) -> Optional[WorkflowError]:
    """
    Decide whether a student may submit an application to a job.

    Args:
        job: Job being applied to
        profile: Applicant's profile
        already_applied: Whether the applicant already has an application for the job
        now: Submission time, defaults to the current UTC time

    Returns:
        None when the application may be created, otherwise the first failing check
    """
    now = _aware(now or utcnow())

    if job.status != JobStatus.ACTIVE:
        return WorkflowError(kind=ErrorKind.JOB_NOT_OPEN, details=[f"job status {job.status.value!r}"])
    if job.application_deadline is not None and now > _aware(job.application_deadline):
        return WorkflowError(
            kind=ErrorKind.DEADLINE_PASSED,
            details=[f"deadline {job.application_deadline.isoformat()}"],
        )
    if already_applied:
        return WorkflowError(kind=ErrorKind.ALREADY_APPLIED)

    report = evaluate_eligibility(job.criteria, profile)
    if not report.eligible:
        return WorkflowError(
            kind=ErrorKind.NOT_ELIGIBLE,
            details=[failure.message for failure in report.failures],
        )
    return None
