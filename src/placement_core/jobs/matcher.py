"""Weighted match scoring between jobs and candidate profiles."""

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from placement_core.core.models import CandidateProfile, JobPosting, MatchBreakdown, MatchResult
from placement_core.jobs.eligibility import is_eligible
from placement_core.utils.logging import get_logger

logger = get_logger(__name__)

# Component weights, in points out of 100
SKILLS_WEIGHT = 40
CGPA_WEIGHT = 30
BRANCH_WEIGHT = 20
EXPERIENCE_WEIGHT = 10

FIT_LEVELS: Sequence[Tuple[int, str]] = (
    (80, "excellent"),
    (60, "good"),
    (40, "fair"),
)


def _normalize_skills(skills: Iterable[str]) -> List[str]:
    return [s.strip().lower() for s in skills if s and s.strip()]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def determine_fit_level(score: int) -> str:
    """Determine overall fit level based on score."""
    for threshold, level in FIT_LEVELS:
        if score >= threshold:
            return level
    return "poor"


class MatchScorer:
    """Scores how well a candidate fits a job on a 0-100 scale.

    Components that do not apply to a job (no required skills, no CGPA
    criterion, no branch restriction) are left out of both the earned points
    and the maximum, so the remaining components are re-weighted rather than
    given free credit.
    """

    def __init__(self):
        self.logger = logger.bind(component="match_scorer")

    def skills_points(self, job: JobPosting, profile: CandidateProfile) -> Optional[float]:
        required = _normalize_skills(job.skills_required)
        if not required:
            return None
        candidate = _normalize_skills(profile.skills)
        matched = sum(
            1 for req in required
            if any(skill in req for skill in candidate)
        )
        return matched / len(required) * SKILLS_WEIGHT

    def cgpa_points(self, job: JobPosting, profile: CandidateProfile) -> Optional[float]:
        min_cgpa = job.criteria.min_cgpa
        if min_cgpa is None:
            return None
        return float(CGPA_WEIGHT) if profile.cgpa >= min_cgpa else 0.0

    def branch_points(self, job: JobPosting, profile: CandidateProfile) -> Optional[float]:
        branches = job.criteria.allowed_branches
        if not branches:
            return None
        return float(BRANCH_WEIGHT) if profile.branch in branches else 0.0

    def experience_points(self, job: JobPosting, profile: CandidateProfile) -> float:
        # Entry-level roles suit students best
        return float(EXPERIENCE_WEIGHT) if job.experience_required == 0 else 0.0

    def score(self, job: JobPosting, profile: CandidateProfile) -> MatchResult:
        """
        Score a candidate profile against a job posting.

        Args:
            job: Job posting with criteria and required skills
            profile: Candidate profile

        Returns:
            Eligibility, the 0-100 score and the per-component breakdown
        """
        breakdown = MatchBreakdown(
            skills=self.skills_points(job, profile),
            cgpa=self.cgpa_points(job, profile),
            branch=self.branch_points(job, profile),
            experience=self.experience_points(job, profile),
        )

        earned = 0.0
        max_score = 0.0
        for points, weight in (
            (breakdown.skills, SKILLS_WEIGHT),
            (breakdown.cgpa, CGPA_WEIGHT),
            (breakdown.branch, BRANCH_WEIGHT),
            (breakdown.experience, EXPERIENCE_WEIGHT),
        ):
            if points is not None:
                earned += points
                max_score += weight

        if max_score > 0:
            score = min(100, max(0, _round_half_up(earned / max_score * 100)))
        else:
            score = 0

        result = MatchResult(
            job_id=job.id,
            eligible=is_eligible(job.criteria, profile),
            score=score,
            max_score=max_score,
            breakdown=breakdown,
            fit_level=determine_fit_level(score),
        )

        self.logger.debug(
            "Job scored",
            job_id=job.id,
            user_id=profile.user_id,
            score=score,
            eligible=result.eligible,
        )
        return result

    def rank_jobs(
        self,
        jobs: Iterable[JobPosting],
        profile: CandidateProfile,
        eligible_only: bool = False,
    ) -> List[Tuple[JobPosting, MatchResult]]:
        """Score every job for a profile, best matches first.

        Jobs with equal scores keep their input order.
        """
        ranked = [(job, self.score(job, profile)) for job in jobs]
        if eligible_only:
            ranked = [pair for pair in ranked if pair[1].eligible]
        ranked.sort(key=lambda pair: pair[1].score, reverse=True)

        self.logger.debug("Jobs ranked", user_id=profile.user_id, job_count=len(ranked))
        return ranked

    def match_summary(self, results: Sequence[MatchResult]) -> Dict[str, Any]:
        """Generate summary statistics for match results."""
        fit_counts = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
        if not results:
            return {"total_jobs": 0, "eligible_jobs": 0, "average_score": 0.0, "fit_distribution": fit_counts}

        for result in results:
            fit_counts[result.fit_level] += 1

        return {
            "total_jobs": len(results),
            "eligible_jobs": sum(1 for r in results if r.eligible),
            "average_score": sum(r.score for r in results) / len(results),
            "fit_distribution": fit_counts,
        }


def score_match(job: JobPosting, profile: CandidateProfile) -> MatchResult:
    """Functional form of :meth:`MatchScorer.score`."""
    return MatchScorer().score(job, profile)
