"""Eligibility filtering and match scoring."""

from .eligibility import (
    Criterion,
    EligibilityFailure,
    EligibilityReport,
    check_application_intake,
    evaluate_eligibility,
    is_eligible,
    parse_criteria,
)
from .matcher import (
    MatchScorer,
    determine_fit_level,
    score_match,
)

__all__ = [
    "Criterion",
    "EligibilityFailure",
    "EligibilityReport",
    "MatchScorer",
    "check_application_intake",
    "determine_fit_level",
    "evaluate_eligibility",
    "is_eligible",
    "parse_criteria",
    "score_match",
]
