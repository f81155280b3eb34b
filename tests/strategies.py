"""Shared hypothesis strategies and actors for workflow and scoring tests."""

from hypothesis import strategies as st

from placement_core.core.models import (
    Actor,
    CandidateProfile,
    EligibilityCriteria,
    JobPosting,
    Role,
)

ORG_ID = "org-acme"
OTHER_ORG_ID = "org-globex"
STUDENT_ID = "student-1"

BRANCHES = [
    "Computer Science Engineering",
    "Electronics and Communication",
    "Mechanical Engineering",
    "Civil Engineering",
    "Information Technology",
]

SKILLS = [
    "JavaScript", "React", "Node.js", "Python", "Django", "SQL",
    "Java", "Spring", "AWS", "Docker", "Machine Learning", "C++",
]

RECRUITER = Actor(user_id="recruiter-1", role=Role.RECRUITER, organization_id=ORG_ID)
TPO = Actor(user_id="tpo-1", role=Role.TPO, organization_id=ORG_ID)
ADMIN = Actor(user_id="admin-1", role=Role.ADMIN, organization_id=ORG_ID)
OUTSIDE_RECRUITER = Actor(user_id="recruiter-2", role=Role.RECRUITER, organization_id=OTHER_ORG_ID)
STUDENT = Actor(user_id=STUDENT_ID, role=Role.STUDENT)
OTHER_STUDENT = Actor(user_id="student-2", role=Role.STUDENT)

cgpa_values = st.floats(min_value=0.0, max_value=10.0, allow_nan=False, allow_infinity=False)


@st.composite
def actor_strategy(draw):
    """Generate actors of any role, inside or outside the owning organization."""
    role = draw(st.sampled_from(list(Role)))
    return Actor(
        user_id=draw(st.sampled_from([STUDENT_ID, "student-2", "recruiter-1", "tpo-1", "admin-1"])),
        role=role,
        organization_id=draw(st.sampled_from([ORG_ID, OTHER_ORG_ID, None])),
    )


@st.composite
def candidate_profile_strategy(draw):
    """Generate candidate profiles for testing."""
    return CandidateProfile(
        user_id=STUDENT_ID,
        cgpa=draw(cgpa_values),
        branch=draw(st.sampled_from(BRANCHES)),
        graduation_year=draw(st.integers(min_value=2022, max_value=2028)),
        skills=tuple(draw(st.lists(st.sampled_from(SKILLS), max_size=6, unique=True))),
        experience_years=draw(st.integers(min_value=0, max_value=5)),
    )


@st.composite
def criteria_strategy(draw):
    """Generate eligibility criteria with any subset of fields set."""
    return EligibilityCriteria(
        min_cgpa=draw(st.one_of(st.none(), cgpa_values)),
        allowed_branches=draw(st.one_of(
            st.none(),
            st.lists(st.sampled_from(BRANCHES), max_size=3, unique=True).map(tuple),
        )),
        graduation_year=draw(st.one_of(st.none(), st.integers(min_value=2022, max_value=2028))),
    )


@st.composite
def job_posting_strategy(draw):
    """Generate job postings."""
    return JobPosting(
        id=draw(st.text(alphabet="abcdef0123456789", min_size=4, max_size=8)),
        title=draw(st.sampled_from(["Software Engineer", "Data Analyst", "Intern", "Site Engineer"])),
        organization_id=ORG_ID,
        criteria=draw(criteria_strategy()),
        skills_required=tuple(draw(st.lists(st.sampled_from(SKILLS), max_size=5, unique=True))),
        experience_required=draw(st.integers(min_value=0, max_value=3)),
    )
