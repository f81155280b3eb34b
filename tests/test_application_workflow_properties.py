"""Property-based tests for the job application workflow."""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from placement_core.core.errors import ErrorKind
from placement_core.core.models import CandidateProfile, JobPosting
from placement_core.workflow.application import (
    APPLICATION_WORKFLOW,
    ApplicationAction,
    ApplicationStatus,
    ApplicationWorkflow,
)

from tests.strategies import (
    ADMIN,
    ORG_ID,
    OTHER_STUDENT,
    OUTSIDE_RECRUITER,
    RECRUITER,
    STUDENT,
    STUDENT_ID,
    TPO,
    actor_strategy,
)

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)

JOB = JobPosting(id="job-1", title="Frontend Engineer", organization_id=ORG_ID)
APPLICANT = CandidateProfile(
    user_id=STUDENT_ID,
    cgpa=8.5,
    branch="Computer Science Engineering",
    graduation_year=2025,
    skills=("JavaScript", "React"),
)


def new_application(workflow: ApplicationWorkflow):
    return workflow.apply("app-1", JOB, APPLICANT, now=T0)


def advance(workflow: ApplicationWorkflow, instance, *statuses):
    for offset, status in enumerate(statuses, start=1):
        result = workflow.update_status(instance, status, RECRUITER, now=T0 + timedelta(days=offset))
        assert result.success, result.error
        instance = result.instance
    return instance


class TestApplicationWorkflow:
    """Example-based tests for application status changes."""

    @pytest.fixture
    def workflow(self):
        return ApplicationWorkflow()

    def test_apply_creates_application_in_applied(self, workflow):
        application = new_application(workflow)

        assert application.current_state == ApplicationStatus.APPLIED
        assert application.owner_id == STUDENT_ID
        assert application.organization_id == ORG_ID
        assert application.history[0].actor_id == STUDENT_ID

    def test_full_happy_path(self, workflow):
        application = advance(
            workflow,
            new_application(workflow),
            ApplicationStatus.SCREENING,
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.INTERVIEWED,
            ApplicationStatus.SELECTED,
        )

        assert application.current_state == ApplicationStatus.SELECTED
        assert workflow.is_terminal(application)
        assert [entry.to_state for entry in application.history] == [
            "applied", "screening", "shortlisted", "interviewed", "selected",
        ]

    def test_student_cannot_select(self, workflow):
        interviewed = advance(
            workflow,
            new_application(workflow),
            ApplicationStatus.SCREENING,
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.INTERVIEWED,
        )

        result = workflow.transition(interviewed, ApplicationAction.SELECT, STUDENT)
        assert not result.success
        assert result.error.kind == ErrorKind.FORBIDDEN

        via_status = workflow.update_status(interviewed, ApplicationStatus.SELECTED, STUDENT)
        assert via_status.error.kind == ErrorKind.FORBIDDEN

    def test_recruiter_from_other_organization_is_forbidden(self, workflow):
        result = workflow.update_status(new_application(workflow), ApplicationStatus.SCREENING, OUTSIDE_RECRUITER)

        assert result.error.kind == ErrorKind.FORBIDDEN

    @pytest.mark.parametrize("actor", [RECRUITER, TPO, ADMIN])
    def test_staff_of_owning_organization_may_reject_early(self, workflow, actor):
        result = workflow.update_status(new_application(workflow), ApplicationStatus.REJECTED, actor, feedback="Role filled")

        assert result.success
        assert result.instance.current_state == ApplicationStatus.REJECTED
        assert result.instance.history[-1].note == "Role filled"

    def test_same_status_is_no_op(self, workflow):
        screening = advance(workflow, new_application(workflow), ApplicationStatus.SCREENING)

        result = workflow.update_status(screening, ApplicationStatus.SCREENING, RECRUITER)

        assert result.error.kind == ErrorKind.NO_OP_TRANSITION
        assert result.error.state == "screening"

    def test_skipping_stages_is_illegal(self, workflow):
        result = workflow.update_status(new_application(workflow), ApplicationStatus.INTERVIEWED, RECRUITER)

        assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION

    def test_moving_back_to_applied_is_illegal(self, workflow):
        screening = advance(workflow, new_application(workflow), ApplicationStatus.SCREENING)

        result = workflow.update_status(screening, ApplicationStatus.APPLIED, RECRUITER)

        assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION

    def test_unknown_status_is_illegal(self, workflow):
        result = workflow.update_status(new_application(workflow), "hired", RECRUITER)

        assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION

    @pytest.mark.parametrize("statuses", [(), (ApplicationStatus.SCREENING,)])
    def test_owner_can_withdraw_early(self, workflow, statuses):
        application = advance(workflow, new_application(workflow), *statuses)

        result = workflow.withdraw(application, STUDENT)

        assert result.success
        assert result.instance.current_state == ApplicationStatus.WITHDRAWN

    def test_other_student_cannot_withdraw(self, workflow):
        result = workflow.withdraw(new_application(workflow), OTHER_STUDENT)

        assert result.error.kind == ErrorKind.FORBIDDEN

    def test_recruiter_cannot_withdraw(self, workflow):
        result = workflow.withdraw(new_application(workflow), RECRUITER)

        assert result.error.kind == ErrorKind.FORBIDDEN

    def test_withdraw_after_shortlisting_is_illegal(self, workflow):
        shortlisted = advance(
            workflow, new_application(workflow), ApplicationStatus.SCREENING, ApplicationStatus.SHORTLISTED
        )

        result = workflow.withdraw(shortlisted, STUDENT)

        assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION

    def test_rejected_application_cannot_be_reopened_or_rerejected(self, workflow):
        rejected = workflow.update_status(new_application(workflow), ApplicationStatus.REJECTED, RECRUITER).instance

        for status in ApplicationStatus:
            result = workflow.update_status(rejected, status, RECRUITER)
            assert not result.success
        assert workflow.update_status(rejected, ApplicationStatus.SCREENING, RECRUITER).error.kind == (
            ErrorKind.ILLEGAL_TRANSITION
        )
        assert workflow.transition(rejected, ApplicationAction.REJECT, RECRUITER).error.kind == (
            ErrorKind.ILLEGAL_TRANSITION
        )
        assert workflow.update_status(rejected, ApplicationStatus.REJECTED, RECRUITER).error.kind == (
            ErrorKind.NO_OP_TRANSITION
        )

    def test_timeline_projects_history(self, workflow):
        application = advance(
            workflow, new_application(workflow), ApplicationStatus.SCREENING, ApplicationStatus.SHORTLISTED
        )

        timeline = workflow.timeline(application)

        assert [item.label for item in timeline] == ["Application submitted", "Under Review", "Shortlisted"]
        assert timeline[0].description == "Your application was successfully submitted"
        assert timeline[2].description == "Congratulations! You have been shortlisted"
        assert [item.timestamp for item in timeline] == [entry.timestamp for entry in application.history]

    def test_timeline_for_withdrawn_application(self, workflow):
        withdrawn = workflow.withdraw(new_application(workflow), STUDENT, note="Accepted another offer").instance

        timeline = workflow.timeline(withdrawn)

        assert timeline[-1].status == "withdrawn"
        assert timeline[-1].label == "Withdrawn"
        assert timeline[-1].note == "Accepted another offer"

    def test_milestones(self, workflow):
        application = advance(
            workflow,
            new_application(workflow),
            ApplicationStatus.SCREENING,
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.INTERVIEWED,
            ApplicationStatus.REJECTED,
        )

        milestones = workflow.milestones(application)

        assert milestones.applied_at == T0
        assert milestones.screening_at == T0 + timedelta(days=1)
        assert milestones.shortlisted_at == T0 + timedelta(days=2)
        assert milestones.interviewed_at == T0 + timedelta(days=3)
        assert milestones.result_at == T0 + timedelta(days=4)
        assert milestones.withdrawn_at is None


class TestApplicationWorkflowProperties:
    """Property-based tests for application workflow invariants."""

    def test_terminal_states_have_no_outgoing_edges(self):
        """
        Property: Terminal states are dead ends

        selected, rejected and withdrawn have no edges in the transition table.
        """
        for state in (ApplicationStatus.SELECTED, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN):
            assert APPLICATION_WORKFLOW.is_terminal(state)
            assert APPLICATION_WORKFLOW.outgoing(state) == []

    @given(
        steps=st.lists(
            st.tuples(st.sampled_from(list(ApplicationAction)), actor_strategy()),
            min_size=1,
            max_size=12,
        )
    )
    @settings(max_examples=75, deadline=None)
    def test_history_grows_by_one_per_success(self, steps):
        """
        Property: Append-only history

        For any sequence of requests:
        1. A success adds exactly one history entry and keeps earlier entries intact
        2. A failure leaves the instance untouched
        3. Once terminal, every further request fails
        """
        workflow = ApplicationWorkflow()
        instance = new_application(workflow)

        for action, actor in steps:
            was_terminal = workflow.is_terminal(instance)
            result = workflow.transition(instance, action, actor)

            if result.success:
                assert not was_terminal
                updated = result.instance
                assert len(updated.history) == len(instance.history) + 1
                assert updated.history[:-1] == instance.history
                assert updated.history[-1].from_state == instance.current_state
                assert updated.history[-1].to_state == updated.current_state
                assert updated.version == instance.version + 1
                instance = updated
            else:
                assert result.instance is None
                assert result.error is not None

    @given(
        status=st.sampled_from([ApplicationStatus.SELECTED, ApplicationStatus.REJECTED]),
        action=st.sampled_from(list(ApplicationAction)),
        actor=actor_strategy(),
    )
    @settings(max_examples=50, deadline=None)
    def test_terminal_replay_always_fails(self, status, action, actor):
        """
        Property: Idempotence from terminal states

        Replaying any action against a finalized application never succeeds.
        """
        workflow = ApplicationWorkflow()
        instance = new_application(workflow)
        if status == ApplicationStatus.SELECTED:
            instance = advance(
                workflow, instance,
                ApplicationStatus.SCREENING, ApplicationStatus.SHORTLISTED,
                ApplicationStatus.INTERVIEWED, ApplicationStatus.SELECTED,
            )
        else:
            instance = advance(workflow, instance, ApplicationStatus.REJECTED)

        for _ in range(2):
            result = workflow.transition(instance, action, actor)
            assert not result.success
            assert result.error.kind == ErrorKind.ILLEGAL_TRANSITION
