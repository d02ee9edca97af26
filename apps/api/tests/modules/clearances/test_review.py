"""
Unit tests for applying reviewer decisions.

These tests cover:
- Role and scope checks, in order
- Already decided slots and closed applications
- Status recomputation after each decision
- No change to the application when a decision is refused
"""

import pytest

from app.modules.clearances.approval_matrix import REQUIRED_AUTHORITIES
from app.modules.clearances.errors import (
    AlreadyDecidedError,
    ApplicationClosedError,
    ClearanceValidationError,
    ScopeMismatchError,
    UnauthorizedReviewerError,
)
from app.modules.clearances.models import ApprovalDecision, AuthorityRole, ClearanceStatus
from app.modules.clearances.review import apply_decision


def snapshot(application):
    return (
        application.status,
        application.completed_at,
        [(a.authority_role, a.decision, a.decided_by, a.comment) for a in application.approvals],
    )


class TestAuthorization:
    """Role and scope checks."""

    def test_wrong_role_is_unauthorized(self, application, actor_for, student):
        librarian = actor_for(AuthorityRole.CHIEF_LIBRARIAN, student)
        before = snapshot(application)

        with pytest.raises(UnauthorizedReviewerError) as exc_info:
            apply_decision(
                application, AuthorityRole.DINING_OFFICER, librarian, ApprovalDecision.APPROVED
            )

        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "UNAUTHORIZED"
        assert snapshot(application) == before

    def test_student_cannot_decide(self, application, make_actor):
        student_actor = make_actor("student", department="Software Engineering")

        with pytest.raises(UnauthorizedReviewerError):
            apply_decision(
                application, AuthorityRole.DEPARTMENT_HEAD, student_actor, "approved"
            )

    def test_department_head_other_department_scope_mismatch(
        self, make_application, make_actor, civil_student
    ):
        """A Software Engineering head cannot decide for a Civil Engineering student."""
        application = make_application(civil_student)
        head = make_actor(AuthorityRole.DEPARTMENT_HEAD, department="Software Engineering")
        before = snapshot(application)

        with pytest.raises(ScopeMismatchError) as exc_info:
            apply_decision(application, AuthorityRole.DEPARTMENT_HEAD, head, "approved")

        assert exc_info.value.error_code == "SCOPE_MISMATCH"
        assert exc_info.value.message == "You can only review clearances for your department"
        assert snapshot(application) == before

    def test_registrar_other_college_scope_mismatch(
        self, make_application, make_actor, civil_student
    ):
        application = make_application(civil_student)
        registrar = make_actor(AuthorityRole.REGISTRAR_ADMIN, college="engineering")

        with pytest.raises(ScopeMismatchError):
            apply_decision(application, AuthorityRole.REGISTRAR_ADMIN, registrar, "rejected")

    def test_role_checked_before_scope(self, make_application, make_actor, civil_student):
        """An out-of-scope actor with the wrong role gets Unauthorized, not ScopeMismatch."""
        application = make_application(civil_student)
        head = make_actor(AuthorityRole.DEPARTMENT_HEAD, department="Software Engineering")

        with pytest.raises(UnauthorizedReviewerError):
            apply_decision(application, AuthorityRole.REGISTRAR_ADMIN, head, "approved")

    def test_unknown_authority_role(self, application, make_actor):
        actor = make_actor("chief_librarian")

        with pytest.raises(ClearanceValidationError):
            apply_decision(application, "head_chef", actor, "approved")


class TestDecisionValues:
    """Only approved or rejected may be recorded."""

    @pytest.mark.parametrize("decision", ["pending", "maybe", ApprovalDecision.PENDING])
    def test_invalid_decision(self, application, actor_for, student, decision):
        actor = actor_for(AuthorityRole.COST_SHARING, student)
        before = snapshot(application)

        with pytest.raises(ClearanceValidationError) as exc_info:
            apply_decision(application, AuthorityRole.COST_SHARING, actor, decision)

        assert exc_info.value.message == "Status must be approved or rejected"
        assert snapshot(application) == before

    def test_records_actor_time_and_comment(self, application, actor_for, student, decided_at):
        actor = actor_for(AuthorityRole.DORMITORY_PROCTOR, student)

        apply_decision(
            application,
            AuthorityRole.DORMITORY_PROCTOR,
            actor,
            "approved",
            comment="  Room key returned ",
            decided_at=decided_at,
        )

        approval = application.approval_for(AuthorityRole.DORMITORY_PROCTOR)
        assert approval.decision == ApprovalDecision.APPROVED
        assert approval.decided_by == actor.id
        assert approval.decided_at == decided_at
        assert approval.comment == "Room key returned"

    def test_blank_comment_stored_as_none(self, application, actor_for, student):
        actor = actor_for(AuthorityRole.STUDENT_AFFAIRS, student)

        apply_decision(application, AuthorityRole.STUDENT_AFFAIRS, actor, "approved", comment=" ")

        assert application.approval_for(AuthorityRole.STUDENT_AFFAIRS).comment is None


class TestStatusProgression:
    """Status after sequences of decisions."""

    def test_first_approval_moves_to_in_progress(self, application, decide):
        decide(application, AuthorityRole.CHIEF_LIBRARIAN, ApprovalDecision.APPROVED)
        assert application.status == ClearanceStatus.IN_PROGRESS

    def test_seven_of_eight_is_in_progress(self, application, decide):
        for role in REQUIRED_AUTHORITIES[:-1]:
            decide(application, role, ApprovalDecision.APPROVED)

        assert application.status == ClearanceStatus.IN_PROGRESS
        assert application.completed_at is None

    def test_all_approved_completes(self, completed_application, decided_at):
        assert completed_application.status == ClearanceStatus.COMPLETED
        assert completed_application.completed_at == decided_at

    def test_rejection_ends_application(self, application, decide):
        decide(application, AuthorityRole.CHIEF_LIBRARIAN, ApprovalDecision.APPROVED)
        decide(application, AuthorityRole.COST_SHARING, ApprovalDecision.REJECTED)

        assert application.status == ClearanceStatus.REJECTED
        assert application.is_active is False


class TestAlreadyDecided:
    """Repeated and late decisions."""

    def test_second_decision_on_slot_refused(self, application, decide):
        decide(application, AuthorityRole.DINING_OFFICER, ApprovalDecision.APPROVED)
        before = snapshot(application)

        with pytest.raises(AlreadyDecidedError) as exc_info:
            decide(application, AuthorityRole.DINING_OFFICER, ApprovalDecision.APPROVED)

        assert exc_info.value.error_code == "ALREADY_DECIDED"
        assert exc_info.value.status_code == 409
        assert snapshot(application) == before

    def test_cannot_flip_rejection_to_approval(self, application, decide):
        decide(application, AuthorityRole.DINING_OFFICER, ApprovalDecision.REJECTED)

        with pytest.raises(AlreadyDecidedError):
            decide(application, AuthorityRole.DINING_OFFICER, ApprovalDecision.APPROVED)

        assert application.status == ClearanceStatus.REJECTED

    def test_pending_slot_on_rejected_application_closed(self, application, decide):
        """Offices that never decided cannot act once another office rejected."""
        decide(application, AuthorityRole.CHIEF_LIBRARIAN, ApprovalDecision.REJECTED)
        before = snapshot(application)

        with pytest.raises(ApplicationClosedError) as exc_info:
            decide(application, AuthorityRole.REGISTRAR_ADMIN, ApprovalDecision.APPROVED)

        assert exc_info.value.error_code == "APPLICATION_CLOSED"
        assert isinstance(exc_info.value, AlreadyDecidedError)
        assert snapshot(application) == before

    def test_completed_application_refuses_decisions(self, completed_application, decide):
        with pytest.raises(AlreadyDecidedError):
            decide(completed_application, AuthorityRole.CHIEF_LIBRARIAN, ApprovalDecision.REJECTED)

        assert completed_application.status == ClearanceStatus.COMPLETED


class TestStatusIsDerived:
    """The overall status cannot be assigned directly."""

    def test_status_has_no_setter(self, application):
        with pytest.raises(AttributeError):
            application.status = ClearanceStatus.COMPLETED

        assert application.status == ClearanceStatus.PENDING
